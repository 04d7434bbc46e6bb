"""Module api: inline documentation for warden/server/api.py."""
#
# PURPOSE:
# Builds the FastAPI application served by `warden serve`.
#
# INTEGRATION:
# - Used by: warden/cli.py
# - Depends on: warden/server/routers/sessions.py, warden/server/state.py
#

# warden/server/api.py
# FastAPI application exposing the session registry over HTTP.

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from warden.engine.registry import SessionRegistry
from warden.errors import WardenError
from warden.server.routers import sessions
from warden.server.state import get_state

logger = logging.getLogger(__name__)


def create_app(registry: Optional[SessionRegistry] = None) -> FastAPI:
    """
    Build the API application.

    A registry passed in (tests, embedding) replaces the process-wide one.
    Every worker still running when the application shuts down is killed.
    """
    if registry is not None:
        get_state().set_registry(registry)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await get_state().registry.aclose()

    app = FastAPI(
        title="Warden API",
        description="Worker session supervisor",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.exception_handler(WardenError)
    async def warden_error_handler(request: Request, exc: WardenError):
        logger.error(f"[API] {exc.code.value}: {exc.message}", extra={"details": exc.details})
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    v1_router = APIRouter(prefix="/v1", responses={404: {"description": "Not found"}})

    @v1_router.get("/ping")
    async def ping():
        return {"status": "ok"}

    v1_router.include_router(sessions.router)
    app.include_router(v1_router)
    return app
