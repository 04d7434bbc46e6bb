from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field, field_validator

from warden.engine.models import SessionSnapshot
from warden.engine.registry import SessionRegistry
from warden.errors import NotFoundError
from warden.server.state import get_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


class SessionRequest(BaseModel):
    argv: List[str] = Field(..., min_length=1, max_length=256)
    client: Optional[str] = Field(default=None, max_length=256)

    @field_validator("argv")
    @classmethod
    def validate_argv_items(cls, v: List[str]) -> List[str]:
        for idx, arg in enumerate(v):
            if "\x00" in arg:
                logger.warning(f"Session start rejected: NUL byte in argv[{idx}]")
                raise ValueError(f"argv[{idx}] contains a NUL byte")
        return v


class SessionCreated(BaseModel):
    session_id: str


class StopResponse(BaseModel):
    session_id: str
    status: str = "stopping"


def _client_identity(req: SessionRequest, request: Request) -> str:
    if req.client:
        return req.client
    if request.client is not None:
        return request.client.host
    return "unknown"


@router.post("", response_model=SessionCreated, status_code=201)
async def create_session(
    req: SessionRequest,
    request: Request,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionCreated:
    session_id = await registry.create(_client_identity(req, request), req.argv)
    return SessionCreated(session_id=session_id)


@router.get("", response_model=Dict[str, SessionSnapshot])
async def list_sessions(registry: SessionRegistry = Depends(get_registry)) -> Dict[str, SessionSnapshot]:
    return await registry.list()


@router.get("/{session_id}", response_model=SessionSnapshot)
async def get_session(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> SessionSnapshot:
    snapshot = await registry.get(session_id)
    if snapshot is None:
        raise NotFoundError(f"session {session_id} not found", details={"session_id": session_id})
    return snapshot


@router.post("/{session_id}/stop", response_model=StopResponse, status_code=202)
async def stop_session(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> StopResponse:
    await registry.stop(session_id)
    return StopResponse(session_id=session_id)
