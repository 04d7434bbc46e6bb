"""Module registry: inline documentation for warden/engine/registry.py."""
#
# PURPOSE:
# Process-wide map of session id to SessionSupervisor.
#
# KEY RESPONSIBILITIES:
# - Validate argv before anything is spawned
# - Issue unique session ids and register started sessions
# - Route stop/get/list lookups to the owning supervisor
# - Kill still-running workers on shutdown
#
# INTEGRATION:
# - Used by: warden/server/state.py, warden/server/routers/sessions.py
# - Depends on: warden/engine/supervisor.py, warden/engine/rwlock.py, warden/toolkit/worker_args.py
#

# warden/engine/registry.py
# Concurrency-safe map of session id -> SessionSupervisor.

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Callable, Dict, Optional, Sequence, Set

from warden.base.config import WardenConfig, get_config
from warden.engine.models import Completion, SessionSnapshot
from warden.engine.rwlock import AsyncRWLock
from warden.engine.supervisor import SessionSupervisor
from warden.errors import NotFoundError, ValidationError, WardenError
from warden.toolkit.executable import ExecutableResolver, binary_resolver
from warden.toolkit.worker_args import validate_argv

logger = logging.getLogger(__name__)

# Raises (ideally ValidationError) when argv is not acceptable to the worker.
ArgvValidator = Callable[[Sequence[str]], object]


class SessionRegistry:
    """
    Registry of every session started in this process.

    The map is guarded by one reader/writer lock: lookups share the read side,
    insertion takes the write side. Spawning, signalling and snapshotting
    happen outside the lock. Sessions are kept for the registry's lifetime.
    """

    def __init__(
        self,
        resolver: ExecutableResolver,
        validator: Optional[ArgvValidator] = validate_argv,
    ):
        self._resolver = resolver
        self._validator = validator
        self._sessions: Dict[str, SessionSupervisor] = {}
        self._issued: Set[str] = set()
        self._lock = AsyncRWLock()

    @classmethod
    def from_config(cls, config: Optional[WardenConfig] = None) -> "SessionRegistry":
        cfg = config or get_config()
        return cls(
            resolver=binary_resolver(cfg.worker.binary),
            validator=validate_argv if cfg.worker.validate_args else None,
        )

    def _validate(self, argv: Sequence[str]) -> None:
        if self._validator is None:
            return
        try:
            self._validator(argv)
        except WardenError:
            raise
        except Exception as exc:
            raise ValidationError(str(exc), details={"argv": list(argv)}) from exc

    def _new_session_id(self) -> str:
        # No await between check and insert, so this is atomic on the loop.
        while True:
            session_id = str(uuid.uuid4())
            if session_id not in self._issued:
                self._issued.add(session_id)
                return session_id

    async def create(self, client: str, argv: Sequence[str]) -> str:
        """
        Validate argv, spawn a supervised worker and register it.

        Raises ValidationError before anything is spawned, or SpawnError if the
        worker could not be started. Either way nothing is registered.
        """
        if isinstance(argv, (str, bytes)):
            raise ValidationError("argv must be a sequence of strings, not a single string")
        argv = list(argv)
        self._validate(argv)

        session_id = self._new_session_id()
        supervisor = await SessionSupervisor.start(client, session_id, argv, self._resolver)
        try:
            async with self._lock.write():
                self._sessions[session_id] = supervisor
        except BaseException:
            supervisor.kill()
            raise

        logger.info(f"[{session_id}] session registered for client {client}")
        return session_id

    async def _lookup(self, session_id: str) -> Optional[SessionSupervisor]:
        async with self._lock.read():
            return self._sessions.get(session_id)

    async def supervisor(self, session_id: str) -> SessionSupervisor:
        supervisor = await self._lookup(session_id)
        if supervisor is None:
            raise NotFoundError(f"session {session_id} not found", details={"session_id": session_id})
        return supervisor

    async def stop(self, session_id: str) -> None:
        """Send SIGTERM to a session's worker; returns once the signal is sent."""
        supervisor = await self.supervisor(session_id)
        logger.info(f"[{session_id}] stop requested")
        supervisor.stop()

    async def get(self, session_id: str) -> Optional[SessionSnapshot]:
        supervisor = await self._lookup(session_id)
        if supervisor is None:
            return None
        return supervisor.snapshot()

    async def list(self) -> Dict[str, SessionSnapshot]:
        async with self._lock.read():
            supervisors = dict(self._sessions)
        return {session_id: sup.snapshot() for session_id, sup in supervisors.items()}

    async def wait(self, session_id: str) -> Completion:
        supervisor = await self.supervisor(session_id)
        return await supervisor.wait()

    async def count(self) -> int:
        async with self._lock.read():
            return len(self._sessions)

    async def aclose(self) -> None:
        """Kill every worker that is still running and wait for its tasks."""
        async with self._lock.read():
            supervisors = list(self._sessions.values())
        running = [sup for sup in supervisors if sup.is_running]
        if running:
            logger.info(f"Shutting down {len(running)} running session(s)")
        results = await asyncio.gather(
            *(sup.aclose() for sup in supervisors), return_exceptions=True
        )
        for sup, result in zip(supervisors, results):
            if isinstance(result, Exception):
                logger.error(f"[{sup.session_id}] close failed: {result}")

    async def __aenter__(self) -> "SessionRegistry":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
