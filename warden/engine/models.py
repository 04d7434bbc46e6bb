"""Module models: inline documentation for warden/engine/models.py."""
#
# PURPOSE:
# Telemetry records (Statistics, Finding, Completion) and the SessionSnapshot
# returned by the registry and serialized by the HTTP layer.
#

# warden/engine/models.py
# Telemetry records produced from worker output and the read-only session snapshot.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Statistics:
    """Latest progress snapshot reported by the worker (overwritten, never summed)."""

    tasks: int = 0
    memory: str = ""
    targets: int = 0
    attempts: int = 0
    errors: int = 0
    done: int = 0
    done_percent: float = 0.0
    reqs_per_sec: float = 0.0


@dataclass(frozen=True)
class Finding:
    """One result ("loot") record extracted from a worker output line."""

    found_at: str
    plugin: str
    data: str
    target: Optional[str] = None


@dataclass(frozen=True)
class Completion:
    """Terminal exit record of a session."""

    exit_code: int
    error: Optional[str] = None
    completed_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def with_status(cls, exit_code: Optional[int]) -> "Completion":
        # Negative return codes mean the process was killed by a signal.
        if exit_code is None or exit_code < 0:
            exit_code = -1
        return cls(exit_code=exit_code)

    @classmethod
    def with_error(cls, error: str) -> "Completion":
        return cls(exit_code=-1, error=error)


class SessionState(str, Enum):
    STARTING = "starting"
    RUNNING = "running"
    COMPLETED = "completed"


class SessionSnapshot(BaseModel):
    """Point-in-time, read-only copy of a session."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    client: str
    argv: Tuple[str, ...]
    process_id: int
    started_at: datetime
    state: SessionState
    statistics: Statistics
    findings: List[Finding]
    raw_output: List[str]
    completion: Optional[Completion] = None
