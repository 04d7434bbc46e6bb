"""Module errors: inline documentation for warden/errors.py."""
#
# PURPOSE:
# Structured error taxonomy: error codes with their HTTP status and typed session errors.
#
# ERROR CODE FORMAT:
# - ARGV_XXX: worker argument validation errors
# - TOOL_XXX: worker executable / process errors
# - SESSION_XXX: session lifecycle errors
# - CONFIG_XXX: configuration errors
# - SYSTEM_XXX: everything else
#
# USAGE:
#   from warden.errors import NotFoundError
#
#   raise NotFoundError(f"session {session_id} not found",
#                       details={"session_id": session_id})
#

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    # Argument Errors
    ARGV_INVALID = "ARGV_001"

    # Tool Errors
    TOOL_NOT_INSTALLED = "TOOL_001"
    TOOL_EXEC_FAILED = "TOOL_002"
    TOOL_WAIT_FAILED = "TOOL_003"

    # Session Errors
    SESSION_NOT_FOUND = "SESSION_001"
    SESSION_SIGNAL_FAILED = "SESSION_002"

    # Config Errors
    CONFIG_INVALID = "CONFIG_001"

    # System Errors
    SYSTEM_INTERNAL_ERROR = "SYSTEM_001"


class WardenError(Exception):
    """
    Base exception for Warden with structured error information.

    Attributes:
        code: ErrorCode enum value (e.g., "SESSION_001")
        message: Human-readable error message
        details: Optional dictionary with additional context
        http_status: Suggested HTTP status code for API responses
    """

    HTTP_STATUS_MAP: Dict[ErrorCode, int] = {
        ErrorCode.ARGV_INVALID: 400,           # Bad Request
        ErrorCode.TOOL_NOT_INSTALLED: 503,     # Service Unavailable
        ErrorCode.TOOL_EXEC_FAILED: 500,
        ErrorCode.TOOL_WAIT_FAILED: 500,
        ErrorCode.SESSION_NOT_FOUND: 404,      # Not Found
        ErrorCode.SESSION_SIGNAL_FAILED: 409,  # Conflict
        ErrorCode.CONFIG_INVALID: 500,
        ErrorCode.SYSTEM_INTERNAL_ERROR: 500,
    }

    default_code: ErrorCode = ErrorCode.SYSTEM_INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
        http_status: Optional[int] = None,
    ):
        self.code = code or self.default_code
        self.message = message
        self.details = details or {}
        self.http_status = http_status or self.HTTP_STATUS_MAP.get(self.code, 500)

        super().__init__(f"[{self.code.value}] {message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "http_status": self.http_status,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class ValidationError(WardenError):
    """The argument vector was rejected by the worker's argument schema."""

    default_code = ErrorCode.ARGV_INVALID


class SpawnError(WardenError):
    """The worker executable could not be resolved or started."""

    default_code = ErrorCode.TOOL_EXEC_FAILED


class NotFoundError(WardenError):
    """No session is registered under the requested identifier."""

    default_code = ErrorCode.SESSION_NOT_FOUND


class SignalError(WardenError):
    """A termination signal could not be delivered to the worker process."""

    default_code = ErrorCode.SESSION_SIGNAL_FAILED


class WaitError(WardenError):
    """
    The exit of the worker process could not be observed.

    Never raised to callers: the completion waiter records it into the
    session's Completion instead.
    """

    default_code = ErrorCode.TOOL_WAIT_FAILED


__all__ = [
    "ErrorCode",
    "WardenError",
    "ValidationError",
    "SpawnError",
    "NotFoundError",
    "SignalError",
    "WaitError",
]
