# warden/toolkit/executable.py
# Strategies for locating the worker executable a session launches.

from __future__ import annotations

import logging
import os
import shutil
from typing import Callable, List

from warden.errors import ErrorCode, SpawnError

logger = logging.getLogger(__name__)

# Returns the command prefix; the session argv is appended to it.
ExecutableResolver = Callable[[], List[str]]


def binary_resolver(binary: str) -> ExecutableResolver:
    """
    Resolve a worker program by explicit path or PATH lookup.

    Resolution happens on every call so a worker installed after startup is
    picked up without a restart.
    """

    def resolve() -> List[str]:
        if os.sep in binary or (os.altsep and os.altsep in binary):
            if os.path.isfile(binary) and os.access(binary, os.X_OK):
                return [os.path.abspath(binary)]
        else:
            found = shutil.which(binary)
            if found:
                return [found]
        logger.warning(f"Worker executable '{binary}' not found or not executable")
        raise SpawnError(
            f"worker executable '{binary}' not found",
            code=ErrorCode.TOOL_NOT_INSTALLED,
            details={"binary": binary},
        )

    return resolve


def static_resolver(*parts: str) -> ExecutableResolver:
    """Fixed command prefix, e.g. static_resolver(sys.executable, "worker.py")."""
    if not parts:
        raise ValueError("static_resolver needs at least the program to run")
    prefix = list(parts)

    def resolve() -> List[str]:
        return list(prefix)

    return resolve
