# ============================================================================
# warden/base/config.py
# Environment-driven configuration and logging setup
# ============================================================================
#
# PURPOSE:
# Every tunable setting, read once from WARDEN_* environment variables.
#
# KEY CONCEPTS:
# 1. Frozen dataclasses per concern (worker, logging) inside WardenConfig
# 2. get_config()/set_config(): one process-wide instance, replaceable in tests
# 3. setup_logging(): stream handler plus an optional rotating log file
#
# ============================================================================

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from warden.errors import ErrorCode, WardenError

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise WardenError(
            f"{name} must be an integer, got {raw!r}",
            code=ErrorCode.CONFIG_INVALID,
            details={"variable": name, "value": raw},
        ) from exc


@dataclass(frozen=True)
class WorkerConfig:
    # Program name (looked up on PATH) or explicit path of the worker executable
    binary: str = "legba"
    # Check argv against the worker's argument schema before spawning
    validate_args: bool = True


@dataclass(frozen=True)
class LogConfig:
    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    file_enabled: bool = False
    file_path: Path = field(default_factory=lambda: Path.home() / ".warden" / "warden.log")
    max_file_size_mb: int = 10
    backup_count: int = 5


@dataclass
class WardenConfig:
    worker: WorkerConfig = field(default_factory=WorkerConfig)
    log: LogConfig = field(default_factory=LogConfig)
    debug: bool = False
    api_host: str = "127.0.0.1"
    api_port: int = 8666

    @classmethod
    def from_env(cls) -> "WardenConfig":
        worker = WorkerConfig(
            binary=os.getenv("WARDEN_WORKER_BIN", "legba"),
            validate_args=_env_bool("WARDEN_VALIDATE_ARGS", "true"),
        )

        log_file = os.getenv("WARDEN_LOG_FILE")
        log = LogConfig(
            level=os.getenv("WARDEN_LOG_LEVEL", "INFO"),
            file_enabled=_env_bool("WARDEN_LOG_FILE_ENABLED", "false"),
            **({"file_path": Path(log_file)} if log_file else {}),
        )

        return cls(
            worker=worker,
            log=log,
            debug=_env_bool("WARDEN_DEBUG", "false"),
            api_host=os.getenv("WARDEN_API_HOST", "127.0.0.1"),
            api_port=_env_int("WARDEN_API_PORT", "8666"),
        )


_config: Optional[WardenConfig] = None


def get_config() -> WardenConfig:
    global _config
    if _config is None:
        _config = WardenConfig.from_env()
    return _config


def set_config(config: Optional[WardenConfig]) -> None:
    global _config
    _config = config


def setup_logging(config: Optional[WardenConfig] = None) -> None:
    cfg = config or get_config()

    level = getattr(logging, cfg.log.level.upper(), None)
    if not isinstance(level, int):
        raise WardenError(
            f"Unknown log level {cfg.log.level!r}",
            code=ErrorCode.CONFIG_INVALID,
            details={"level": cfg.log.level},
        )

    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if cfg.log.file_enabled:
        cfg.log.file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                cfg.log.file_path,
                maxBytes=cfg.log.max_file_size_mb * 1024 * 1024,
                backupCount=cfg.log.backup_count,
            )
        )

    logging.basicConfig(
        level=level,
        format=cfg.log.format,
        handlers=handlers,
        force=True,
    )
    logger.debug(f"Logging configured at {cfg.log.level.upper()}")
