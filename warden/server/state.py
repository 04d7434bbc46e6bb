from __future__ import annotations

import logging
from typing import Optional

from warden.engine.registry import SessionRegistry

logger = logging.getLogger(__name__)


class ApplicationState:
    _instance: Optional["ApplicationState"] = None

    @classmethod
    def instance(cls) -> "ApplicationState":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None

    def __init__(self, registry: Optional[SessionRegistry] = None):
        self._registry = registry

    @property
    def registry(self) -> SessionRegistry:
        if self._registry is None:
            self._registry = SessionRegistry.from_config()
            logger.info("Session registry initialised from configuration")
        return self._registry

    def set_registry(self, registry: SessionRegistry) -> None:
        self._registry = registry


def get_state() -> ApplicationState:
    return ApplicationState.instance()


def get_registry() -> SessionRegistry:
    """FastAPI dependency returning the process-wide session registry."""
    return get_state().registry
