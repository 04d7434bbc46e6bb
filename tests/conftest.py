"""Pytest configuration for Warden."""
import os
import sys
from pathlib import Path

import pytest

FAKE_WORKER = Path(__file__).parent / "fixtures" / "fake_worker.py"


def pytest_configure():
    # Keep test runs off the user's log file.
    os.environ.setdefault("WARDEN_LOG_FILE_ENABLED", "false")


@pytest.fixture
def fake_worker_resolver():
    from warden.toolkit.executable import static_resolver

    return static_resolver(sys.executable, str(FAKE_WORKER))


@pytest.fixture(autouse=True)
def reset_config():
    from warden.base.config import set_config
    from warden.server.state import ApplicationState

    yield
    set_config(None)
    ApplicationState.reset()
