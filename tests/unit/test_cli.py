"""Unit tests for the warden command line."""
from unittest.mock import patch

import pytest

from warden.cli import build_parser, main


def test_validate_accepts_good_argv(capsys):
    assert main(["validate", "--", "ssh", "--target", "10.0.0.1:22", "-U", "root"]) == 0
    assert capsys.readouterr().out.strip() == "ok"


def test_validate_rejects_bad_argv(capsys):
    assert main(["validate", "--", "ssh", "--list-plugins"]) == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("invalid:")


def test_command_is_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_serve_uses_config_defaults(monkeypatch):
    monkeypatch.setenv("WARDEN_API_PORT", "9100")
    with patch("uvicorn.run") as mock_run, patch("warden.cli.setup_logging") as mock_logging:
        assert main(["serve", "--host", "0.0.0.0"]) == 0
    _, kwargs = mock_run.call_args
    assert kwargs["host"] == "0.0.0.0"
    assert kwargs["port"] == 9100
    mock_logging.assert_called_once()
