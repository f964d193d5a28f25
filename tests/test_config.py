"""Tests for configuration module."""

from pathlib import Path

from taskpilot.core.config import Settings


def test_default_settings():
    """Settings load with defaults."""
    settings = Settings(
        _env_file=None,  # Don't load .env in tests
    )
    assert settings.data_dir == Path("data")
    assert settings.request_timeout == 120.0


def test_derived_paths():
    """Paths combine data_dir with file names."""
    settings = Settings(
        data_dir=Path("/tmp/test"),
        db_name="test.db",
        settings_file="llm.yaml",
        _env_file=None,
    )
    assert settings.db_path == Path("/tmp/test/test.db")
    assert settings.settings_path == Path("/tmp/test/llm.yaml")
    assert settings.log_path == Path("/tmp/test/taskpilot.log")


def test_env_prefix(monkeypatch):
    """Environment variables use the TASKPILOT_ prefix."""
    monkeypatch.setenv("TASKPILOT_API_KEY", "from-env")
    monkeypatch.setenv("TASKPILOT_REQUEST_TIMEOUT", "5")
    settings = Settings(_env_file=None)
    assert settings.api_key == "from-env"
    assert settings.request_timeout == 5.0
