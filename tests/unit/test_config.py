"""Tests for runtime config — env-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from logone.config import DEFAULT_FAILURE_KEYWORDS, DEFAULT_UNIT_NAME_PATTERN, LogoneConfig
from logone.errors import ConfigurationError, LogoneError, MalformedEventError, UnknownStreamError
from logone.models.config import VerbosityMode


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Isolate from the developer's LOGONE_* variables and .env file."""
    for name in ("LEVEL", "COLOR", "DEBUG", "LOG_LEVEL", "ERROR_LEVEL"):
        monkeypatch.delenv(f"LOGONE_{name}", raising=False)
    monkeypatch.chdir(tmp_path)


class TestLogoneConfig:
    def test_defaults(self):
        config = LogoneConfig()
        assert config.level == VerbosityMode.CARGO
        assert config.color is True
        assert config.error_level == 0
        assert config.unit_name_pattern == DEFAULT_UNIT_NAME_PATTERN
        assert config.failure_keywords == DEFAULT_FAILURE_KEYWORDS

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("LOGONE_LEVEL", "errors")
        monkeypatch.setenv("LOGONE_COLOR", "false")
        monkeypatch.setenv("LOGONE_ERROR_LEVEL", "1")
        config = LogoneConfig()
        assert config.level == VerbosityMode.ERRORS
        assert config.color is False
        assert config.error_level == 1

    def test_dotenv_file(self, tmp_path: Path):
        (tmp_path / ".env").write_text("LOGONE_LEVEL=verbose\n", encoding="utf-8")
        assert LogoneConfig().level == VerbosityMode.VERBOSE

    def test_invalid_level_rejected(self):
        with pytest.raises(ValidationError):
            LogoneConfig(level="loud")

    def test_effective_log_level(self):
        assert LogoneConfig().effective_log_level == "WARNING"
        assert LogoneConfig(log_level="info").effective_log_level == "INFO"
        assert LogoneConfig(debug=True).effective_log_level == "DEBUG"

    def test_cli_style_override(self):
        config = LogoneConfig().model_copy(update={"level": VerbosityMode.VERBOSE})
        assert config.level == VerbosityMode.VERBOSE


class TestErrors:
    def test_hierarchy(self):
        assert issubclass(MalformedEventError, LogoneError)
        assert issubclass(MalformedEventError, ValueError)
        assert issubclass(UnknownStreamError, KeyError)
        assert issubclass(ConfigurationError, LogoneError)

    def test_unknown_stream_carries_id(self):
        exc = UnknownStreamError(7)
        assert exc.stream_id == 7
        assert str(exc) == "Unknown stats stream id: 7"
