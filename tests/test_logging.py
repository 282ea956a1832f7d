"""Tests for the library logging setup."""

from __future__ import annotations

import pytest

from budtelemetry.commons.constants import LogLevel
from budtelemetry.commons.logging import LoggingSettings, configure_logging, get_logger


class TestLoggingSettings:
    """Tests for LoggingSettings."""

    def test_defaults(self) -> None:
        """Test JSON output at INFO level by default."""
        settings = LoggingSettings()
        assert settings.level is LogLevel.INFO
        assert settings.renderer == "json"

    def test_read_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the BUDTELEMETRY_LOG_ prefix."""
        monkeypatch.setenv("BUDTELEMETRY_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("BUDTELEMETRY_LOG_RENDERER", "console")
        settings = LoggingSettings()
        assert settings.level is LogLevel.DEBUG
        assert settings.renderer == "console"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_returns_applied_settings(self) -> None:
        """Test that explicit settings are returned unchanged."""
        settings = LoggingSettings(level=LogLevel.WARNING, renderer="console")
        assert configure_logging(settings) is settings

    def test_logger_can_log(self) -> None:
        """Test that a configured logger emits without errors."""
        configure_logging(LoggingSettings())
        get_logger(__name__).info("budtelemetry test message")
