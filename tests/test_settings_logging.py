"""Tests for settings and structured logging."""
from datetime import date, datetime, time, timedelta

import structlog

from coachcal.config import Settings, get_settings
from coachcal.core.logging import add_log_context, clear_log_context, configure_logging, get_logger
from coachcal.engine.clock import UTC
from coachcal.engine.lesson_builder import build_instant

NEW_YORK = "America/New_York"


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self):
        """Test default values."""
        settings = Settings()

        assert settings.app_name == "Coach Calendar Engine"
        assert settings.default_lesson_duration_minutes == 60
        assert settings.min_lesson_duration_minutes == 15
        assert settings.max_lesson_duration_minutes == 480
        assert settings.calendar_range_max_days == 42
        assert settings.compliance_window_weeks == [4, 6, 8]
        assert settings.dst_warnings_enabled is True

    def test_cached(self):
        """Test get_settings returns one shared instance."""
        assert get_settings() is get_settings()

    def test_env_override(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("DEFAULT_LESSON_DURATION_MINUTES", "45")
        now = datetime(2024, 1, 1, tzinfo=UTC)
        start, end = build_instant(date(2024, 1, 3), time(14, 0), NEW_YORK, now=now)
        assert end - start == timedelta(minutes=45)

    def test_window_list_override(self, monkeypatch):
        """Test list settings parse from JSON."""
        monkeypatch.setenv("COMPLIANCE_WINDOW_WEEKS", "[2, 4]")
        assert get_settings().compliance_window_weeks == [2, 4]


class TestLogging:
    """Test structlog helpers."""

    def test_configure_and_log(self, capsys):
        """Test configured loggers emit JSON lines with the event name."""
        configure_logging()
        get_logger("coachcal.test").info("calendar_test_event", client_id="c1")

        out = capsys.readouterr().out
        assert "calendar_test_event" in out
        assert '"client_id": "c1"' in out

    def test_log_context(self):
        """Test bound context is visible until cleared."""
        add_log_context(request_id="req-1")
        assert structlog.contextvars.get_contextvars()["request_id"] == "req-1"

        clear_log_context()
        assert "request_id" not in structlog.contextvars.get_contextvars()

    def test_console_renderer(self, capsys, monkeypatch):
        """Test the console layout is used when JSON logs are disabled."""
        monkeypatch.setenv("LOG_JSON", "false")
        configure_logging()
        get_logger("coachcal.test").warning("lesson_instance_skipped", reason="conflict")

        out = capsys.readouterr().out
        assert "lesson_instance_skipped" in out
        assert "reason=conflict" in out
        assert not out.lstrip().startswith("{")
        configure_logging(json_logs=True)
