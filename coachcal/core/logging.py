"""Structured logging for the calendar engine.

Engine modules only emit events through ``get_logger(__name__)``; the
embedding application decides how they are rendered by calling
``configure_logging()`` once at start-up.
"""
import logging
import sys
from typing import Any

import structlog

from coachcal.config.settings import get_settings


def _log_level() -> int:
    return logging.DEBUG if get_settings().debug else logging.INFO


def configure_logging(json_logs: bool | None = None) -> None:
    """Configure structured logging with structlog.

    Args:
        json_logs: Render JSON lines (True) or a plain console layout (False).
            None falls back to the ``log_json`` setting.
    """
    settings = get_settings()
    level = _log_level()
    if json_logs is None:
        json_logs = settings.log_json

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def add_log_context(**kwargs: Any) -> None:
    """Bind context such as client_id or timezone to every following event."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_log_context() -> None:
    structlog.contextvars.clear_contextvars()
