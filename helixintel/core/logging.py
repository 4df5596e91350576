"""Logging and observability configuration using Pydantic Logfire.

All modules use Python's standard logging library (logging.getLogger(__name__));
Logfire picks those records up once configured.

Standard usage:
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Message", extra={"key": "value"})

Structured logging utilities:
    log_with_context(logger, "info", "Message", schedule_id="123", home_id="abc")
"""

import logging

import logfire
from fastapi import FastAPI

from helixintel import __version__
from helixintel.core.config import Settings, settings


def configure_logfire(app_settings: Settings | None = None) -> None:
    """Configure Pydantic Logfire with token from environment."""
    active_settings = app_settings or settings
    logfire.configure(
        token=active_settings.logfire_token,
        service_name="helixintel",
        service_version=__version__,
        environment=active_settings.environment,
        send_to_logfire="if-token-present",
    )

    logger = logging.getLogger(__name__)
    logger.info("Logfire configured successfully")


def instrument_fastapi(app: FastAPI) -> None:
    """Add Logfire instrumentation to FastAPI application."""
    logfire.instrument_fastapi(app)
    logger = logging.getLogger(__name__)
    logger.info("FastAPI instrumentation configured")


def span(name: str) -> logfire.LogfireSpan:
    """Create a custom span for engine and service functions.

    Usage:
        with span("schedule_engine.apply_template"):
            ...
    """
    return logfire.span(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **context: object,
) -> None:
    """Log a message with structured context fields.

    Args:
        logger: Logger instance to use
        level: Log level ("debug", "info", "warning", "error", "critical")
        message: Log message
        **context: Additional context fields (schedule_id, task_id, etc.)
    """
    log_method = getattr(logger, level.lower())
    log_method(message, extra=context)


def log_with_home_context(
    logger: logging.Logger,
    level: str,
    message: str,
    home_id: str | None = None,
    **extra: object,
) -> None:
    """Log a message tagged with the owning home.

    Usage:
        log_with_home_context(logger, "info", "Schedule paused", home_id="h1", schedule_id="s1")
    """
    context = {"home_id": home_id, **extra} if home_id else extra
    log_with_context(logger, level, message, **context)
