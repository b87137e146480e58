"""structlog setup for hosts embedding the rules core."""

import logging

import structlog

from zwolf.config import Settings, get_settings

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def resolve_log_level(name: str) -> int:
    """Map a level name to a ``logging`` level, falling back to INFO."""
    return _LEVELS.get(name.strip().upper(), logging.INFO)


def configure_logging(settings: Settings | None = None) -> None:
    """
    Configure structlog processors and rendering.

    Args:
        settings: Settings to read ``log_level`` and ``log_format`` from.
            Defaults to the cached application settings.
    """
    if settings is None:
        settings = get_settings()

    renderer: structlog.types.Processor
    if settings.log_format.lower() == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            resolve_log_level(settings.log_level)
        ),
        cache_logger_on_first_use=False,
    )
