"""Structured logging configuration using structlog.

The engine never configures logging on import. Test suites opt in by
calling ``configure_from_settings()`` (for example from a ``conftest.py``)
or ``configure_logging()`` with explicit values; until then structlog's
defaults apply. Standard library logging is left untouched.
"""

import logging
import sys
from typing import Literal, TextIO

import structlog
from structlog.types import Processor

from quiesce.core.config import get_settings

LogFormat = Literal["json", "console"]


def _build_processors(format: LogFormat) -> list[Processor]:
    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if format == "json":
        return [
            *shared,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [*shared, structlog.dev.ConsoleRenderer(colors=False)]


def configure_logging(
    level: str = "INFO",
    format: LogFormat = "console",
    stream: TextIO | None = None,
) -> None:
    """Route engine log events to ``stream``.

    Only structlog is configured. Loggers are not cached, so a later call
    (or ``structlog.testing.capture_logs``) takes effect for every module.

    Args:
        level: Minimum level (DEBUG, INFO, WARNING, ERROR).
        format: 'json' for CI log collectors, 'console' for local runs.
        stream: Output stream. Defaults to stderr, leaving stdout to the
            code under test.
    """
    structlog.configure(
        processors=_build_processors(format),
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(
            file=stream if stream is not None else sys.stderr
        ),
        cache_logger_on_first_use=False,
    )


def configure_from_settings(stream: TextIO | None = None) -> None:
    """Configure logging from ``QUIESCE_LOG_LEVEL`` and ``QUIESCE_LOG_FORMAT``.

    Example:
        # conftest.py
        from quiesce import configure_from_settings

        def pytest_configure(config):
            configure_from_settings()
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, format=settings.log_format, stream=stream)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Optional logger name (typically __name__).

    Returns:
        Configured structlog logger instance.
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]
