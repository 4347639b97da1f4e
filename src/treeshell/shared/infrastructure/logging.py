"""
Structured logging configuration using structlog.

Everything goes to stderr: stdout belongs to the commands being run and is
frequently the write end of a pipe.
"""

import logging
import sys
from typing import Any

import structlog

from treeshell.shared.infrastructure.config import settings


def configure_logging(stream: Any = None) -> None:
    """
    Configure structlog for the application.

    Sets up:
    - Pretty console output for development
    - JSON output for production
    - Log level from settings
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.is_development:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=False),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=stream if stream is not None else sys.stderr,
        level=getattr(logging, settings.log_level),
        force=True,
    )


def ensure_logging() -> None:
    """Configure logging unless the host application already did."""
    if not structlog.is_configured():
        configure_logging()


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.debug("branch_spawned", pid=4242)
    """
    return structlog.get_logger(name)
