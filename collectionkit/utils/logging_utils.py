"""
Structured logging utilities.

Provides consistent logging configuration across the library using structlog.
"""

import logging
import os
import sys
from typing import Any

import structlog
from rich.logging import RichHandler

# Track if logging has been configured
_logging_configured = False


def configure_logging(
    level: str | None = None,
    json_format: bool = False,
    include_timestamp: bool = True,
) -> None:
    """
    Configure structured logging for the library.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to COLLECTIONKIT_LOG_LEVEL env var, or WARNING.
        json_format: Use JSON output format
        include_timestamp: Include timestamps in logs
    """
    global _logging_configured

    if level is None:
        level = os.getenv("COLLECTIONKIT_LOG_LEVEL", "WARNING").upper()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )

    # basicConfig is a no-op once handlers exist
    logging.getLogger().setLevel(getattr(logging, level.upper()))

    # asyncio logs every slow callback at DEBUG, which drowns stage logs
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        logging.getLogger().handlers = [
            RichHandler(
                rich_tracebacks=True,
                markup=True,
                show_time=include_timestamp,
                show_path=False,
            )
        ]
        processors.append(structlog.dev.ConsoleRenderer(colors=True, pad_level=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )

    _logging_configured = True


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Auto-configures logging on first use if not already configured.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    if not _logging_configured:
        configure_logging()

    return structlog.get_logger(name)


def describe_callable(fn: Any) -> str:
    """
    Short, log-safe name for a caller-supplied closure.

    Args:
        fn: Any callable

    Returns:
        Qualified name, or the repr for objects without one
    """
    name = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None)
    if name is None:
        return repr(fn)
    return name
