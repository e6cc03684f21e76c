"""Utility modules for cross-cutting concerns."""

from collectionkit.utils.logging_utils import (
    configure_logging,
    describe_callable,
    get_logger,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "describe_callable",
]
