"""
Execution specifications.

Pydantic models that configure the executor variants. They hold no data,
only knobs, so one instance can be shared by any number of chains.
"""

import os
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from collectionkit.utils.logging_utils import get_logger

logger = get_logger(__name__)


def _default_max_workers() -> int:
    cpu_default = min(32, (os.cpu_count() or 1) + 4)
    env_value = os.getenv("COLLECTIONKIT_MAX_WORKERS")
    if not env_value:
        return cpu_default
    try:
        return max(1, int(env_value))
    except ValueError:
        logger.warning(
            "ignoring invalid COLLECTIONKIT_MAX_WORKERS",
            value=env_value,
            max_workers=cpu_default,
        )
        return cpu_default


class ExecutorKind(str, Enum):
    """Scheduling model selected by the chain entry point."""

    SYNC = "sync"
    ASYNC = "async"
    PARALLEL = "parallel"


class ParallelSpec(BaseModel):
    """Worker pool configuration for parallel evaluation."""

    max_workers: int = Field(
        default_factory=_default_max_workers,
        ge=1,
        description="Fixed size of the worker pool",
    )
    chunk_size: int | None = Field(
        None,
        ge=1,
        description="Elements per chunk (None = split evenly across workers)",
    )
    min_parallel_size: int = Field(
        2,
        ge=1,
        description="Collections smaller than this run inline without fan-out",
    )

    def plan_chunk_size(self, total: int) -> int:
        """
        Chunk size to use for a collection of ``total`` elements.

        Args:
            total: Number of elements to partition

        Returns:
            Positive chunk size
        """
        if self.chunk_size is not None:
            return self.chunk_size
        return max(1, -(-total // self.max_workers))


class AsyncSpec(BaseModel):
    """Cooperative scheduling configuration for async evaluation."""

    yield_every: int = Field(
        0,
        ge=0,
        description="Yield to the event loop after this many synchronous "
        "closure calls (0 = never)",
    )


class ChainSpecifications(BaseModel):
    """Complete configuration loaded by ConfigLoader."""

    parallel: ParallelSpec = Field(default_factory=ParallelSpec)
    async_: AsyncSpec = Field(default_factory=AsyncSpec, alias="async")
    log_level: str = Field("WARNING", description="structlog level")

    model_config = {"populate_by_name": True}

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a stdlib level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level
