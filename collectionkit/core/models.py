"""Result and statistics models for chain evaluation."""

from datetime import datetime
from typing import Any, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class StageStats(BaseModel):
    """Timing and cardinality for one stage of one run."""

    name: str
    kind: str
    elements_in: int = Field(..., ge=0)
    elements_out: int | None = Field(
        None, ge=0, description="None when the stage produced a scalar"
    )
    duration_seconds: float = Field(0.0, ge=0.0)
    chunks: int = Field(1, ge=0, description="Chunks fanned out (parallel only)")


class ExecutionStats(BaseModel):
    """Statistics for one terminal evaluation."""

    run_id: UUID
    executor: str
    source_size: int = Field(..., ge=0)
    stages: list[StageStats] = Field(default_factory=list)
    start_time: datetime
    end_time: datetime | None = None

    @property
    def duration_seconds(self) -> float:
        """Wall-clock duration of the run."""
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()


class ChainResult(BaseModel, Generic[T]):
    """
    Outcome of ``execute()``: the chain's value or the first error.

    Exactly one of ``value`` (when ``success``) or ``error`` is meaningful;
    no partial collection is ever attached to a failed result.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    value: Any = None
    error: Exception | None = None
    stats: ExecutionStats | None = None

    def unwrap(self) -> Any:
        """
        Return the value or raise the captured error.

        Raises:
            CollectionError: The error that aborted evaluation
        """
        if not self.success and self.error is not None:
            raise self.error
        return self.value
