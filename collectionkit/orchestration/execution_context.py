"""Per-run execution context."""

from collections.abc import Sized
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from collectionkit.core.models import ExecutionStats, StageStats
from collectionkit.stages.pipeline_stage import PipelineStage


@dataclass
class ExecutionContext:
    """
    Mutable record of one terminal evaluation.

    Each ``collect``/``value``/``execute`` call creates its own context; it
    is never shared between runs.
    """

    executor: str
    source_size: int
    run_id: UUID = field(default_factory=uuid4)
    start_time: datetime = field(default_factory=datetime.now)
    end_time: datetime | None = None
    stage_stats: list[StageStats] = field(default_factory=list)

    def record_stage(
        self,
        stage: PipelineStage,
        elements_in: int,
        output: Any,
        duration_seconds: float,
        chunks: int = 1,
    ) -> StageStats:
        """Record timing and cardinality for a completed stage."""
        elements_out = (
            len(output)
            if isinstance(output, Sized) and not stage.produces_scalar
            else None
        )
        stats = StageStats(
            name=stage.name,
            kind=stage.kind.value,
            elements_in=elements_in,
            elements_out=elements_out,
            duration_seconds=max(0.0, duration_seconds),
            chunks=chunks,
        )
        self.stage_stats.append(stats)
        return stats

    def finish(self) -> None:
        """Mark the run complete."""
        self.end_time = datetime.now()

    def get_stats(self) -> ExecutionStats:
        """Snapshot of the run as an ExecutionStats model."""
        return ExecutionStats(
            run_id=self.run_id,
            executor=self.executor,
            source_size=self.source_size,
            stages=list(self.stage_stats),
            start_time=self.start_time,
            end_time=self.end_time,
        )
