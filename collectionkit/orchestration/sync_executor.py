"""Synchronous executor: one thread, stages left to right."""

import time
from collections.abc import Sequence
from typing import Any

from collectionkit.core.source import SourceBinding
from collectionkit.orchestration.execution_context import ExecutionContext
from collectionkit.orchestration.execution_strategy import ExecutionStrategy
from collectionkit.stages.pipeline_stage import PipelineStage


class SyncExecutor(ExecutionStrategy):
    """
    Apply stages in declared order on the calling thread.

    Each stage makes one pass over its input and materializes a new list;
    Reverse works in place once the run owns the list. Closures run in
    source order. The first failing closure aborts the run and nothing
    partial is returned.
    """

    @property
    def name(self) -> str:
        return "sync"

    def execute(
        self,
        stages: Sequence[PipelineStage],
        source: SourceBinding,
        context: ExecutionContext,
    ) -> Any:
        current: Any = source.data
        owned = False

        for stage in stages:
            started = time.perf_counter()
            elements_in = self._input_size(stage, current)

            current, owned = self._apply_sequential(stage, current, owned)

            stats = context.record_stage(
                stage, elements_in, current, time.perf_counter() - started
            )
            self.logger.debug(
                "stage complete",
                stage=stage.name,
                elements_in=stats.elements_in,
                elements_out=stats.elements_out,
            )

        return self._finalize(current, source)
