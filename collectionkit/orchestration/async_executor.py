"""
Asynchronous executor: cooperative, one closure invocation in flight.

Stages run one at a time in declared order. Within an element-wise stage the
closure is invoked once per element; if it returns an awaitable the executor
awaits it before touching the next element, so output order always matches
input order and no two invocations overlap.
"""

import asyncio
import inspect
import time
from collections.abc import Sequence
from typing import Any

from collectionkit.core.exceptions import CollectionError
from collectionkit.core.source import SourceBinding
from collectionkit.core.specifications import AsyncSpec
from collectionkit.orchestration.cancellation import CancellationToken
from collectionkit.orchestration.execution_context import ExecutionContext
from collectionkit.orchestration.execution_strategy import ExecutionStrategy
from collectionkit.stages.custom_stage import CustomStage, ReduceStage
from collectionkit.stages.element_stages import ElementStage
from collectionkit.stages.pipeline_stage import PipelineStage
from collectionkit.stages.structural_stages import SortStage


class AsyncExecutor(ExecutionStrategy):
    """
    Evaluate a chain on the running event loop.

    Cancellation is a flag (CancellationToken) checked before each stage and
    before each element invocation; once set, the executor raises
    CancellationRequested and drops every intermediate collection. Task
    cancellation (``asyncio.CancelledError``) propagates unchanged.
    """

    def __init__(
        self,
        spec: AsyncSpec | None = None,
        cancellation: CancellationToken | None = None,
    ):
        super().__init__()
        self.spec = spec or AsyncSpec()
        self.cancellation = cancellation or CancellationToken()

    @property
    def name(self) -> str:
        return "async"

    @property
    def supports_async(self) -> bool:
        return True

    async def execute(
        self,
        stages: Sequence[PipelineStage],
        source: SourceBinding,
        context: ExecutionContext,
    ) -> Any:
        token = self.cancellation
        current: Any = source.data
        owned = False

        for stage in stages:
            token.raise_if_cancelled(stage.name)
            started = time.perf_counter()
            elements_in = self._input_size(stage, current)

            if isinstance(stage, ElementStage):
                current = await self._apply_elements(stage, current, token)
                owned = True
            elif isinstance(stage, (CustomStage, ReduceStage)):
                given = current if owned else list(current)
                result = await stage.apply_async(given, token)
                current, owned = self._custom_result(result, given)
            elif isinstance(stage, SortStage):
                current = await stage.apply_async(current, token)
                owned = True
            else:
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

        token.raise_if_cancelled()
        return self._finalize(current, source)

    async def _apply_elements(
        self, stage: ElementStage, items: Sequence, token: CancellationToken
    ) -> list:
        """Invoke the stage closure element by element, awaiting each call."""
        out: list = []
        yield_every = self.spec.yield_every
        sync_calls = 0

        for i, item in enumerate(items):
            token.raise_if_cancelled(stage.name)
            try:
                result = stage.invoke(item)
                if inspect.isawaitable(result):
                    result = await result
                else:
                    sync_calls += 1
                out.extend(stage.emit(item, result))
            except CollectionError:
                raise
            except Exception as exc:
                raise stage.closure_failure(exc, i) from exc

            if yield_every and sync_calls >= yield_every:
                sync_calls = 0
                await asyncio.sleep(0)

        return out

    def __repr__(self) -> str:
        return f"AsyncExecutor(yield_every={self.spec.yield_every})"
