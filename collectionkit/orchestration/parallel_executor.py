"""
Parallel executor: per-stage fan-out across a fixed-size thread pool.

Only element-wise stages (map, filter, flat_map) fan out. Each worker gets
its own copy of one chunk and returns its own partial list; partials are
merged by chunk index. Every other stage is a barrier: the previous fan-out
has been fully merged before it runs inline.
"""

import time
from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, Executor, ThreadPoolExecutor, wait
from typing import Any, TypeVar

from collectionkit.core.exceptions import CollectionError, ParallelExecutionError
from collectionkit.core.source import SourceBinding
from collectionkit.core.specifications import ParallelSpec
from collectionkit.orchestration.chunking import ChunkPlan, ChunkResult, merge_chunks
from collectionkit.orchestration.execution_context import ExecutionContext
from collectionkit.orchestration.execution_strategy import ExecutionStrategy
from collectionkit.stages.element_stages import ElementStage
from collectionkit.stages.pipeline_stage import PipelineStage
from collectionkit.utils.logging_utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def fan_out(
    pool: Executor,
    items: Sequence[T],
    chunk_fn: Callable[[list[T], int], R],
    chunk_size: int,
) -> list[ChunkResult[R]]:
    """
    Run ``chunk_fn(chunk, offset)`` for every chunk of ``items`` on ``pool``.

    Args:
        pool: Worker pool to submit to
        items: Collection to partition
        chunk_fn: Function applied to each owned chunk; ``offset`` is the
            index of the chunk's first element in ``items``
        chunk_size: Maximum elements per chunk

    Returns:
        Chunk results ordered by chunk index

    Raises:
        Exception: The error of the lowest-index failed chunk; chunks not
            yet started are cancelled and running ones are allowed to finish
    """
    plan = ChunkPlan.build(len(items), chunk_size)
    chunks = plan.split(items)

    try:
        futures = {
            pool.submit(chunk_fn, chunk, bounds.start): bounds
            for bounds, chunk in zip(plan, chunks, strict=True)
        }
    except RuntimeError as exc:
        raise ParallelExecutionError(str(exc)) from exc

    done, pending = wait(futures, return_when=FIRST_EXCEPTION)
    if any(f.exception() is not None for f in done):
        cancelled = sum(1 for f in pending if f.cancel())
        # Chunks already running cannot be interrupted; let them settle
        wait(f for f in pending if not f.cancelled())
        failed = [
            f for f in futures if not f.cancelled() and f.exception() is not None
        ]
        first = min(failed, key=lambda f: futures[f].index)
        logger.debug(
            "fan-out aborted",
            failed_chunk=futures[first].index,
            cancelled=cancelled,
        )
        raise first.exception()

    return sorted(
        (
            ChunkResult(
                chunk_index=bounds.index,
                data=future.result(),
                rows_processed=len(bounds),
            )
            for future, bounds in futures.items()
        ),
        key=lambda r: r.chunk_index,
    )


class ParallelExecutor(ExecutionStrategy):
    """
    Evaluate a chain with parallel fan-out for element-wise stages.

    A ThreadPoolExecutor of ``spec.max_workers`` threads is created per run
    and shut down when the run ends, so no pool state is shared between
    terminal calls. Collections smaller than ``spec.min_parallel_size`` are
    processed inline.

    Output is identical to SyncExecutor for the same chain; only the
    scheduling differs.
    """

    def __init__(self, spec: ParallelSpec | None = None):
        super().__init__()
        self.spec = spec or ParallelSpec()

    @property
    def name(self) -> str:
        return "parallel"

    def execute(
        self,
        stages: Sequence[PipelineStage],
        source: SourceBinding,
        context: ExecutionContext,
    ) -> Any:
        if not any(stage.parallel_eligible for stage in stages):
            self.logger.debug("no parallel-eligible stages, running inline")

        with ThreadPoolExecutor(
            max_workers=self.spec.max_workers,
            thread_name_prefix="collectionkit",
        ) as pool:
            current: Any = source.data
            owned = False

            for stage in stages:
                started = time.perf_counter()
                elements_in = self._input_size(stage, current)
                chunks = 1

                if (
                    isinstance(stage, ElementStage)
                    and elements_in >= self.spec.min_parallel_size
                ):
                    current, chunks = self._apply_fan_out(pool, stage, current)
                    owned = True
                else:
                    current, owned = self._apply_sequential(stage, current, owned)

                stats = context.record_stage(
                    stage,
                    elements_in,
                    current,
                    time.perf_counter() - started,
                    chunks=chunks,
                )
                self.logger.debug(
                    "stage complete",
                    stage=stage.name,
                    elements_in=stats.elements_in,
                    elements_out=stats.elements_out,
                    chunks=chunks,
                )

        return self._finalize(current, source)

    def _apply_fan_out(
        self, pool: Executor, stage: ElementStage, items: Sequence
    ) -> tuple[list, int]:
        """Fan one element-wise stage out across the pool and merge."""
        chunk_size = self.spec.plan_chunk_size(len(items))
        try:
            results = fan_out(pool, items, stage.apply, chunk_size)
        except CollectionError:
            raise
        except Exception as exc:
            # ElementStage.apply wraps closure errors itself; anything else
            # came from the pool machinery
            raise ParallelExecutionError(str(exc)) from exc
        return merge_chunks(results, len(results)), len(results)

    def __repr__(self) -> str:
        return (
            f"ParallelExecutor(max_workers={self.spec.max_workers}, "
            f"chunk_size={self.spec.chunk_size})"
        )
