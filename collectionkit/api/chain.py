"""
Deferred, type-changing chains over a source collection.

A chain is an immutable stage list plus a source binding. Every builder
call appends one stage and returns a new chain typed by the stage's output
element type; the receiver is consumed and must not be used again. A
terminal call (``collect``, ``value``, ``into_collection``, ``execute``)
runs the chain exactly once with the executor chosen by the entry point:

    chain(data)           -> Chain          (SyncExecutor)
    chain_async(data)     -> AsyncChain     (AsyncExecutor)
    chain_parallel(data)  -> ParallelChain  (ParallelExecutor)
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Any, Generic, TypeVar

from collectionkit.core.collection import Collection
from collectionkit.core.exceptions import (
    ChainConsumedError,
    CollectionError,
    InvalidInputError,
    TypeConversionError,
)
from collectionkit.core.models import ChainResult
from collectionkit.core.source import SourceBinding
from collectionkit.core.specifications import AsyncSpec, ExecutorKind, ParallelSpec
from collectionkit.orchestration.async_executor import AsyncExecutor
from collectionkit.orchestration.cancellation import CancellationToken
from collectionkit.orchestration.execution_context import ExecutionContext
from collectionkit.orchestration.execution_strategy import ExecutionStrategy
from collectionkit.orchestration.parallel_executor import ParallelExecutor
from collectionkit.orchestration.sync_executor import SyncExecutor
from collectionkit.stages import (
    MISSING,
    CustomStage,
    FilterStage,
    FlatMapStage,
    MapStage,
    PipelineStage,
    ReduceStage,
    ReverseStage,
    SkipStage,
    SortStage,
    TakeStage,
)
from collectionkit.utils.logging_utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
U = TypeVar("U")


class _BaseChain(Generic[T]):
    """Stage list, source binding and consumption state shared by all chains."""

    executor_kind: ExecutorKind = ExecutorKind.SYNC

    def __init__(
        self,
        source: SourceBinding,
        stages: Sequence[PipelineStage] = (),
    ):
        self._source = source
        self._stages: tuple[PipelineStage, ...] = tuple(stages)
        self._consumed = False

    @property
    def source(self) -> SourceBinding:
        return self._source

    @property
    def stages(self) -> tuple[PipelineStage, ...]:
        """Stages in evaluation order."""
        return self._stages

    @property
    def consumed(self) -> bool:
        """Whether a builder or terminal call has taken this chain."""
        return self._consumed

    def _take(self) -> None:
        if self._consumed:
            raise ChainConsumedError(self)
        self._consumed = True

    def _options(self) -> dict[str, Any]:
        """Constructor keyword arguments carried to derived chains."""
        return {}

    def _append(self, stage: PipelineStage) -> Any:
        if self._consumed:
            raise ChainConsumedError(self)
        if self._stages and self._stages[-1].produces_scalar:
            raise InvalidInputError(
                f"cannot append '{stage.name}' after '{self._stages[-1].name}'; "
                "the chain already yields a single value"
            )
        self._take()
        return type(self)(self._source, self._stages + (stage,), **self._options())

    def _make_executor(self) -> ExecutionStrategy:
        raise NotImplementedError

    def _start_run(self) -> tuple[ExecutionStrategy, ExecutionContext]:
        self._take()
        executor = self._make_executor()
        context = ExecutionContext(
            executor=executor.name, source_size=len(self._source)
        )
        logger.debug(
            "chain evaluation started",
            run_id=str(context.run_id),
            executor=executor.name,
            stages=[stage.name for stage in self._stages],
            source_size=context.source_size,
        )
        return executor, context

    def _log_finished(self, context: ExecutionContext) -> None:
        context.finish()
        logger.debug(
            "chain evaluation finished",
            run_id=str(context.run_id),
            executor=context.executor,
            duration=round(context.get_stats().duration_seconds, 6),
        )

    @staticmethod
    def _to_collection(result: Any) -> Collection:
        if isinstance(result, Collection):
            return result
        if not isinstance(result, Sequence) or isinstance(result, (str, bytes)):
            raise TypeConversionError(type(result).__name__, "Collection")
        return Collection(result)

    def __repr__(self) -> str:
        names = ", ".join(stage.name for stage in self._stages)
        state = ", consumed" if self._consumed else ""
        return f"{type(self).__name__}([{names}], {self._source!r}{state})"


class Chain(_BaseChain[T]):
    """
    Synchronous chain.

    Example:
        chain([1, 2, 3, 4, 5, 6, 7, 8, 9, 10])
            .filter(lambda x: x % 2 == 0)
            .map(lambda x: x * 3)
            .take(3)
            .reverse()
            .collect()
        # [18, 12, 6]
    """

    executor_kind = ExecutorKind.SYNC

    # ------------------------------------------------------------------
    # Builder methods
    # ------------------------------------------------------------------

    def map(self, fn: Callable[[T], U]) -> "Chain[U]":
        """Transform each element."""
        return self._append(MapStage(fn))

    def filter(self, predicate: Callable[[T], Any]) -> "Chain[T]":
        """Keep elements for which ``predicate`` is truthy."""
        return self._append(FilterStage(predicate))

    def take(self, n: int) -> "Chain[T]":
        """Keep the first ``n`` elements."""
        return self._append(TakeStage(n))

    def skip(self, n: int) -> "Chain[T]":
        """Drop the first ``n`` elements."""
        return self._append(SkipStage(n))

    def reverse(self) -> "Chain[T]":
        return self._append(ReverseStage())

    def flat_map(self, fn: Callable[[T], Iterable[U]]) -> "Chain[U]":
        """Map each element to a sequence and concatenate in source order."""
        return self._append(FlatMapStage(fn))

    def sort_by(self, key: Callable[[T], Any], ascending: bool = True) -> "Chain[T]":
        """Stable sort by ``key``."""
        return self._append(SortStage(key, ascending))

    def custom(
        self, fn: Callable[[list[T]], Any], name: str | None = None
    ) -> "Chain[Any]":
        """Apply ``fn`` to the whole collection; its return value flows on."""
        return self._append(CustomStage(fn, name))

    def reduce(self, fn: Callable[[U, T], U], initial: U = MISSING) -> "Chain[U]":
        """
        Fold the collection into one value; read it with ``value()``.

        No further stages may follow.
        """
        return self._append(ReduceStage(fn, initial))

    # ------------------------------------------------------------------
    # Terminal operations
    # ------------------------------------------------------------------

    def _make_executor(self) -> ExecutionStrategy:
        return SyncExecutor()

    def _run(self, executor: ExecutionStrategy, context: ExecutionContext) -> Any:
        try:
            result = executor.execute(self._stages, self._source, context)
        finally:
            self._log_finished(context)
        return result

    def collect(self) -> Any:
        """
        Evaluate the chain.

        Returns:
            Final list (or the scalar produced by a reduce/custom stage)

        Raises:
            StageClosureFailed: A stage closure raised
            EmptySourceStageFailure: reduce over an empty collection
            ChainConsumedError: The chain was already used
        """
        executor, context = self._start_run()
        return self._run(executor, context)

    def value(self) -> Any:
        """Evaluate the chain; reads naturally after ``reduce``."""
        return self.collect()

    def into_collection(self) -> Collection[T]:
        """Evaluate the chain and wrap the result in a Collection."""
        return self._to_collection(self.collect())

    def execute(self) -> ChainResult:
        """
        Evaluate the chain without raising library errors.

        Returns:
            ChainResult holding either the value or the first error, plus
            execution statistics
        """
        executor, context = self._start_run()
        try:
            value = self._run(executor, context)
        except CollectionError as exc:
            return ChainResult(success=False, error=exc, stats=context.get_stats())
        return ChainResult(success=True, value=value, stats=context.get_stats())


class ParallelChain(Chain[T]):
    """
    Chain evaluated by ParallelExecutor.

    Builder methods are inherited from Chain and return ParallelChain
    instances. Output is identical to a synchronous chain over the same
    stages.
    """

    executor_kind = ExecutorKind.PARALLEL

    def __init__(
        self,
        source: SourceBinding,
        stages: Sequence[PipelineStage] = (),
        spec: ParallelSpec | None = None,
    ):
        super().__init__(source, stages)
        self.spec = spec or ParallelSpec()

    def _options(self) -> dict[str, Any]:
        return {"spec": self.spec}

    def _make_executor(self) -> ExecutionStrategy:
        return ParallelExecutor(self.spec)


class AsyncChain(_BaseChain[T]):
    """
    Chain evaluated on the running event loop.

    Stage closures may be coroutine functions or plain callables. The chain
    itself is awaitable: ``await chain_async(x).map(f)`` collects it.

    Example:
        async def fetch(x):
            await asyncio.sleep(0)
            return x * 2

        result = await chain_async([1, 2, 3]).map(fetch).collect()
        # [2, 4, 6]
    """

    executor_kind = ExecutorKind.ASYNC

    def __init__(
        self,
        source: SourceBinding,
        stages: Sequence[PipelineStage] = (),
        spec: AsyncSpec | None = None,
        cancellation: CancellationToken | None = None,
    ):
        super().__init__(source, stages)
        self.spec = spec or AsyncSpec()
        self.cancellation = cancellation

    def _options(self) -> dict[str, Any]:
        return {"spec": self.spec, "cancellation": self.cancellation}

    # ------------------------------------------------------------------
    # Builder methods
    # ------------------------------------------------------------------

    def map(self, fn: Callable[[T], Awaitable[U] | U]) -> "AsyncChain[U]":
        """Transform each element, awaiting the closure when it is async."""
        return self._append(MapStage(fn))

    def filter(self, predicate: Callable[[T], Awaitable[Any] | Any]) -> "AsyncChain[T]":
        return self._append(FilterStage(predicate))

    def take(self, n: int) -> "AsyncChain[T]":
        return self._append(TakeStage(n))

    def skip(self, n: int) -> "AsyncChain[T]":
        return self._append(SkipStage(n))

    def reverse(self) -> "AsyncChain[T]":
        return self._append(ReverseStage())

    def flat_map(
        self, fn: Callable[[T], Awaitable[Iterable[U]] | Iterable[U]]
    ) -> "AsyncChain[U]":
        return self._append(FlatMapStage(fn))

    def sort_by(
        self, key: Callable[[T], Awaitable[Any] | Any], ascending: bool = True
    ) -> "AsyncChain[T]":
        """Stable sort; an async key is awaited once per element, in order."""
        return self._append(SortStage(key, ascending))

    def custom(
        self, fn: Callable[[list[T]], Any], name: str | None = None
    ) -> "AsyncChain[Any]":
        """Apply ``fn`` (sync or async) to the whole collection."""
        return self._append(CustomStage(fn, name))

    def reduce(
        self, fn: Callable[[U, T], Awaitable[U] | U], initial: U = MISSING
    ) -> "AsyncChain[U]":
        return self._append(ReduceStage(fn, initial))

    # ------------------------------------------------------------------
    # Terminal operations
    # ------------------------------------------------------------------

    def _make_executor(self) -> ExecutionStrategy:
        return AsyncExecutor(self.spec, self.cancellation)

    async def _run(
        self,
        executor: ExecutionStrategy,
        context: ExecutionContext,
        cancellation: CancellationToken | None,
    ) -> Any:
        if cancellation is not None:
            executor.cancellation = cancellation
        try:
            result = await executor.execute(self._stages, self._source, context)
        finally:
            self._log_finished(context)
        return result

    async def collect(self, cancellation: CancellationToken | None = None) -> Any:
        """
        Evaluate the chain.

        Args:
            cancellation: Token overriding the one given at construction

        Raises:
            CancellationRequested: The token was cancelled mid-run
            StageClosureFailed: A stage closure raised
        """
        executor, context = self._start_run()
        return await self._run(executor, context, cancellation)

    async def value(self, cancellation: CancellationToken | None = None) -> Any:
        return await self.collect(cancellation)

    async def into_collection(
        self, cancellation: CancellationToken | None = None
    ) -> Collection[T]:
        return self._to_collection(await self.collect(cancellation))

    async def execute(self, cancellation: CancellationToken | None = None) -> ChainResult:
        """Evaluate without raising library errors; see Chain.execute."""
        executor, context = self._start_run()
        try:
            value = await self._run(executor, context, cancellation)
        except CollectionError as exc:
            return ChainResult(success=False, error=exc, stats=context.get_stats())
        return ChainResult(success=True, value=value, stats=context.get_stats())

    def collect_sync(self) -> Any:
        """Evaluate from synchronous code by running an event loop."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.collect())

        # Loop already running (e.g. Jupyter)
        import nest_asyncio

        nest_asyncio.apply()
        return asyncio.run(self.collect())

    def __await__(self):
        return self.collect().__await__()


def chain(data: Iterable[T], owned: bool = False) -> Chain[T]:
    """
    Start a synchronous chain.

    Args:
        data: Source collection
        owned: Hand the collection over instead of borrowing it; either way
            evaluation never modifies it

    Returns:
        Empty-stage Chain
    """
    return Chain(SourceBinding(data, owned=owned))


def chain_async(
    data: Iterable[T],
    owned: bool = False,
    spec: AsyncSpec | None = None,
    cancellation: CancellationToken | None = None,
) -> AsyncChain[T]:
    """Start an asynchronous chain."""
    return AsyncChain(
        SourceBinding(data, owned=owned), spec=spec, cancellation=cancellation
    )


def chain_parallel(
    data: Iterable[T],
    owned: bool = False,
    spec: ParallelSpec | None = None,
) -> ParallelChain[T]:
    """
    Start a chain whose map/filter/flat_map stages fan out across threads.

    Args:
        data: Source collection
        owned: See ``chain``
        spec: Worker pool configuration (default: ParallelSpec())
    """
    return ParallelChain(SourceBinding(data, owned=owned), spec=spec)
