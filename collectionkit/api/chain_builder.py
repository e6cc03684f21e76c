"""
Fluent builder that assembles a chain before choosing its executor.

Unlike the chain classes themselves, ChainBuilder is mutable: every method
records a stage or an option and returns the same builder. ``build()``
hands the collected stages to the chain class for the selected executor.
"""

from collections.abc import Callable, Iterable
from typing import Any

from collectionkit.api.chain import AsyncChain, Chain, ParallelChain
from collectionkit.core.exceptions import ChainConsumedError, InvalidInputError
from collectionkit.core.source import SourceBinding
from collectionkit.core.specifications import (
    AsyncSpec,
    ChainSpecifications,
    ExecutorKind,
    ParallelSpec,
)
from collectionkit.orchestration.cancellation import CancellationToken
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
from collectionkit.utils.logging_utils import configure_logging, get_logger

logger = get_logger(__name__)


class ChainBuilder:
    """
    Fluent builder for chains.

    Example:
        result = (
            ChainBuilder.create([3, 1, 2])
            .sort_by(lambda x: x)
            .map(lambda x: x * 10)
            .with_parallel_execution(max_workers=4)
            .build()
            .collect()
        )
        # [10, 20, 30]
    """

    def __init__(self, data: Iterable[Any], owned: bool = False):
        self._source = SourceBinding(data, owned=owned)
        self._stages: list[PipelineStage] = []
        self._kind = ExecutorKind.SYNC
        self._parallel_spec: ParallelSpec | None = None
        self._async_spec: AsyncSpec | None = None
        self._cancellation: CancellationToken | None = None
        self._built = False

    @classmethod
    def create(cls, data: Iterable[Any], owned: bool = False) -> "ChainBuilder":
        """Start a builder over ``data``."""
        return cls(data, owned=owned)

    def _add(self, stage: PipelineStage) -> "ChainBuilder":
        if self._built:
            raise ChainConsumedError(self)
        if self._stages and self._stages[-1].produces_scalar:
            raise InvalidInputError(
                f"cannot append '{stage.name}' after '{self._stages[-1].name}'"
            )
        self._stages.append(stage)
        return self

    def map(self, fn: Callable[[Any], Any]) -> "ChainBuilder":
        return self._add(MapStage(fn))

    def filter(self, predicate: Callable[[Any], Any]) -> "ChainBuilder":
        return self._add(FilterStage(predicate))

    def take(self, n: int) -> "ChainBuilder":
        return self._add(TakeStage(n))

    def skip(self, n: int) -> "ChainBuilder":
        return self._add(SkipStage(n))

    def reverse(self) -> "ChainBuilder":
        return self._add(ReverseStage())

    def flat_map(self, fn: Callable[[Any], Iterable[Any]]) -> "ChainBuilder":
        return self._add(FlatMapStage(fn))

    def sort_by(self, key: Callable[[Any], Any], ascending: bool = True) -> "ChainBuilder":
        return self._add(SortStage(key, ascending))

    def custom(self, fn: Callable[[list], Any], name: str | None = None) -> "ChainBuilder":
        return self._add(CustomStage(fn, name))

    def reduce(self, fn: Callable[[Any, Any], Any], initial: Any = MISSING) -> "ChainBuilder":
        return self._add(ReduceStage(fn, initial))

    def with_async_execution(
        self,
        spec: AsyncSpec | None = None,
        cancellation: CancellationToken | None = None,
    ) -> "ChainBuilder":
        """
        Evaluate with AsyncExecutor; ``build()`` then returns an AsyncChain.

        Args:
            spec: Cooperative scheduling options
            cancellation: Token checked between element invocations

        Returns:
            Self for chaining
        """
        self._kind = ExecutorKind.ASYNC
        self._async_spec = spec or self._async_spec
        self._cancellation = cancellation
        return self

    def with_parallel_execution(
        self,
        max_workers: int | None = None,
        chunk_size: int | None = None,
        spec: ParallelSpec | None = None,
    ) -> "ChainBuilder":
        """
        Evaluate with ParallelExecutor; ``build()`` then returns a ParallelChain.

        Args:
            max_workers: Worker pool size (ignored when ``spec`` is given)
            chunk_size: Elements per chunk (ignored when ``spec`` is given)
            spec: Complete worker pool configuration

        Returns:
            Self for chaining
        """
        if spec is None:
            options = (self._parallel_spec or ParallelSpec()).model_dump()
            if max_workers is not None:
                options["max_workers"] = max_workers
            if chunk_size is not None:
                options["chunk_size"] = chunk_size
            spec = ParallelSpec(**options)
        self._kind = ExecutorKind.PARALLEL
        self._parallel_spec = spec
        return self

    def with_specifications(self, specs: ChainSpecifications) -> "ChainBuilder":
        """
        Take parallel and async options from loaded specifications.

        ``specs.log_level`` is applied to the library's logging right away.

        Returns:
            Self for chaining
        """
        self._parallel_spec = specs.parallel
        self._async_spec = specs.async_
        configure_logging(level=specs.log_level)
        return self

    def build(self) -> Chain[Any] | AsyncChain[Any]:
        """
        Create the chain for the selected executor.

        Raises:
            ChainConsumedError: If ``build()`` was already called
        """
        if self._built:
            raise ChainConsumedError(self)
        self._built = True

        logger.debug(
            "chain built",
            executor=self._kind.value,
            stages=[stage.name for stage in self._stages],
        )

        if self._kind is ExecutorKind.ASYNC:
            return AsyncChain(
                self._source,
                self._stages,
                spec=self._async_spec,
                cancellation=self._cancellation,
            )
        if self._kind is ExecutorKind.PARALLEL:
            return ParallelChain(self._source, self._stages, spec=self._parallel_spec)
        return Chain(self._source, self._stages)
