"""
Escape-hatch stages that see the whole collection at once.

CustomStage hands the current collection to a caller-supplied function and
uses whatever it returns as the next collection (or final value). ReduceStage
is the reduction-style custom stage behind ``chain(...).reduce(...)``.

Both are treated as non-parallelizable: the function may depend on element
order or on the collection as a whole.
"""

import inspect
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, TypeVar

from collectionkit.core.exceptions import CollectionError, EmptySourceStageFailure
from collectionkit.stages.pipeline_stage import PipelineStage, StageKind
from collectionkit.utils.logging_utils import describe_callable

if TYPE_CHECKING:
    from collectionkit.orchestration.cancellation import CancellationToken

T = TypeVar("T")
U = TypeVar("U")

# Sentinel distinguishing "no initial value" from an explicit None
MISSING: Any = object()


class CustomStage(PipelineStage[T, U]):
    """Apply ``fn(collection) -> collection'`` (or a scalar)."""

    kind = StageKind.CUSTOM

    def __init__(self, fn: Callable[[list[T]], Any], name: str | None = None):
        if not callable(fn):
            raise TypeError(f"custom expects a callable, got {type(fn).__name__}")
        super().__init__(name or "custom")
        self.fn = fn

    def apply(self, items: Sequence[T]) -> Any:
        try:
            return self.fn(items)
        except CollectionError:
            raise
        except Exception as exc:
            raise self.closure_failure(exc) from exc

    async def apply_async(
        self,
        items: Sequence[T],
        cancellation: "CancellationToken | None" = None,
    ) -> Any:
        try:
            result = self.fn(items)
            if inspect.isawaitable(result):
                result = await result
            return result
        except CollectionError:
            raise
        except Exception as exc:
            raise self.closure_failure(exc) from exc

    def __repr__(self) -> str:
        return f"CustomStage(name={self.name!r}, fn={describe_callable(self.fn)})"


class ReduceStage(PipelineStage[T, U]):
    """
    Fold the collection into a single value.

    Without an initial value the first element seeds the accumulator, and an
    empty collection raises EmptySourceStageFailure.
    """

    kind = StageKind.CUSTOM
    produces_scalar = True

    def __init__(self, fn: Callable[[U, T], U], initial: Any = MISSING):
        if not callable(fn):
            raise TypeError(f"reduce expects a callable, got {type(fn).__name__}")
        super().__init__("reduce")
        self.fn = fn
        self.initial = initial

    def _seed(self, items: Sequence[T]) -> tuple[Any, int]:
        if self.initial is not MISSING:
            return self.initial, 0
        if len(items) == 0:
            raise EmptySourceStageFailure(self.name)
        return items[0], 1

    def apply(self, items: Sequence[T]) -> U:
        acc, start = self._seed(items)
        for i in range(start, len(items)):
            try:
                acc = self.fn(acc, items[i])
            except CollectionError:
                raise
            except Exception as exc:
                raise self.closure_failure(exc, i) from exc
        return acc

    async def apply_async(
        self,
        items: Sequence[T],
        cancellation: "CancellationToken | None" = None,
    ) -> U:
        acc, start = self._seed(items)
        for i in range(start, len(items)):
            if cancellation is not None:
                cancellation.raise_if_cancelled(self.name)
            try:
                acc = self.fn(acc, items[i])
                if inspect.isawaitable(acc):
                    acc = await acc
            except CollectionError:
                raise
            except Exception as exc:
                raise self.closure_failure(exc, i) from exc
        return acc

    def __repr__(self) -> str:
        seeded = self.initial is not MISSING
        return f"ReduceStage(fn={describe_callable(self.fn)}, seeded={seeded})"
