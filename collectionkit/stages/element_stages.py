"""
Element-wise stages: map, filter and flat_map.

Each of these invokes the caller's closure once per element, independently
of every other element, which is what makes them eligible for parallel
fan-out. The closure call (``invoke``) is separated from turning its result
into output elements (``emit``) so the async executor can await the call
and then reuse the same emit logic.
"""

from abc import abstractmethod
from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar

from collectionkit.core.exceptions import CollectionError
from collectionkit.stages.pipeline_stage import PipelineStage, StageKind
from collectionkit.utils.logging_utils import describe_callable

T = TypeVar("T")
U = TypeVar("U")


class ElementStage(PipelineStage[T, U]):
    """Stage that applies a closure to each element independently."""

    parallel_eligible = True

    def __init__(self, name: str, fn: Callable[[T], Any]):
        if not callable(fn):
            raise TypeError(f"{name} expects a callable, got {type(fn).__name__}")
        super().__init__(name)
        self.fn = fn

    def invoke(self, item: T) -> Any:
        """Call the closure for one element (result may be awaitable)."""
        return self.fn(item)

    @abstractmethod
    def emit(self, item: T, result: Any) -> Iterable[U]:
        """
        Output elements produced for ``item`` given the closure's result.

        Args:
            item: Input element
            result: Value returned (or awaited) from the closure

        Returns:
            Zero or more output elements, in order
        """

    def apply(self, items: Sequence[T], offset: int = 0) -> list[U]:
        """
        Apply the closure to every element in order.

        Args:
            items: Elements to process
            offset: Index of ``items[0]`` in the full collection (for errors)

        Returns:
            New list with the emitted elements

        Raises:
            StageClosureFailed: On the first element whose closure raises
        """
        out: list[U] = []
        for i, item in enumerate(items):
            try:
                out.extend(self.emit(item, self.fn(item)))
            except CollectionError:
                raise
            except Exception as exc:
                raise self.closure_failure(exc, offset + i) from exc
        return out

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(fn={describe_callable(self.fn)})"


class MapStage(ElementStage[T, U]):
    """Transform each element: T -> U."""

    kind = StageKind.MAP

    def __init__(self, fn: Callable[[T], U]):
        super().__init__("map", fn)

    def emit(self, item: T, result: U) -> Iterable[U]:
        return (result,)


class FilterStage(ElementStage[T, T]):
    """Keep elements for which the predicate is truthy."""

    kind = StageKind.FILTER

    def __init__(self, predicate: Callable[[T], bool]):
        super().__init__("filter", predicate)

    def emit(self, item: T, result: Any) -> Iterable[T]:
        return (item,) if result else ()


class FlatMapStage(ElementStage[T, U]):
    """Map each element to a sequence and concatenate in source order."""

    kind = StageKind.FLAT_MAP

    def __init__(self, fn: Callable[[T], Iterable[U]]):
        super().__init__("flat_map", fn)

    def emit(self, item: T, result: Iterable[U]) -> Iterable[U]:
        return result
