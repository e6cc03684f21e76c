"""Order- and cardinality-sensitive stages: take, skip, reverse and sort."""

import inspect
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, TypeVar

from collectionkit.core.exceptions import CollectionError, InvalidInputError
from collectionkit.stages.pipeline_stage import PipelineStage, StageKind

if TYPE_CHECKING:
    from collectionkit.orchestration.cancellation import CancellationToken

T = TypeVar("T")


def _validate_count(name: str, n: int) -> int:
    if isinstance(n, bool) or not isinstance(n, int):
        raise InvalidInputError(f"{name} count must be an int, got {type(n).__name__}")
    if n < 0:
        raise InvalidInputError(f"{name} count must be non-negative, got {n}")
    return n


class TakeStage(PipelineStage[T, T]):
    """Keep the first ``n`` elements; ``n`` beyond the length is a no-op."""

    kind = StageKind.TAKE

    def __init__(self, n: int):
        super().__init__("take")
        self.n = _validate_count("take", n)

    def apply(self, items: Sequence[T]) -> list[T]:
        return list(items[: self.n])

    def __repr__(self) -> str:
        return f"TakeStage(n={self.n})"


class SkipStage(PipelineStage[T, T]):
    """Drop the first ``n`` elements; ``n`` beyond the length yields empty."""

    kind = StageKind.SKIP

    def __init__(self, n: int):
        super().__init__("skip")
        self.n = _validate_count("skip", n)

    def apply(self, items: Sequence[T]) -> list[T]:
        return list(items[self.n :])

    def __repr__(self) -> str:
        return f"SkipStage(n={self.n})"


class ReverseStage(PipelineStage[T, T]):
    """Reverse element order."""

    kind = StageKind.REVERSE
    mutates_in_place = True

    def __init__(self):
        super().__init__("reverse")

    def apply(self, items: Sequence[T]) -> list[T]:
        return list(reversed(items))

    def apply_in_place(self, items: list[T]) -> list[T]:
        """Reverse a list the executor owns without copying it."""
        items.reverse()
        return items


class SortStage(PipelineStage[T, T]):
    """Stable sort by a derived key."""

    kind = StageKind.SORT

    def __init__(self, key: Callable[[T], Any], ascending: bool = True):
        if not callable(key):
            raise TypeError(f"sort_by expects a callable, got {type(key).__name__}")
        super().__init__("sort_by")
        self.key = key
        self.ascending = ascending

    def apply(self, items: Sequence[T]) -> list[T]:
        try:
            # reverse=True keeps equal keys in their original order
            return sorted(items, key=self.key, reverse=not self.ascending)
        except CollectionError:
            raise
        except Exception as exc:
            raise self.closure_failure(exc) from exc

    async def apply_async(
        self,
        items: Sequence[T],
        cancellation: "CancellationToken | None" = None,
    ) -> list[T]:
        """
        Sort with a key function that may be a coroutine function.

        Keys are computed one at a time in source order, then the elements
        are stably sorted by the resolved keys.
        """
        keys: list[Any] = []
        for i, item in enumerate(items):
            if cancellation is not None:
                cancellation.raise_if_cancelled(self.name)
            try:
                key = self.key(item)
                if inspect.isawaitable(key):
                    key = await key
            except CollectionError:
                raise
            except Exception as exc:
                raise self.closure_failure(exc, i) from exc
            keys.append(key)

        try:
            order = sorted(
                range(len(keys)), key=keys.__getitem__, reverse=not self.ascending
            )
        except Exception as exc:
            raise self.closure_failure(exc) from exc
        return [items[i] for i in order]

    def __repr__(self) -> str:
        return f"SortStage(ascending={self.ascending})"
