"""Query operations: find, includes, every, some, count_by and partition."""

from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import Any, TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


def find(collection: Iterable[T], predicate: Callable[[T], Any]) -> T | None:
    """Return the first element matching ``predicate``, or None."""
    for item in collection:
        if predicate(item):
            return item
    return None


def find_last(collection: Sequence[T], predicate: Callable[[T], Any]) -> T | None:
    """Return the last element matching ``predicate``, or None."""
    for item in reversed(collection):
        if predicate(item):
            return item
    return None


def includes(collection: Iterable[T], value: T) -> bool:
    """Whether ``value`` is in the collection (by equality)."""
    return any(item == value for item in collection)


def every(collection: Iterable[T], predicate: Callable[[T], Any]) -> bool:
    """Whether all elements match; True for an empty collection."""
    return all(predicate(item) for item in collection)


def some(collection: Iterable[T], predicate: Callable[[T], Any]) -> bool:
    """Whether any element matches; False for an empty collection."""
    return any(predicate(item) for item in collection)


def count_by(collection: Iterable[T], iteratee: Callable[[T], K]) -> dict[K, int]:
    """
    Count elements per key produced by ``iteratee``.

    Example:
        count_by([6.1, 4.2, 6.3], math.floor)  # {6: 2, 4: 1}
    """
    counts: dict[K, int] = {}
    for item in collection:
        key = iteratee(item)
        counts[key] = counts.get(key, 0) + 1
    return counts


def partition(
    collection: Iterable[T], predicate: Callable[[T], Any]
) -> tuple[list[T], list[T]]:
    """
    Split into (matching, non-matching), each in source order.

    Example:
        partition([1, 2, 3, 4], lambda x: x % 2 == 0)  # ([2, 4], [1, 3])
    """
    matching: list[T] = []
    rest: list[T] = []
    for item in collection:
        (matching if predicate(item) else rest).append(item)
    return matching, rest
