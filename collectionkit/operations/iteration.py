"""
Iteration operations: each, map, filter, reduce and their right-to-left forms.

All functions are pure with respect to the input collection: they never
mutate it and always return new lists.
"""

from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar

from collectionkit.core.exceptions import EmptyCollectionError
from collectionkit.stages.custom_stage import MISSING

T = TypeVar("T")
U = TypeVar("U")


def each(collection: Iterable[T], iteratee: Callable[[T], Any]) -> None:
    """Invoke ``iteratee`` for every element in order."""
    for item in collection:
        iteratee(item)


def for_each(collection: Iterable[T], iteratee: Callable[[T], Any]) -> None:
    """Alias of ``each``."""
    each(collection, iteratee)


def for_each_right(collection: Sequence[T], iteratee: Callable[[T], Any]) -> None:
    """Invoke ``iteratee`` for every element from last to first."""
    for item in reversed(collection):
        iteratee(item)


def map(collection: Iterable[T], iteratee: Callable[[T], U]) -> list[U]:
    """
    Create a list of values by running each element through ``iteratee``.

    Example:
        map([1, 2, 3], lambda x: x * 2)  # [2, 4, 6]
    """
    return [iteratee(item) for item in collection]


def filter(collection: Iterable[T], predicate: Callable[[T], Any]) -> list[T]:
    """
    Keep the elements for which ``predicate`` is truthy.

    Example:
        filter([1, 2, 3, 4, 5], lambda x: x % 2 == 0)  # [2, 4]
    """
    return [item for item in collection if predicate(item)]


def _fold(items: Iterable[T], iteratee: Callable[[Any, T], Any], initial: Any) -> Any:
    iterator = iter(items)
    if initial is MISSING:
        try:
            acc = next(iterator)
        except StopIteration:
            raise EmptyCollectionError(
                "reduce of empty collection with no initial value"
            ) from None
    else:
        acc = initial
    for item in iterator:
        acc = iteratee(acc, item)
    return acc


def reduce(
    collection: Iterable[T],
    iteratee: Callable[[U, T], U],
    initial: U = MISSING,
) -> U:
    """
    Fold the collection left to right into one value.

    Args:
        collection: Elements to fold
        iteratee: ``(accumulator, element) -> accumulator``
        initial: Starting accumulator; when omitted the first element is
            used and an empty collection raises EmptyCollectionError

    Example:
        reduce([1, 2, 3, 4, 5], lambda acc, x: acc + x, 0)  # 15
    """
    return _fold(collection, iteratee, initial)


def reduce_right(
    collection: Sequence[T],
    iteratee: Callable[[U, T], U],
    initial: U = MISSING,
) -> U:
    """Like ``reduce`` but folds from the last element to the first."""
    return _fold(reversed(collection), iteratee, initial)
