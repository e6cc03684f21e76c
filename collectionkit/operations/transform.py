"""Transform operations: group_by, key_by, invoke, sort_by and order_by."""

from collections.abc import Callable, Hashable, Iterable
from typing import Any, TypeVar

T = TypeVar("T")
U = TypeVar("U")
K = TypeVar("K", bound=Hashable)


def group_by(collection: Iterable[T], iteratee: Callable[[T], K]) -> dict[K, list[T]]:
    """
    Group elements by the key ``iteratee`` returns; groups keep source order.

    Example:
        group_by([6.1, 4.2, 6.3], math.floor)  # {6: [6.1, 6.3], 4: [4.2]}
    """
    groups: dict[K, list[T]] = {}
    for item in collection:
        groups.setdefault(iteratee(item), []).append(item)
    return groups


def key_by(collection: Iterable[T], iteratee: Callable[[T], K]) -> dict[K, T]:
    """Index elements by key; the last element with a given key wins."""
    return {iteratee(item): item for item in collection}


def invoke(
    collection: Iterable[T], method: Callable[..., U] | str, *args: Any
) -> list[U]:
    """
    Call ``method`` on each element.

    Args:
        collection: Elements to invoke on
        method: Callable taking the element first, or the name of a method
            to look up on each element
        *args: Extra positional arguments passed to every call

    Example:
        invoke(["a", "b"], "upper")  # ["A", "B"]
    """
    if isinstance(method, str):
        return [getattr(item, method)(*args) for item in collection]
    return [method(item, *args) for item in collection]


def sort_by(collection: Iterable[T], iteratee: Callable[[T], Any]) -> list[T]:
    """Stable ascending sort by the key ``iteratee`` returns."""
    return sorted(collection, key=iteratee)


def order_by(
    collection: Iterable[T], iteratee: Callable[[T], Any], ascending: bool = True
) -> list[T]:
    """
    Stable sort by key in the given direction.

    Elements with equal keys keep their source order in both directions.
    """
    return sorted(collection, key=iteratee, reverse=not ascending)
