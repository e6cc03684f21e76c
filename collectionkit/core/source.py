"""Source binding: the initial collection attached to a chain."""

from collections.abc import Iterable, Sequence
from typing import Generic, TypeVar

T = TypeVar("T")


class SourceBinding(Generic[T]):
    """
    Read-only view of a chain's source collection.

    An owned binding takes the caller's list as-is (the caller hands it
    over); a borrowed binding keeps a reference and the caller retains it.
    Either way executors never write to ``data``: the first mutation they
    perform happens on a copy they own. Iterables that are not sequences are
    materialized once into an owned list.
    """

    __slots__ = ("_data", "_owned")

    def __init__(self, data: Iterable[T], owned: bool = False):
        if isinstance(data, Sequence) and not isinstance(data, (str, bytes)):
            self._data: Sequence[T] = data
            self._owned = owned
        else:
            self._data = list(data)
            self._owned = True

    @property
    def data(self) -> Sequence[T]:
        """The bound collection (never mutated by evaluation)."""
        return self._data

    @property
    def owned(self) -> bool:
        """Whether the binding owns the collection."""
        return self._owned

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        mode = "owned" if self._owned else "borrowed"
        return f"SourceBinding({mode}, len={len(self._data)})"
