"""
Collection: an owned, list-backed container with lodash-style methods.

Every method delegates to the matching free-standing operation in
``collectionkit.operations``; methods that yield a new sequence wrap it in
a new Collection, everything else returns the plain value.
"""

import random
from collections.abc import Awaitable, Callable, Hashable, Iterable, Iterator
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from collectionkit import operations as ops
from collectionkit.core.exceptions import IndexOutOfBoundsError, InvalidInputError
from collectionkit.stages.custom_stage import MISSING

if TYPE_CHECKING:
    from collectionkit.api.chain import Chain

T = TypeVar("T")
U = TypeVar("U")
K = TypeVar("K", bound=Hashable)


class Collection(Generic[T]):
    """
    Owned wrapper around a list.

    Example:
        nums = Collection([1, 2, 3, 4, 5])
        nums.filter(lambda x: x % 2 == 0).map(lambda x: x * 3)
        # Collection([6, 12])
    """

    __slots__ = ("_data",)

    def __init__(self, data: Iterable[T] | None = None):
        self._data: list[T] = list(data) if data is not None else []

    @classmethod
    def new(cls, data: Iterable[T]) -> "Collection[T]":
        """Create a collection holding the elements of ``data``."""
        return cls(data)

    @classmethod
    def empty(cls) -> "Collection[T]":
        """Create an empty collection."""
        return cls()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def data(self) -> list[T]:
        """The underlying list."""
        return self._data

    def is_empty(self) -> bool:
        return not self._data

    def get(self, index: int) -> T | None:
        """Element at ``index``, or None when out of range."""
        if 0 <= index < len(self._data):
            return self._data[index]
        return None

    def first(self) -> T | None:
        return self._data[0] if self._data else None

    def last(self) -> T | None:
        return self._data[-1] if self._data else None

    def to_list(self) -> list[T]:
        """Shallow copy of the elements as a list."""
        return list(self._data)

    def chain(self) -> "Chain[T]":
        """Start a synchronous chain borrowing this collection."""
        from collectionkit.api.chain import chain

        return chain(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[T]:
        return iter(self._data)

    def __getitem__(self, index: int) -> T:
        try:
            return self._data[index]
        except IndexError:
            raise IndexOutOfBoundsError(index, len(self._data)) from None

    def __contains__(self, value: object) -> bool:
        return value in self._data

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Collection):
            return self._data == other._data
        if isinstance(other, list):
            return self._data == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Collection({self._data!r})"

    # ------------------------------------------------------------------
    # Iteration
    # ------------------------------------------------------------------

    def each(self, iteratee: Callable[[T], Any]) -> "Collection[T]":
        """Invoke ``iteratee`` on each element; returns self for chaining."""
        ops.each(self._data, iteratee)
        return self

    def for_each(self, iteratee: Callable[[T], Any]) -> "Collection[T]":
        ops.for_each(self._data, iteratee)
        return self

    def for_each_right(self, iteratee: Callable[[T], Any]) -> "Collection[T]":
        ops.for_each_right(self._data, iteratee)
        return self

    def map(self, iteratee: Callable[[T], U]) -> "Collection[U]":
        return Collection(ops.map(self._data, iteratee))

    def filter(self, predicate: Callable[[T], Any]) -> "Collection[T]":
        return Collection(ops.filter(self._data, predicate))

    def reduce(self, iteratee: Callable[[U, T], U], initial: U = MISSING) -> U:
        return ops.reduce(self._data, iteratee, initial)

    def reduce_right(self, iteratee: Callable[[U, T], U], initial: U = MISSING) -> U:
        return ops.reduce_right(self._data, iteratee, initial)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def find(self, predicate: Callable[[T], Any]) -> T | None:
        return ops.find(self._data, predicate)

    def find_last(self, predicate: Callable[[T], Any]) -> T | None:
        return ops.find_last(self._data, predicate)

    def includes(self, value: T) -> bool:
        return ops.includes(self._data, value)

    def every(self, predicate: Callable[[T], Any]) -> bool:
        return ops.every(self._data, predicate)

    def some(self, predicate: Callable[[T], Any]) -> bool:
        return ops.some(self._data, predicate)

    def count_by(self, iteratee: Callable[[T], K]) -> dict[K, int]:
        return ops.count_by(self._data, iteratee)

    def partition(
        self, predicate: Callable[[T], Any]
    ) -> tuple["Collection[T]", "Collection[T]"]:
        matching, rest = ops.partition(self._data, predicate)
        return Collection(matching), Collection(rest)

    # ------------------------------------------------------------------
    # Transform
    # ------------------------------------------------------------------

    def group_by(self, iteratee: Callable[[T], K]) -> dict[K, list[T]]:
        return ops.group_by(self._data, iteratee)

    def key_by(self, iteratee: Callable[[T], K]) -> dict[K, T]:
        return ops.key_by(self._data, iteratee)

    def invoke(self, method: Callable[..., U] | str, *args: Any) -> "Collection[U]":
        return Collection(ops.invoke(self._data, method, *args))

    def sort_by(self, iteratee: Callable[[T], Any]) -> "Collection[T]":
        return Collection(ops.sort_by(self._data, iteratee))

    def order_by(
        self, iteratee: Callable[[T], Any], ascending: bool = True
    ) -> "Collection[T]":
        return Collection(ops.order_by(self._data, iteratee, ascending))

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    def size(self) -> int:
        return ops.size(self._data)

    def shuffle(self, rng: random.Random | None = None) -> "Collection[T]":
        return Collection(ops.shuffle(self._data, rng))

    def sample(self, rng: random.Random | None = None) -> T | None:
        return ops.sample(self._data, rng)

    def sample_size(
        self, n: int, rng: random.Random | None = None
    ) -> "Collection[T]":
        return Collection(ops.sample_size(self._data, n, rng))

    # ------------------------------------------------------------------
    # Async
    # ------------------------------------------------------------------

    async def map_async(
        self,
        iteratee: Callable[[T], Awaitable[U] | U],
        concurrency: int | None = None,
    ) -> "Collection[U]":
        return Collection(await ops.map_async(self._data, iteratee, concurrency))

    async def filter_async(
        self,
        predicate: Callable[[T], Awaitable[Any] | Any],
        concurrency: int | None = None,
    ) -> "Collection[T]":
        return Collection(await ops.filter_async(self._data, predicate, concurrency))

    async def reduce_async(
        self, iteratee: Callable[[U, T], Awaitable[U] | U], initial: U = MISSING
    ) -> U:
        return await ops.reduce_async(self._data, iteratee, initial)

    async def for_each_async(
        self,
        iteratee: Callable[[T], Awaitable[Any] | Any],
        concurrency: int | None = None,
    ) -> None:
        await ops.for_each_async(self._data, iteratee, concurrency)

    async def find_async(self, predicate: Callable[[T], Awaitable[Any] | Any]) -> T | None:
        return await ops.find_async(self._data, predicate)

    async def every_async(self, predicate: Callable[[T], Awaitable[Any] | Any]) -> bool:
        return await ops.every_async(self._data, predicate)

    async def some_async(self, predicate: Callable[[T], Awaitable[Any] | Any]) -> bool:
        return await ops.some_async(self._data, predicate)

    # ------------------------------------------------------------------
    # Parallel
    # ------------------------------------------------------------------

    def map_parallel(
        self, iteratee: Callable[[T], U], max_workers: int | None = None
    ) -> "Collection[U]":
        return Collection(ops.map_parallel(self._data, iteratee, max_workers))

    def filter_parallel(
        self, predicate: Callable[[T], Any], max_workers: int | None = None
    ) -> "Collection[T]":
        return Collection(ops.filter_parallel(self._data, predicate, max_workers))

    def reduce_parallel(
        self,
        iteratee: Callable[[U, T], U],
        initial: U = MISSING,
        combine: Callable[[U, U], U] | None = None,
        max_workers: int | None = None,
    ) -> U:
        return ops.reduce_parallel(
            self._data, iteratee, initial, combine=combine, max_workers=max_workers
        )

    def for_each_parallel(
        self, iteratee: Callable[[T], Any], max_workers: int | None = None
    ) -> None:
        ops.for_each_parallel(self._data, iteratee, max_workers)

    def find_parallel(
        self, predicate: Callable[[T], Any], max_workers: int | None = None
    ) -> T | None:
        return ops.find_parallel(self._data, predicate, max_workers)

    def every_parallel(
        self, predicate: Callable[[T], Any], max_workers: int | None = None
    ) -> bool:
        return ops.every_parallel(self._data, predicate, max_workers)

    def some_parallel(
        self, predicate: Callable[[T], Any], max_workers: int | None = None
    ) -> bool:
        return ops.some_parallel(self._data, predicate, max_workers)

    # ------------------------------------------------------------------
    # DataFrame conversion
    # ------------------------------------------------------------------

    def to_pandas(self, column: str = "value") -> Any:
        """
        Convert to a pandas DataFrame.

        A collection of dicts becomes one row per dict; anything else
        becomes a single column named ``column``.

        Returns:
            pandas.DataFrame
        """
        import pandas as pd

        if self._data and all(isinstance(item, dict) for item in self._data):
            return pd.DataFrame(self._data)
        return pd.DataFrame({column: self._data})

    def to_polars(self, column: str = "value") -> Any:
        """
        Convert to a Polars DataFrame.

        Returns:
            polars.DataFrame
        """
        import polars as pl

        if self._data and all(isinstance(item, dict) for item in self._data):
            return pl.DataFrame(self._data)
        return pl.DataFrame({column: self._data})

    @classmethod
    def from_dataframe(cls, df: Any, column: str | None = None) -> "Collection[Any]":
        """
        Create from a pandas or Polars DataFrame.

        Args:
            df: pandas.DataFrame or polars.DataFrame
            column: Take the values of this column; when omitted each row
                becomes a dict

        Returns:
            New Collection

        Raises:
            InvalidInputError: If ``column`` is not in the frame
        """
        if column is not None:
            if column not in list(df.columns):
                raise InvalidInputError(f"column '{column}' not found")
            return cls(df[column].to_list())
        if hasattr(df, "to_dicts"):
            return cls(df.to_dicts())
        return cls(df.to_dict(orient="records"))
