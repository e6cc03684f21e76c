"""
Thread-parallel collection operations.

Each operation partitions the input into contiguous chunks, processes the
chunks on a ThreadPoolExecutor and combines per-chunk results by chunk
index, so results match the sequential operations element for element.
Closure errors propagate unchanged; when several chunks fail the error of
the lowest-index chunk wins.
"""

from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

from collectionkit.core.exceptions import EmptyCollectionError
from collectionkit.core.specifications import ParallelSpec
from collectionkit.orchestration.chunking import ChunkResult, merge_chunks
from collectionkit.orchestration.parallel_executor import fan_out
from collectionkit.stages.custom_stage import MISSING
from collectionkit.utils.logging_utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")


def _run_chunks(
    collection: Iterable[T],
    chunk_fn: Callable[[list[T], int], R],
    max_workers: int | None,
    chunk_size: int | None,
) -> list[ChunkResult[R]]:
    items = list(collection)
    spec = ParallelSpec(chunk_size=chunk_size)
    if max_workers is not None:
        spec = ParallelSpec(max_workers=max_workers, chunk_size=chunk_size)

    with ThreadPoolExecutor(
        max_workers=spec.max_workers, thread_name_prefix="collectionkit"
    ) as pool:
        results = fan_out(pool, items, chunk_fn, spec.plan_chunk_size(len(items)))

    logger.debug(
        "parallel operation complete",
        elements=len(items),
        chunks=len(results),
        max_workers=spec.max_workers,
    )
    return results


def map_parallel(
    collection: Iterable[T],
    iteratee: Callable[[T], U],
    max_workers: int | None = None,
    chunk_size: int | None = None,
) -> list[U]:
    """
    Parallel ``map``; output order matches input order.

    Example:
        map_parallel(range(1000), lambda x: x * x, max_workers=4)
    """
    results = _run_chunks(
        collection,
        lambda chunk, _offset: [iteratee(item) for item in chunk],
        max_workers,
        chunk_size,
    )
    return merge_chunks(results, len(results))


def filter_parallel(
    collection: Iterable[T],
    predicate: Callable[[T], Any],
    max_workers: int | None = None,
    chunk_size: int | None = None,
) -> list[T]:
    """Parallel ``filter``; kept elements stay in source order."""
    results = _run_chunks(
        collection,
        lambda chunk, _offset: [item for item in chunk if predicate(item)],
        max_workers,
        chunk_size,
    )
    return merge_chunks(results, len(results))


def for_each_parallel(
    collection: Iterable[T],
    iteratee: Callable[[T], Any],
    max_workers: int | None = None,
    chunk_size: int | None = None,
) -> None:
    """
    Invoke ``iteratee`` on every element across worker threads.

    Invocation order across chunks is unspecified.
    """

    def _visit(chunk: list[T], _offset: int) -> None:
        for item in chunk:
            iteratee(item)

    _run_chunks(collection, _visit, max_workers, chunk_size)


def reduce_parallel(
    collection: Iterable[T],
    iteratee: Callable[[U, T], U],
    initial: U = MISSING,
    combine: Callable[[U, U], U] | None = None,
    max_workers: int | None = None,
    chunk_size: int | None = None,
) -> U:
    """
    Fold chunks in parallel, then combine the partials left to right.

    Without ``combine`` the first chunk is seeded with ``initial`` (or its
    own first element when no initial value is given), every other chunk
    with its own first element, and partials are merged with ``iteratee``.
    The result equals ``reduce`` whenever ``iteratee`` is associative over a
    single type.

    With ``combine`` every chunk is seeded with ``initial``, which must then
    be an identity for ``combine``; this lets the accumulator differ in type
    from the elements.

    Args:
        collection: Elements to fold
        iteratee: ``(accumulator, element) -> accumulator``
        initial: Starting accumulator
        combine: ``(left_partial, right_partial) -> partial``
        max_workers: Thread count; defaults to the ParallelSpec default
        chunk_size: Elements per chunk; defaults to an even split

    Raises:
        EmptyCollectionError: If the collection is empty and no initial
            value is given

    Example:
        reduce_parallel(range(1, 101), lambda a, b: a + b, 0)  # 5050
    """
    items = list(collection)
    if not items:
        if initial is MISSING:
            raise EmptyCollectionError(
                "reduce of empty collection with no initial value"
            )
        return initial

    def _fold(chunk: list[T], offset: int) -> U:
        if initial is not MISSING and (offset == 0 or combine is not None):
            acc, rest = initial, chunk
        else:
            acc, rest = chunk[0], chunk[1:]
        for item in rest:
            acc = iteratee(acc, item)
        return acc

    results = _run_chunks(items, _fold, max_workers, chunk_size)
    merge = combine or iteratee
    total = results[0].data
    for result in results[1:]:
        total = merge(total, result.data)
    return total


def find_parallel(
    collection: Iterable[T],
    predicate: Callable[[T], Any],
    max_workers: int | None = None,
    chunk_size: int | None = None,
) -> T | None:
    """
    Return the first matching element in source order, or None.

    All chunks are searched; the match from the lowest-index chunk wins.
    """

    def _search(chunk: list[T], _offset: int) -> tuple[bool, T | None]:
        for item in chunk:
            if predicate(item):
                return True, item
        return False, None

    for result in _run_chunks(collection, _search, max_workers, chunk_size):
        found, item = result.data
        if found:
            return item
    return None


def every_parallel(
    collection: Iterable[T],
    predicate: Callable[[T], Any],
    max_workers: int | None = None,
    chunk_size: int | None = None,
) -> bool:
    """Whether all elements match; True for an empty collection."""
    results = _run_chunks(
        collection,
        lambda chunk, _offset: all(predicate(item) for item in chunk),
        max_workers,
        chunk_size,
    )
    return all(result.data for result in results)


def some_parallel(
    collection: Iterable[T],
    predicate: Callable[[T], Any],
    max_workers: int | None = None,
    chunk_size: int | None = None,
) -> bool:
    """Whether any element matches; False for an empty collection."""
    results = _run_chunks(
        collection,
        lambda chunk, _offset: any(predicate(item) for item in chunk),
        max_workers,
        chunk_size,
    )
    return any(result.data for result in results)
