"""
Async collection operations.

Iteratees may be coroutine functions or plain callables; a returned
awaitable is awaited, a plain value is used as-is. With ``concurrency``
left as None operations run one element at a time in order; otherwise up
to ``concurrency`` invocations are in flight at once through a
ConcurrencyController. Results always keep source order.
"""

import inspect
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Any, TypeVar

from collectionkit.core.exceptions import EmptyCollectionError, InvalidInputError
from collectionkit.orchestration.concurrency_controller import ConcurrencyController
from collectionkit.stages.custom_stage import MISSING

T = TypeVar("T")
U = TypeVar("U")


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _controller(concurrency: int | None) -> ConcurrencyController | None:
    if concurrency is None:
        return None
    if concurrency < 1:
        raise InvalidInputError(f"concurrency must be at least 1, got {concurrency}")
    return ConcurrencyController(concurrency)


async def _map_all(
    items: Sequence[T], fn: Callable[[T], Any], concurrency: int | None
) -> list[Any]:
    controller = _controller(concurrency)
    if controller is None:
        return [await _resolve(fn(item)) for item in items]

    async def _call(item: T) -> Any:
        return await _resolve(fn(item))

    return await controller.gather(items, _call)


async def map_async(
    collection: Iterable[T],
    iteratee: Callable[[T], Awaitable[U] | U],
    concurrency: int | None = None,
) -> list[U]:
    """
    Map each element through an async (or sync) iteratee.

    Args:
        collection: Elements to map
        iteratee: Function returning the mapped value or an awaitable of it
        concurrency: Max in-flight invocations; None means sequential

    Example:
        async def double(x):
            await asyncio.sleep(0)
            return x * 2

        await map_async([1, 2, 3], double)  # [2, 4, 6]
    """
    return await _map_all(list(collection), iteratee, concurrency)


async def filter_async(
    collection: Iterable[T],
    predicate: Callable[[T], Awaitable[Any] | Any],
    concurrency: int | None = None,
) -> list[T]:
    """Keep elements whose predicate resolves truthy, in source order."""
    items = list(collection)
    verdicts = await _map_all(items, predicate, concurrency)
    return [item for item, keep in zip(items, verdicts, strict=True) if keep]


async def reduce_async(
    collection: Iterable[T],
    iteratee: Callable[[U, T], Awaitable[U] | U],
    initial: U = MISSING,
) -> U:
    """
    Fold left to right, awaiting each step before the next.

    Raises:
        EmptyCollectionError: If the collection is empty and no initial
            value is given
    """
    iterator = iter(collection)
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
        acc = await _resolve(iteratee(acc, item))
    return acc


async def for_each_async(
    collection: Iterable[T],
    iteratee: Callable[[T], Awaitable[Any] | Any],
    concurrency: int | None = None,
) -> None:
    """Invoke ``iteratee`` for each element for its side effects."""
    await _map_all(list(collection), iteratee, concurrency)


async def find_async(
    collection: Iterable[T], predicate: Callable[[T], Awaitable[Any] | Any]
) -> T | None:
    """Return the first matching element, stopping at the first match."""
    for item in collection:
        if await _resolve(predicate(item)):
            return item
    return None


async def every_async(
    collection: Iterable[T], predicate: Callable[[T], Awaitable[Any] | Any]
) -> bool:
    """Whether all elements match; short-circuits on the first miss."""
    for item in collection:
        if not await _resolve(predicate(item)):
            return False
    return True


async def some_async(
    collection: Iterable[T], predicate: Callable[[T], Awaitable[Any] | Any]
) -> bool:
    """Whether any element matches; short-circuits on the first match."""
    for item in collection:
        if await _resolve(predicate(item)):
            return True
    return False


async def execute_parallel(awaitables: Iterable[Awaitable[T]]) -> list[T]:
    """Await all awaitables concurrently; results keep input order."""
    pending = list(awaitables)
    return await ConcurrencyController(max(len(pending), 1)).gather(
        pending, _resolve
    )


async def execute_sequential(awaitables: Iterable[Awaitable[T]]) -> list[T]:
    """Await each awaitable in turn."""
    return [await awaitable for awaitable in awaitables]


async def execute_with_concurrency(
    awaitables: Iterable[Awaitable[T]], concurrency: int
) -> list[T]:
    """
    Await all awaitables with at most ``concurrency`` in flight.

    Raises:
        InvalidInputError: If ``concurrency`` is less than 1
    """
    controller = _controller(concurrency)
    return await controller.gather(list(awaitables), _resolve)
