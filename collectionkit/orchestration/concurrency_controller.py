"""
Concurrency controller for bounded async fan-out.

Provides a small abstraction over asyncio.Semaphore used by the async
collection operations when a caller asks for more than one in-flight
closure invocation.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from contextlib import asynccontextmanager
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


class ConcurrencyController:
    """
    Caps the number of coroutines running a guarded section at once.

    Example:
        controller = ConcurrencyController(max_concurrent=10)

        async def process_item(item):
            async with controller.throttle():
                return await fetch(item)

        results = await asyncio.gather(*[process_item(i) for i in items])
    """

    def __init__(self, max_concurrent: int):
        """
        Initialize concurrency controller.

        Args:
            max_concurrent: Maximum number of concurrent operations
        """
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")

        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._max_concurrent = max_concurrent

    @property
    def max_concurrent(self) -> int:
        """Return the maximum concurrency limit."""
        return self._max_concurrent

    async def acquire(self) -> None:
        """Block until a concurrency slot is available."""
        await self._semaphore.acquire()

    def release(self) -> None:
        """Release a concurrency slot."""
        self._semaphore.release()

    @asynccontextmanager
    async def throttle(self):
        """
        Context manager for throttled execution.

        Acquires a slot on entry, releases on exit (even if exception occurs).
        """
        await self.acquire()
        try:
            yield
        finally:
            self.release()

    async def gather(
        self, items: Sequence[T], operation: Callable[[T], Awaitable[R]]
    ) -> list[R]:
        """
        Run ``operation`` over ``items`` with at most ``max_concurrent`` in flight.

        Results keep the order of ``items``. The first exception cancels the
        remaining operations, waits for them to settle and propagates.
        """

        async def _run_one(item: T) -> R:
            async with self.throttle():
                return await operation(item)

        tasks = [asyncio.ensure_future(_run_one(item)) for item in items]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            # Siblings settle before the first error propagates
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    def __repr__(self) -> str:
        return f"ConcurrencyController(max_concurrent={self._max_concurrent})"
