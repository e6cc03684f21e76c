"""
Async Chain Example

Stage closures may be coroutine functions. The async chain awaits each
invocation before starting the next and can be cancelled with a token.
"""

import asyncio

from collectionkit import CancellationRequested, CancellationToken, chain_async
from collectionkit.operations import map_async


async def fetch_score(item_id: int) -> int:
    """Stand-in for an I/O-bound lookup."""
    await asyncio.sleep(0.01)
    return item_id * 10


async def main():
    scores = await chain_async(range(1, 6)).map(fetch_score).filter(lambda s: s > 20)
    print(f"Scores above 20: {scores}")

    # Free-standing operation with bounded concurrency
    concurrent = await map_async(range(20), fetch_score, concurrency=5)
    print(f"Fetched {len(concurrent)} scores concurrently")

    token = CancellationToken()

    async def slow(x):
        if x == 3:
            token.cancel("enough")
        return await fetch_score(x)

    try:
        await chain_async(range(10), cancellation=token).map(slow).collect()
    except CancellationRequested as e:
        print(f"Stopped early: {e}")


if __name__ == "__main__":
    asyncio.run(main())
