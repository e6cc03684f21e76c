"""Tests for AsyncExecutor."""

import asyncio

import pytest

from collectionkit import Collection
from collectionkit.core.exceptions import CancellationRequested, StageClosureFailed
from collectionkit.core.source import SourceBinding
from collectionkit.core.specifications import AsyncSpec
from collectionkit.orchestration import (
    AsyncExecutor,
    CancellationToken,
    ExecutionContext,
)
from collectionkit.stages import (
    CustomStage,
    FilterStage,
    FlatMapStage,
    MapStage,
    ReduceStage,
    ReverseStage,
    SortStage,
)


async def run(stages, data, executor=None):
    executor = executor or AsyncExecutor()
    context = ExecutionContext(executor=executor.name, source_size=len(data))
    return await executor.execute(stages, SourceBinding(data), context)


class TestAsyncExecutor:
    """Test cooperative async evaluation."""

    @pytest.mark.asyncio
    async def test_awaits_coroutine_closures(self, async_double):
        """Coroutine closures are awaited per element."""
        assert await run([MapStage(async_double)], [1, 2, 3]) == [2, 4, 6]

    async def test_mixes_sync_and_async_closures(self, async_double):
        """Plain callables work alongside coroutine functions."""

        async def is_big(x):
            return x > 4

        result = await run(
            [MapStage(async_double), FilterStage(is_big), MapStage(str)], [1, 2, 3, 4]
        )
        assert result == ["6", "8"]

    async def test_one_invocation_in_flight(self):
        """The next element is not started before the previous one finishes."""
        active = 0
        max_active = 0

        async def slow(x):
            nonlocal active, max_active
            active += 1
            max_active = max(max_active, active)
            await asyncio.sleep(0.001)
            active -= 1
            return x

        result = await run([MapStage(slow)], list(range(10)))
        assert result == list(range(10))
        assert max_active == 1

    async def test_async_flat_map(self):
        """An async flat_map closure's awaited sequence is concatenated."""

        async def dup(x):
            return [x, x]

        assert await run([FlatMapStage(dup)], [1, 2]) == [1, 1, 2, 2]

    async def test_structural_and_custom_stages(self):
        """Sort, reverse and async custom stages behave as in sync mode."""

        async def head(items):
            return items[:2]

        result = await run(
            [SortStage(lambda x: x), ReverseStage(), CustomStage(head)], [2, 3, 1]
        )
        assert result == [3, 2]

    async def test_async_reduce(self):
        """Reduce awaits coroutine steps."""

        async def add(acc, x):
            return acc + x

        assert await run([ReduceStage(add, 0)], [1, 2, 3, 4]) == 10

    async def test_custom_returning_collection_flows_on(self):
        """An async custom stage may hand back a Collection."""

        async def evens(items):
            return Collection(items).filter(lambda x: x % 2 == 0)

        result = await run([CustomStage(evens), MapStage(lambda x: x * 10)], [1, 2, 3, 4])
        assert result == [20, 40]

    async def test_sort_awaits_async_key(self):
        """Coroutine keys are awaited in source order before sorting."""
        calls = []

        async def neg(x):
            calls.append(x)
            return -x

        assert await run([SortStage(neg)], [1, 3, 2]) == [3, 2, 1]
        assert calls == [1, 3, 2]

    async def test_async_sort_is_stable_descending(self):
        """Equal keys keep their source order in either direction."""

        async def first_letter(s):
            return s[0]

        words = ["bx", "a1", "by", "a2"]
        assert await run([SortStage(first_letter)], words) == ["a1", "a2", "bx", "by"]
        assert await run([SortStage(first_letter, ascending=False)], words) == [
            "bx",
            "by",
            "a1",
            "a2",
        ]

    async def test_async_sort_single_element(self):
        """A lone element's key is still awaited."""
        awaited = []

        async def key(x):
            awaited.append(x)
            return x

        assert await run([SortStage(key)], [7]) == [7]
        assert awaited == [7]

    async def test_async_sort_key_failure(self):
        async def bad(x):
            if x == 2:
                raise KeyError(x)
            return x

        with pytest.raises(StageClosureFailed) as exc_info:
            await run([SortStage(bad)], [1, 2, 3])
        assert exc_info.value.index == 1
        assert exc_info.value.stage == "sort_by"

    async def test_failure_wrapped_with_index(self, five):
        """An awaited closure failure carries the element index."""

        async def boom(x):
            if x == 3:
                raise ValueError("no threes")
            return x

        with pytest.raises(StageClosureFailed) as exc_info:
            await run([MapStage(boom)], five)
        assert exc_info.value.index == 2

    async def test_source_not_mutated(self):
        """Async custom stages get a copy of the borrowed source."""
        source = [1, 2, 3]

        async def clear(items):
            items.clear()
            return items

        assert await run([CustomStage(clear)], source) == []
        assert source == [1, 2, 3]


class TestAsyncCancellation:
    """Test cooperative cancellation."""

    async def test_cancelled_before_start(self, token):
        """A token cancelled up front stops before the first stage."""
        calls = []
        token.cancel("not needed")
        executor = AsyncExecutor(cancellation=token)

        with pytest.raises(CancellationRequested) as exc_info:
            await run([MapStage(calls.append)], [1, 2, 3], executor)

        assert calls == []
        assert exc_info.value.stage == "map"

    async def test_cancel_mid_stage_stops_new_invocations(self, token):
        """Cancelling during element 2 prevents element 3 from starting."""
        calls = []

        async def record(x):
            calls.append(x)
            if x == 2:
                token.cancel()
            return x

        executor = AsyncExecutor(cancellation=token)
        with pytest.raises(CancellationRequested):
            await run([MapStage(record)], [1, 2, 3, 4], executor)

        assert calls == [1, 2]

    async def test_cancel_mid_reduce_stops_new_steps(self, token):
        """A reduce stops folding once the token is cancelled."""
        calls = []

        async def add(acc, x):
            calls.append(x)
            if x == 2:
                token.cancel()
            return acc + x

        executor = AsyncExecutor(cancellation=token)
        with pytest.raises(CancellationRequested) as exc_info:
            await run([ReduceStage(add, 0)], [1, 2, 3, 4], executor)

        assert calls == [1, 2]
        assert exc_info.value.stage == "reduce"

    async def test_cancel_between_stages(self, token):
        """Cancelling in a custom stage stops the next stage."""
        later = []

        def stop(items):
            token.cancel()
            return items

        executor = AsyncExecutor(cancellation=token)
        with pytest.raises(CancellationRequested):
            await run([CustomStage(stop), MapStage(later.append)], [1], executor)
        assert later == []

    async def test_task_cancellation_propagates(self):
        """asyncio.CancelledError from the surrounding task is not wrapped."""
        started = asyncio.Event()

        async def wait_forever(x):
            started.set()
            await asyncio.sleep(3600)

        task = asyncio.ensure_future(run([MapStage(wait_forever)], [1, 2]))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

    async def test_token_cancellable_from_thread(self, token):
        """cancel() may be called from another thread."""
        await asyncio.get_running_loop().run_in_executor(None, token.cancel)
        assert token.is_cancelled


class TestAsyncYield:
    """Test yield_every scheduling."""

    async def test_yield_every_lets_other_tasks_run(self):
        """Synchronous closures yield to the loop every N calls."""
        ticks = []

        async def ticker():
            for _ in range(3):
                ticks.append("tick")
                await asyncio.sleep(0)

        executor = AsyncExecutor(spec=AsyncSpec(yield_every=1))
        other = asyncio.ensure_future(ticker())
        result = await run([MapStage(lambda x: x + 1)], [1, 2, 3], executor)
        ticks_during_run = len(ticks)
        await other

        assert result == [2, 3, 4]
        assert ticks_during_run >= 1

    async def test_no_yield_by_default(self):
        """With yield_every=0 purely synchronous stages never suspend."""
        ticks = []

        async def ticker():
            ticks.append("tick")

        other = asyncio.ensure_future(ticker())
        await run([MapStage(lambda x: x + 1)], [1, 2, 3])
        ticks_during_run = len(ticks)
        await other

        assert ticks_during_run == 0

    def test_repr(self):
        assert repr(AsyncExecutor(spec=AsyncSpec(yield_every=5))) == (
            "AsyncExecutor(yield_every=5)"
        )
