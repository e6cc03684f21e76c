"""Tests for SyncExecutor and the shared ExecutionStrategy helpers."""

import pytest

from collectionkit import Collection
from collectionkit.core.exceptions import StageClosureFailed, TypeConversionError
from collectionkit.core.source import SourceBinding
from collectionkit.orchestration import ExecutionContext, SyncExecutor
from collectionkit.stages import (
    CustomStage,
    FilterStage,
    MapStage,
    ReduceStage,
    ReverseStage,
    TakeStage,
)


def run(stages, data, owned=False):
    executor = SyncExecutor()
    context = ExecutionContext(executor=executor.name, source_size=len(data))
    return executor.execute(stages, SourceBinding(data, owned=owned), context), context


class TestSyncExecutor:
    """Test synchronous evaluation."""

    def test_applies_stages_in_order(self, numbers, is_even):
        """filter -> map -> take -> reverse over 1..10."""
        result, _ = run(
            [FilterStage(is_even), MapStage(lambda x: x * 3), TakeStage(3), ReverseStage()],
            numbers,
        )
        assert result == [18, 12, 6]

    def test_no_stages_returns_copy(self):
        """An empty stage list yields a detached copy of the source."""
        source = [1, 2, 3]
        result, _ = run([], source)
        assert result == source
        assert result is not source

    def test_source_never_mutated(self):
        """Reverse and custom stages never touch the borrowed source."""
        source = [1, 2, 3]

        def scramble(items):
            items.append(99)
            return items

        result, _ = run([ReverseStage(), CustomStage(scramble), ReverseStage()], source)
        assert source == [1, 2, 3]
        assert result == [99, 1, 2, 3]

    def test_custom_gets_copy_of_borrowed_source(self):
        """A custom stage first in line receives a copy, not the source."""
        source = [1, 2]
        seen = []
        run([CustomStage(lambda items: seen.append(items) or items)], source)
        assert seen[0] is not source

    def test_closures_called_in_source_order(self):
        """Closures run left to right, element by element."""
        calls = []
        run([MapStage(lambda x: calls.append(x) or x)], [3, 1, 2])
        assert calls == [3, 1, 2]

    def test_failure_stops_evaluation(self, five, fail_on):
        """Later stages never run after a failure."""
        later = []
        with pytest.raises(StageClosureFailed) as exc_info:
            run([MapStage(fail_on(3)), MapStage(lambda x: later.append(x))], five)
        assert exc_info.value.index == 2
        assert later == []

    def test_reduce_yields_scalar(self):
        """A reduce stage ends evaluation with a single value."""
        result, context = run([ReduceStage(lambda a, b: a + b, 0)], [1, 2, 3])
        assert result == 6
        assert context.stage_stats[-1].elements_out is None

    def test_stage_after_scalar_rejected(self):
        """A stage fed a scalar by a custom stage raises TypeConversionError."""
        with pytest.raises(TypeConversionError):
            run([CustomStage(len), MapStage(str)], [1, 2, 3])

    def test_custom_returning_collection_flows_on(self, is_even):
        """A Collection returned by a custom stage feeds the next stage."""
        result, _ = run(
            [CustomStage(lambda items: Collection(items).filter(is_even)), MapStage(lambda x: x * 10)],
            [1, 2, 3, 4],
        )
        assert result == [20, 40]

    def test_collection_result_reversed_without_aliasing(self):
        """Reversing an unwrapped Collection leaves the returned object alone."""
        kept = Collection([1, 2, 3])
        result, _ = run([CustomStage(lambda items: kept), ReverseStage()], [0])
        assert result == [3, 2, 1]
        assert kept.to_list() == [1, 2, 3]

    def test_scalar_sequence_result_kept_as_is(self):
        """A tuple produced by a custom stage is returned unchanged."""
        result, _ = run([CustomStage(lambda items: (min(items), max(items)))], [3, 1, 2])
        assert result == (1, 3)
        assert isinstance(result, tuple)

    def test_records_stage_stats(self, numbers, is_even):
        """Each stage gets a stats entry with in/out counts."""
        _, context = run([FilterStage(is_even), TakeStage(2)], numbers)
        stats = context.get_stats()
        assert [s.name for s in stats.stages] == ["filter", "take"]
        assert [(s.elements_in, s.elements_out) for s in stats.stages] == [
            (10, 5),
            (5, 2),
        ]
        assert stats.executor == "sync"
