"""Tests for chain stage variants."""

import pytest

from collectionkit.core.exceptions import (
    EmptySourceStageFailure,
    InvalidInputError,
    StageClosureFailed,
)
from collectionkit.stages import (
    CustomStage,
    FilterStage,
    FlatMapStage,
    MapStage,
    ReduceStage,
    ReverseStage,
    SkipStage,
    SortStage,
    StageKind,
    TakeStage,
)


class TestElementStages:
    """Test map, filter and flat_map."""

    def test_map_changes_element_type(self):
        """Map can turn ints into strings."""
        stage = MapStage(str)
        assert stage.apply([1, 2, 3]) == ["1", "2", "3"]
        assert stage.kind is StageKind.MAP

    def test_filter_keeps_truthy(self):
        """Filter keeps elements whose predicate is truthy."""
        stage = FilterStage(lambda x: x % 2)
        assert stage.apply([1, 2, 3, 4, 5]) == [1, 3, 5]

    def test_flat_map_concatenates_in_order(self):
        """FlatMap concatenates sub-sequences in source order."""
        stage = FlatMapStage(lambda x: [x] * x)
        assert stage.apply([1, 2, 3]) == [1, 2, 2, 3, 3, 3]

    def test_flat_map_accepts_generators(self):
        """Any iterable result is accepted."""
        stage = FlatMapStage(lambda x: (x + i for i in range(2)))
        assert stage.apply([10, 20]) == [10, 11, 20, 21]

    def test_element_stages_are_parallel_eligible(self):
        """Only element-wise stages may fan out."""
        assert MapStage(str).parallel_eligible
        assert FilterStage(bool).parallel_eligible
        assert FlatMapStage(list).parallel_eligible
        assert not TakeStage(1).parallel_eligible
        assert not SortStage(str).parallel_eligible
        assert not CustomStage(list).parallel_eligible

    def test_apply_does_not_mutate_input(self):
        """Element stages always build a new list."""
        source = [3, 1, 2]
        result = MapStage(lambda x: x).apply(source)
        assert result == source
        assert result is not source

    def test_closure_error_wrapped_with_index(self):
        """A failing closure becomes StageClosureFailed with its element index."""

        def boom(x):
            if x == 3:
                raise ValueError("no threes")
            return x

        with pytest.raises(StageClosureFailed) as exc_info:
            MapStage(boom).apply([1, 2, 3, 4, 5])

        assert exc_info.value.stage == "map"
        assert exc_info.value.index == 2
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_offset_shifts_reported_index(self):
        """Chunked application reports indices in the full collection."""
        with pytest.raises(StageClosureFailed) as exc_info:
            FilterStage(lambda x: 1 / x).apply([1, 0], offset=6)
        assert exc_info.value.index == 7

    def test_flat_map_non_iterable_result_wrapped(self):
        """A flat_map closure returning a non-iterable is a closure failure."""
        with pytest.raises(StageClosureFailed):
            FlatMapStage(lambda x: x).apply([1])

    def test_non_callable_rejected(self):
        """Stages refuse non-callables at construction."""
        with pytest.raises(TypeError):
            MapStage(42)

    def test_invoke_and_emit(self):
        """invoke runs the closure and emit turns its result into outputs."""
        stage = FilterStage(lambda x: x > 1)
        assert stage.invoke(2) is True
        assert list(stage.emit(2, True)) == [2]
        assert list(stage.emit(0, False)) == []


class TestStructuralStages:
    """Test take, skip, reverse and sort."""

    def test_take_saturates(self):
        """take(n) with n >= len is a no-op; take(0) is empty."""
        assert TakeStage(10).apply([1, 2, 3]) == [1, 2, 3]
        assert TakeStage(0).apply([1, 2, 3]) == []
        assert TakeStage(2).apply([1, 2, 3]) == [1, 2]

    def test_skip_saturates(self):
        """skip(n) with n >= len is empty; skip(0) passes through."""
        assert SkipStage(3).apply([1, 2, 3]) == []
        assert SkipStage(99).apply([1, 2, 3]) == []
        assert SkipStage(0).apply([1, 2, 3]) == [1, 2, 3]

    @pytest.mark.parametrize("bad", [-1, 1.5, "2", True])
    def test_counts_validated(self, bad):
        """Counts must be non-negative ints."""
        with pytest.raises(InvalidInputError):
            TakeStage(bad)
        with pytest.raises(InvalidInputError):
            SkipStage(bad)

    def test_reverse_copy_and_in_place(self):
        """apply copies; apply_in_place reverses the given list."""
        source = [1, 2, 3]
        stage = ReverseStage()
        assert stage.apply(source) == [3, 2, 1]
        assert source == [1, 2, 3]

        owned = [1, 2, 3]
        assert stage.apply_in_place(owned) is owned
        assert owned == [3, 2, 1]

    def test_sort_is_stable_in_both_directions(self):
        """Equal keys keep source order ascending and descending."""
        items = [("b", 1), ("a", 2), ("c", 1), ("d", 2)]
        asc = SortStage(lambda p: p[1]).apply(items)
        desc = SortStage(lambda p: p[1], ascending=False).apply(items)

        assert asc == [("b", 1), ("c", 1), ("a", 2), ("d", 2)]
        assert desc == [("a", 2), ("d", 2), ("b", 1), ("c", 1)]

    def test_sort_key_failure_wrapped(self):
        """A failing key function is a closure failure without an index."""
        with pytest.raises(StageClosureFailed) as exc_info:
            SortStage(lambda x: x["missing"]).apply([{}])
        assert exc_info.value.index is None


class TestCustomStages:
    """Test custom and reduce."""

    def test_custom_receives_whole_collection(self):
        """Custom sees the full collection and may return anything."""
        stage = CustomStage(lambda items: items[::2], name="every_other")
        assert stage.name == "every_other"
        assert stage.apply([1, 2, 3, 4, 5]) == [1, 3, 5]

    def test_custom_default_name(self):
        assert CustomStage(list).name == "custom"

    def test_custom_failure_wrapped(self):
        """A failing custom function is wrapped."""
        with pytest.raises(StageClosureFailed, match="Stage 'custom' failed"):
            CustomStage(lambda items: items[99]).apply([1])

    async def test_custom_async_awaits_coroutine(self):
        """apply_async awaits a coroutine result."""

        async def total(items):
            return sum(items)

        assert await CustomStage(total).apply_async([1, 2, 3]) == 6

    def test_reduce_with_initial(self):
        """Reduce folds from the initial value."""
        stage = ReduceStage(lambda acc, x: acc + x, 10)
        assert stage.apply([1, 2, 3]) == 16
        assert stage.apply([]) == 10
        assert stage.produces_scalar

    def test_reduce_without_initial_uses_first(self):
        """Without an initial value the first element seeds the fold."""
        assert ReduceStage(lambda acc, x: acc * x).apply([2, 3, 4]) == 24

    def test_reduce_empty_without_initial(self):
        """Empty input with no initial value is an EmptySourceStageFailure."""
        with pytest.raises(EmptySourceStageFailure):
            ReduceStage(lambda acc, x: acc + x).apply([])

    def test_reduce_explicit_none_initial(self):
        """None is a real initial value, not 'missing'."""
        stage = ReduceStage(lambda acc, x: x if acc is None else acc + x, None)
        assert stage.apply([]) is None
        assert stage.apply([1, 2]) == 3

    def test_reduce_failure_reports_index(self):
        """The failing element's index is reported."""
        with pytest.raises(StageClosureFailed) as exc_info:
            ReduceStage(lambda acc, x: acc / x).apply([1, 2, 0, 4])
        assert exc_info.value.index == 2

    async def test_reduce_async_awaits_steps(self):
        """Async reduce awaits coroutine steps."""

        async def add(acc, x):
            return acc + x

        assert await ReduceStage(add, 0).apply_async([1, 2, 3]) == 6
