"""Tests for ChainBuilder."""

import logging

import pytest

from collectionkit import (
    AsyncChain,
    AsyncSpec,
    Chain,
    ChainBuilder,
    ChainConsumedError,
    ChainSpecifications,
    InvalidInputError,
    ParallelChain,
    ParallelSpec,
    configure_logging,
)


class TestChainBuilder:
    """Test the mutable fluent builder."""

    def test_default_builds_sync_chain(self):
        c = ChainBuilder.create([3, 1, 2]).sort_by(lambda x: x).map(str).build()
        assert type(c) is Chain
        assert c.collect() == ["1", "2", "3"]

    def test_all_stage_methods(self, numbers):
        """Every stage method is available on the builder."""
        result = (
            ChainBuilder.create(numbers)
            .filter(lambda x: x > 2)
            .map(lambda x: x * 2)
            .skip(1)
            .take(4)
            .flat_map(lambda x: [x])
            .reverse()
            .custom(lambda items: items[1:])
            .reduce(lambda a, b: a + b, 0)
            .build()
            .value()
        )
        # [6..20] -> skip/take -> [8, 10, 12, 14] -> reversed, head dropped
        assert result == 12 + 10 + 8

    def test_with_parallel_execution(self, numbers):
        c = (
            ChainBuilder.create(numbers)
            .map(lambda x: x + 1)
            .with_parallel_execution(max_workers=3, chunk_size=4)
            .build()
        )
        assert isinstance(c, ParallelChain)
        assert c.spec.max_workers == 3
        assert c.spec.chunk_size == 4
        assert c.collect() == [x + 1 for x in numbers]

    def test_with_parallel_execution_spec(self):
        spec = ParallelSpec(max_workers=2)
        c = ChainBuilder.create([1]).with_parallel_execution(spec=spec).build()
        assert c.spec is spec

    def test_parallel_overrides_keep_loaded_settings(self):
        """Unspecified overrides keep values from with_specifications."""
        specs = ChainSpecifications(parallel=ParallelSpec(max_workers=5, chunk_size=9))
        c = (
            ChainBuilder.create([1])
            .with_specifications(specs)
            .with_parallel_execution(max_workers=2)
            .build()
        )
        assert c.spec.max_workers == 2
        assert c.spec.chunk_size == 9

    async def test_with_async_execution(self, token):
        c = (
            ChainBuilder.create([1, 2])
            .map(lambda x: x * 5)
            .with_async_execution(spec=AsyncSpec(yield_every=1), cancellation=token)
            .build()
        )
        assert isinstance(c, AsyncChain)
        assert c.spec.yield_every == 1
        assert c.cancellation is token
        assert await c == [5, 10]

    def test_build_twice_rejected(self):
        builder = ChainBuilder.create([1])
        builder.build()
        with pytest.raises(ChainConsumedError):
            builder.build()
        with pytest.raises(ChainConsumedError):
            builder.map(str)

    def test_nothing_after_reduce(self):
        builder = ChainBuilder.create([1]).reduce(lambda a, b: a + b)
        with pytest.raises(InvalidInputError):
            builder.map(str)


class TestBuilderLogging:
    """Test that loaded specifications drive the log level."""

    @pytest.fixture(autouse=True)
    def restore_level(self):
        yield
        configure_logging(level="WARNING")

    def test_log_level_applied(self, capsys):
        """A DEBUG log_level makes chain debug events visible."""
        specs = ChainSpecifications(log_level="debug")
        ChainBuilder.create([1, 2]).map(str).with_specifications(specs).build()

        assert logging.getLogger().level == logging.DEBUG
        assert "chain built" in capsys.readouterr().out

    def test_warning_level_hides_debug(self, capsys):
        specs = ChainSpecifications(log_level="WARNING")
        ChainBuilder.create([1, 2]).with_specifications(specs).build()

        assert logging.getLogger().level == logging.WARNING
        assert "chain built" not in capsys.readouterr().out
