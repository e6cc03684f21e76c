"""
Pytest configuration and fixtures.

Provides reusable sources and closures for the test suite.
"""

import asyncio

import pytest

from collectionkit import CancellationToken, ParallelSpec


@pytest.fixture
def fail_on():
    """Factory for a map closure that raises ValueError on one element."""

    def factory(value):
        def closure(x):
            if x == value:
                raise ValueError(f"bad element {x}")
            return x * 2

        return closure

    return factory


@pytest.fixture
def numbers():
    """The integers 1..10."""
    return [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]


@pytest.fixture
def five():
    """Five-element source used for failure propagation."""
    return [1, 2, 3, 4, 5]


@pytest.fixture
def is_even():
    return lambda x: x % 2 == 0


@pytest.fixture
def small_parallel_spec():
    """Parallel spec that forces several chunks even for tiny inputs."""
    return ParallelSpec(max_workers=4, chunk_size=2)


@pytest.fixture
def token():
    """Fresh cancellation token."""
    return CancellationToken()


@pytest.fixture
def async_double():
    """Coroutine closure that suspends once before returning x * 2."""

    async def double(x):
        await asyncio.sleep(0)
        return x * 2

    return double
