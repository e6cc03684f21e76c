"""Sampling operations: size, shuffle, sample and sample_size."""

import random
from collections.abc import Sequence, Sized
from typing import TypeVar

from collectionkit.core.exceptions import InvalidInputError

T = TypeVar("T")


def size(collection: Sized) -> int:
    """Number of elements in the collection."""
    return len(collection)


def shuffle(collection: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """
    Return a shuffled copy; the input is left untouched.

    Args:
        collection: Elements to shuffle
        rng: Optional random generator for reproducible results
    """
    shuffled = list(collection)
    (rng or random).shuffle(shuffled)
    return shuffled


def sample(collection: Sequence[T], rng: random.Random | None = None) -> T | None:
    """Return one random element, or None for an empty collection."""
    if len(collection) == 0:
        return None
    return (rng or random).choice(collection)


def sample_size(
    collection: Sequence[T], n: int, rng: random.Random | None = None
) -> list[T]:
    """
    Return ``n`` elements from distinct positions, in random order.

    ``n`` larger than the collection returns every element (shuffled).

    Raises:
        InvalidInputError: If ``n`` is negative
    """
    if n < 0:
        raise InvalidInputError(f"sample size must be non-negative, got {n}")
    if n == 0 or len(collection) == 0:
        return []
    return (rng or random).sample(list(collection), min(n, len(collection)))
