"""
Chunk planning for parallel fan-out.

Splits a collection into contiguous, independently owned slices and merges
per-chunk results back by chunk index, so output order never depends on
which worker finished first.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ChunkBounds:
    """Half-open ``[start, end)`` range of one chunk."""

    index: int
    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start


@dataclass
class ChunkResult(Generic[T]):
    """Result of processing a single chunk."""

    chunk_index: int
    data: T
    rows_processed: int
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class ChunkPlan:
    """
    Partition of ``total`` elements into chunks of at most ``chunk_size``.

    Example:
        plan = ChunkPlan.build(total=10, chunk_size=4)
        [len(b) for b in plan]  # [4, 4, 2]
    """

    total: int
    chunk_size: int
    bounds: list[ChunkBounds] = field(default_factory=list)

    @classmethod
    def build(cls, total: int, chunk_size: int) -> "ChunkPlan":
        """
        Plan chunks covering ``range(total)``.

        Args:
            total: Number of elements
            chunk_size: Maximum elements per chunk

        Returns:
            ChunkPlan (empty when total is 0)
        """
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        if total < 0:
            raise ValueError("total must be non-negative")

        bounds = [
            ChunkBounds(index=i, start=start, end=min(start + chunk_size, total))
            for i, start in enumerate(range(0, total, chunk_size))
        ]
        return cls(total=total, chunk_size=chunk_size, bounds=bounds)

    def split(self, items: Sequence[T]) -> list[list[T]]:
        """Copy each chunk's elements into its own list."""
        if len(items) != self.total:
            raise ValueError(
                f"Plan covers {self.total} elements, got {len(items)}"
            )
        return [list(items[b.start : b.end]) for b in self.bounds]

    def __len__(self) -> int:
        return len(self.bounds)

    def __iter__(self) -> Iterator[ChunkBounds]:
        return iter(self.bounds)


def merge_chunks(results: list[ChunkResult[list[T]]], expected: int) -> list[T]:
    """
    Concatenate per-chunk lists in chunk-index order.

    Args:
        results: Chunk results in any order
        expected: Number of chunks in the plan

    Returns:
        Flat list in original element order

    Raises:
        ValueError: If a chunk is missing or duplicated
    """
    ordered = sorted(results, key=lambda r: r.chunk_index)
    indices = [r.chunk_index for r in ordered]
    if indices != list(range(expected)):
        raise ValueError(f"Expected chunks 0..{expected - 1}, got {indices}")

    merged: list[T] = []
    for result in ordered:
        merged.extend(result.data)
    return merged
