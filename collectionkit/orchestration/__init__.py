"""Orchestration engine: executors and their scheduling helpers."""

from collectionkit.orchestration.async_executor import AsyncExecutor
from collectionkit.orchestration.cancellation import CancellationToken
from collectionkit.orchestration.chunking import (
    ChunkBounds,
    ChunkPlan,
    ChunkResult,
    merge_chunks,
)
from collectionkit.orchestration.concurrency_controller import ConcurrencyController
from collectionkit.orchestration.execution_context import ExecutionContext
from collectionkit.orchestration.execution_strategy import ExecutionStrategy
from collectionkit.orchestration.parallel_executor import ParallelExecutor, fan_out
from collectionkit.orchestration.sync_executor import SyncExecutor

__all__ = [
    "ExecutionContext",
    "ExecutionStrategy",
    "SyncExecutor",
    "AsyncExecutor",
    "ParallelExecutor",
    "CancellationToken",
    "ConcurrencyController",
    "ChunkBounds",
    "ChunkPlan",
    "ChunkResult",
    "merge_chunks",
    "fan_out",
]
