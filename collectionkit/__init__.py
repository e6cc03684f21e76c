"""
collectionkit: lodash-style collection operations and deferred chains.

Chains compose map/filter/take/skip/reverse/flat_map/sort/custom stages
over a source collection and evaluate them synchronously, asynchronously
or across a thread pool.
"""

from collectionkit.api import (
    AsyncChain,
    Chain,
    ChainBuilder,
    ParallelChain,
    chain,
    chain_async,
    chain_parallel,
)
from collectionkit.config import ConfigLoader
from collectionkit.core import (
    AsyncSpec,
    CancellationRequested,
    ChainConsumedError,
    ChainResult,
    ChainSpecifications,
    CollectionError,
    EmptyCollectionError,
    EmptySourceStageFailure,
    ExecutionStats,
    IndexOutOfBoundsError,
    InvalidInputError,
    InvalidPredicateError,
    ParallelExecutionError,
    ParallelSpec,
    StageClosureFailed,
    TypeConversionError,
)
from collectionkit.core.collection import Collection
from collectionkit.orchestration import CancellationToken
from collectionkit.utils import configure_logging, get_logger

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Chains
    "chain",
    "chain_async",
    "chain_parallel",
    "Chain",
    "AsyncChain",
    "ParallelChain",
    "ChainBuilder",
    "Collection",
    "CancellationToken",
    # Configuration
    "ParallelSpec",
    "AsyncSpec",
    "ChainSpecifications",
    "ConfigLoader",
    # Results
    "ChainResult",
    "ExecutionStats",
    # Errors
    "CollectionError",
    "InvalidInputError",
    "TypeConversionError",
    "IndexOutOfBoundsError",
    "EmptyCollectionError",
    "InvalidPredicateError",
    "StageClosureFailed",
    "EmptySourceStageFailure",
    "CancellationRequested",
    "ParallelExecutionError",
    "ChainConsumedError",
    # Logging
    "configure_logging",
    "get_logger",
]
