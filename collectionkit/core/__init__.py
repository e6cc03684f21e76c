"""Core models, specifications and exceptions."""

from collectionkit.core.exceptions import (
    CancellationRequested,
    ChainConsumedError,
    CollectionError,
    EmptyCollectionError,
    EmptySourceStageFailure,
    IndexOutOfBoundsError,
    InvalidInputError,
    InvalidPredicateError,
    ParallelExecutionError,
    StageClosureFailed,
    TypeConversionError,
    wrap_error,
)
from collectionkit.core.models import ChainResult, ExecutionStats, StageStats
from collectionkit.core.source import SourceBinding
from collectionkit.core.specifications import (
    AsyncSpec,
    ChainSpecifications,
    ExecutorKind,
    ParallelSpec,
)

__all__ = [
    # Exceptions
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
    "wrap_error",
    # Models
    "ChainResult",
    "ExecutionStats",
    "StageStats",
    # Source
    "SourceBinding",
    # Specifications
    "ExecutorKind",
    "ParallelSpec",
    "AsyncSpec",
    "ChainSpecifications",
]
