"""
Base class for chain stages.

A stage is one transformation step with a declared input and output element
type. Stages are immutable descriptions: they hold the caller's closure or
parameters and know how to apply themselves to a materialized collection.
Scheduling (sync, async, parallel) belongs to the executors.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from collectionkit.core.exceptions import StageClosureFailed
from collectionkit.utils.logging_utils import get_logger

if TYPE_CHECKING:
    from collectionkit.orchestration.cancellation import CancellationToken

TInput = TypeVar("TInput")
TOutput = TypeVar("TOutput")


class StageKind(str, Enum):
    """Tag identifying a stage variant."""

    MAP = "map"
    FILTER = "filter"
    TAKE = "take"
    SKIP = "skip"
    REVERSE = "reverse"
    FLAT_MAP = "flat_map"
    SORT = "sort"
    CUSTOM = "custom"


class PipelineStage(ABC, Generic[TInput, TOutput]):
    """
    Abstract base for all chain stages.

    Subclasses set ``kind`` and implement ``apply``. ``parallel_eligible``
    marks stages whose closure is applied independently per element and may
    therefore be fanned out across workers.
    """

    kind: StageKind
    parallel_eligible: bool = False
    # Whether apply() may reorder the input list in place when the executor owns it
    mutates_in_place: bool = False
    # Whether the output is a single value rather than a collection
    produces_scalar: bool = False

    def __init__(self, name: str):
        self.name = name
        self.logger = get_logger(f"{__name__}.{name}")

    @abstractmethod
    def apply(self, items: Sequence[TInput]) -> Any:
        """
        Apply the stage to a whole collection.

        Args:
            items: Current collection (must not be mutated unless
                ``mutates_in_place`` and the caller owns it)

        Returns:
            New collection, or a scalar for reduction-style stages
        """

    async def apply_async(
        self,
        items: Sequence[TInput],
        cancellation: "CancellationToken | None" = None,
    ) -> Any:
        """
        Async variant of ``apply``; stages with awaitable closures override it.

        Stages that call their closure repeatedly check ``cancellation``
        before each call.
        """
        return self.apply(items)

    def closure_failure(
        self, exc: Exception, index: int | None = None
    ) -> StageClosureFailed:
        """
        Error to raise (``from exc``) when a caller-supplied closure fails.

        Callers re-raise CollectionErrors from closures unchanged and only
        wrap foreign exceptions.
        """
        self.logger.warning(
            "stage closure failed", stage=self.name, index=index, error=str(exc)
        )
        return StageClosureFailed(self.name, index, exc)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
