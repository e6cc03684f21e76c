"""
Execution strategy interface.

An executor consumes an ordered stage list plus its source binding exactly
once and produces the final collection (or scalar). The strategies differ
only in scheduling; stage semantics live in the stages themselves.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from collectionkit.core.exceptions import TypeConversionError
from collectionkit.core.source import SourceBinding
from collectionkit.orchestration.execution_context import ExecutionContext
from collectionkit.stages.custom_stage import CustomStage, ReduceStage
from collectionkit.stages.element_stages import ElementStage
from collectionkit.stages.pipeline_stage import PipelineStage
from collectionkit.stages.structural_stages import ReverseStage
from collectionkit.utils.logging_utils import get_logger


class ExecutionStrategy(ABC):
    """Abstract base for sync, async and parallel executors."""

    def __init__(self):
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Strategy name recorded in execution stats."""

    @property
    def supports_async(self) -> bool:
        """Whether ``execute`` is a coroutine function."""
        return False

    @abstractmethod
    def execute(
        self,
        stages: Sequence[PipelineStage],
        source: SourceBinding,
        context: ExecutionContext,
    ) -> Any:
        """
        Run every stage in declared order over the source.

        Args:
            stages: Stages in evaluation order
            source: Bound source collection (read-only)
            context: Run record to fill in

        Returns:
            Final collection or scalar
        """

    @staticmethod
    def _input_size(stage: PipelineStage, current: Any) -> int:
        """Size of a stage's input; a custom stage may have produced a scalar."""
        if not isinstance(current, Sequence) or isinstance(current, (str, bytes)):
            raise TypeConversionError(type(current).__name__, f"{stage.name} input")
        return len(current)

    def _apply_sequential(
        self, stage: PipelineStage, current: Sequence, owned: bool
    ) -> tuple[Any, bool]:
        """
        Apply one stage inline on the calling thread.

        ``owned`` says whether ``current`` is a list this run created and
        may therefore reorder in place. The returned flag says the same
        about the result.
        """
        if isinstance(stage, ElementStage):
            return stage.apply(current), True
        if isinstance(stage, ReverseStage) and owned:
            return stage.apply_in_place(current), True
        if isinstance(stage, (CustomStage, ReduceStage)):
            # The function may mutate its argument; never hand it the source
            given = current if owned else list(current)
            return self._custom_result(stage.apply(given), given)
        return stage.apply(current), True

    @staticmethod
    def _custom_result(result: Any, given: list) -> tuple[Any, bool]:
        """
        Normalize what a custom or reduce function returned.

        A Collection is unwrapped into a list the run owns; anything else
        flows on unchanged and is owned only if it is the list handed in.
        """
        from collectionkit.core.collection import Collection

        if isinstance(result, Collection):
            return result.to_list(), True
        return result, result is given

    @staticmethod
    def _finalize(current: Any, source: SourceBinding) -> Any:
        """Detach the result from the source when no stage replaced it."""
        if current is source.data:
            return list(current)
        return current

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
