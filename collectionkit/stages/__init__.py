"""Chain stages: one transformation step each."""

from collectionkit.stages.custom_stage import MISSING, CustomStage, ReduceStage
from collectionkit.stages.element_stages import (
    ElementStage,
    FilterStage,
    FlatMapStage,
    MapStage,
)
from collectionkit.stages.pipeline_stage import PipelineStage, StageKind
from collectionkit.stages.structural_stages import (
    ReverseStage,
    SkipStage,
    SortStage,
    TakeStage,
)

__all__ = [
    "PipelineStage",
    "StageKind",
    "ElementStage",
    "MapStage",
    "FilterStage",
    "FlatMapStage",
    "TakeStage",
    "SkipStage",
    "ReverseStage",
    "SortStage",
    "CustomStage",
    "ReduceStage",
    "MISSING",
]
