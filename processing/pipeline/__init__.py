"""
Pipeline package for converting whiteboard images into slides.

The orchestrator sequences the steps; each step lives in its own module.
"""

from processing.pipeline.orchestrator import PipelineOrchestrator
from processing.pipeline.stage_machine import StageMachine
from processing.pipeline.services import PipelineServices, build_pipeline_services
from processing.pipeline.status import describe_stage, failure_summary
from processing.pipeline.types import FailureKind, PipelineResult, PipelineState, Stage, StageInfo

__all__ = [
    "PipelineOrchestrator",
    "StageMachine",
    "PipelineServices",
    "build_pipeline_services",
    "describe_stage",
    "failure_summary",
    "FailureKind",
    "PipelineResult",
    "PipelineState",
    "Stage",
    "StageInfo",
]
