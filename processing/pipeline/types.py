"""
Type definitions for the processing pipeline.

Contains enums, TypedDicts and result containers used throughout the pipeline.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TypedDict

from schemas.models import (
    ExportUrls,
    SlideExportRequest,
    SynthesisResult,
    UploadedImage,
    UploadMetadata,
)
from services.preview_service import LocalPreview


class Stage(str, Enum):
    """Observable progress of the active conversion."""
    IDLE = "idle"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETE = "complete"
    ERROR = "error"


class FailureKind(str, Enum):
    """Which part of the run failed, for user-facing messages."""
    UPLOAD = "upload"
    GENERATE = "generate"
    SAVE = "save"


@dataclass(frozen=True)
class StageInfo:
    title: str
    description: str
    progress: int


class PipelineState(TypedDict):
    """Typed dictionary for tracking one run.

    Note: This dictionary is mutated in place by pipeline steps.
    """
    pipeline_id: str
    metadata: UploadMetadata
    title: Optional[str]
    preview: Optional[LocalPreview]
    uploaded_image: Optional[UploadedImage]
    extracted_text: str
    export_request: Optional[SlideExportRequest]
    artifacts: Optional[SynthesisResult]
    export_urls: Optional[ExportUrls]


@dataclass
class PipelineResult:
    """Outcome of the most recent run, filled in when it finishes."""

    stage: Stage
    pipeline_id: str
    image_url: Optional[str] = None
    presentation_url: Optional[str] = None
    pdf_url: Optional[str] = None
    basename: Optional[str] = None
    degraded: bool = False
    artifacts: Optional[SynthesisResult] = None
    failure: Optional[FailureKind] = None
    error: Optional[str] = None
    detail: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.stage is Stage.COMPLETE
