"""
Data models shared by the upload, synthesis and persistence stages.

Records that get written to the metadata log are pydantic models; runtime
objects passed between stages are dataclasses.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

PPTX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
PDF_CONTENT_TYPE = "application/pdf"


class UploadMetadata(BaseModel):
    """Caller-declared facts about a submitted image."""

    mime_type: str = Field(..., description="Declared MIME type, e.g. image/jpeg")
    size_bytes: int = Field(..., ge=0, description="Declared byte length")
    file_name: Optional[str] = Field(None, description="Original file name, if known")


class UploadedImage:
    """A source image with its local preview handle and remote reference.

    The remote reference can be assigned exactly once.
    """

    def __init__(
        self,
        local_handle: Optional[str],
        size_bytes: int,
        mime_type: str,
        remote_reference: Optional[str] = None,
    ):
        self.local_handle = local_handle
        self.size_bytes = size_bytes
        self.mime_type = mime_type
        self._remote_reference = remote_reference

    @property
    def remote_reference(self) -> Optional[str]:
        return self._remote_reference

    def assign_remote_reference(self, reference: str) -> None:
        if self._remote_reference is not None:
            raise ValueError("remote_reference has already been assigned")
        if not reference:
            raise ValueError("remote_reference must be a non-empty string")
        self._remote_reference = reference

    def __repr__(self) -> str:
        return (
            f"UploadedImage(local_handle={self.local_handle!r}, "
            f"remote_reference={self._remote_reference!r}, "
            f"size_bytes={self.size_bytes}, mime_type={self.mime_type!r})"
        )


@dataclass(frozen=True)
class SlideExportRequest:
    """Everything the synthesizer needs to render both documents."""

    image_reference: str
    extracted_text: str = ""
    title: Optional[str] = None

    @classmethod
    def from_uploaded_image(
        cls,
        image: UploadedImage,
        extracted_text: Optional[str],
        title: Optional[str] = None,
    ) -> "SlideExportRequest":
        if not image.remote_reference:
            raise ValueError("Cannot build an export request before the image is uploaded")
        return cls(
            image_reference=image.remote_reference,
            extracted_text=extracted_text or "",
            title=title,
        )


class ArtifactKind(str, Enum):
    PRESENTATION = "presentation"
    PDF = "pdf"


class EmbeddedImage(str, Enum):
    PRESENT = "present"
    DEGRADED = "degraded"


_ARTIFACT_FORMATS = {
    ArtifactKind.PRESENTATION: ("pptx", PPTX_CONTENT_TYPE),
    ArtifactKind.PDF: ("pdf", PDF_CONTENT_TYPE),
}


@dataclass
class GeneratedArtifact:
    kind: ArtifactKind
    payload: bytes
    embedded_image: EmbeddedImage

    @property
    def extension(self) -> str:
        return _ARTIFACT_FORMATS[self.kind][0]

    @property
    def content_type(self) -> str:
        return _ARTIFACT_FORMATS[self.kind][1]


@dataclass
class SynthesisResult:
    presentation: GeneratedArtifact
    pdf: GeneratedArtifact

    @property
    def degraded(self) -> bool:
        return EmbeddedImage.DEGRADED in (
            self.presentation.embedded_image,
            self.pdf.embedded_image,
        )


@dataclass(frozen=True)
class ExportUrls:
    presentation_url: str
    pdf_url: str
    basename: str


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ExportRecord(BaseModel):
    """Row appended to the export log once both artifacts are stored."""

    image_url: str
    extracted_text: str = ""
    pptx_url: str
    pdf_url: str
    created_at: str = Field(default_factory=_utc_now_iso, description="ISO-8601 timestamp")

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump()


class ImageUploadRecord(BaseModel):
    """Row appended to the upload log after a source image is processed."""

    file_name: Optional[str] = None
    file_size: int
    file_type: str
    storage_url: str
    processed: bool = True

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump()
