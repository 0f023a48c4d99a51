"""
Custom exception classes for the whiteboard-to-slides pipeline.
"""
from enum import Enum


class ValidationReason(str, Enum):
    """Why an image submission was rejected."""
    INVALID_TYPE = "invalid_type"
    SIZE_EXCEEDED = "size_exceeded"


class PipelineError(Exception):
    """Base class for pipeline failures."""

    pass


class ValidationError(PipelineError):
    """Raised when a submitted image fails type or size validation."""

    def __init__(self, reason: ValidationReason, message: str):
        super().__init__(message)
        self.reason = reason


class TransferError(PipelineError):
    """Raised when an upload or artifact write to the object store fails."""

    pass


class StorageError(TransferError):
    """Raised when a generated artifact cannot be written."""

    pass


class SynthesisError(PipelineError):
    """Raised when document generation fails for a reason other than the image."""

    pass


class MetadataPersistError(PipelineError):
    """Raised when an export or upload record cannot be appended."""

    pass


class PipelineBusyError(PipelineError):
    """Raised when a run is submitted while another one is still in flight."""

    pass


class InvalidStageTransition(PipelineError):
    """Raised when the stage machine is asked for a transition it does not allow."""

    pass


class CaptureError(PipelineError):
    """Raised when a camera frame cannot be captured."""

    pass


class ObjectStoreError(Exception):
    """Raised by object store backends when an operation fails."""

    pass


class ObjectExistsError(ObjectStoreError):
    """Raised when a no-overwrite write targets an existing object."""

    pass


class ImageEmbedError(PipelineError):
    """Raised when the source image cannot be fetched or decoded for embedding."""

    pass
