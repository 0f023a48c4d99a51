"""
Validation and transfer of source images into the object store.
"""
import logging
from typing import Optional

from config.settings import IMAGE_BUCKET, MAX_UPLOAD_BYTES
from schemas.models import UploadMetadata
from services.storage_service import ObjectStore
from utils.exceptions import (
    ObjectStoreError,
    TransferError,
    ValidationError,
    ValidationReason,
)
from utils.performance import time_operation
from utils.storage_utils import build_upload_path

ACCEPTED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp")


class UploadCoordinator:
    """
    Validates submitted images and writes them to the images bucket.

    Validation never touches the store; a write only happens for payloads
    that pass both the type and the size check.
    """

    def __init__(
        self,
        store: ObjectStore,
        bucket: str = IMAGE_BUCKET,
        max_bytes: int = MAX_UPLOAD_BYTES,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.bucket = bucket
        self.max_bytes = max_bytes
        self.logger = logger or logging.getLogger(__name__)

    def validate(self, data: bytes, metadata: UploadMetadata) -> None:
        """
        Check MIME type and size.

        Raises:
            ValidationError: INVALID_TYPE for non-image types, SIZE_EXCEEDED
                for payloads over the limit
        """
        mime_type = (metadata.mime_type or "").strip().lower()
        if not mime_type.startswith("image/"):
            raise ValidationError(
                ValidationReason.INVALID_TYPE,
                f"Please upload an image file (got '{metadata.mime_type}')",
            )
        if mime_type.split(";")[0] not in ACCEPTED_IMAGE_TYPES:
            self.logger.warning(f"Accepting uncommon image type {mime_type}")

        size = max(len(data), metadata.size_bytes or 0)
        if size > self.max_bytes:
            limit_mb = self.max_bytes // (1024 * 1024)
            raise ValidationError(
                ValidationReason.SIZE_EXCEEDED,
                f"File size exceeds {limit_mb}MB limit ({size} bytes)",
            )

    @time_operation("upload")
    async def upload(self, data: bytes, metadata: UploadMetadata) -> str:
        """
        Validate and store an image under a freshly generated path.

        Args:
            data: Raw image bytes
            metadata: Declared MIME type, size and file name

        Returns:
            Public URL of the stored image

        Raises:
            ValidationError: Before any store call, for bad type or size
            TransferError: If the write fails or the generated path is taken
        """
        self.validate(data, metadata)

        path = build_upload_path(metadata.mime_type)
        try:
            await self.store.upload_object(
                self.bucket,
                path,
                data,
                content_type=metadata.mime_type,
                no_overwrite=True,
            )
        except ObjectStoreError as e:
            self.logger.error(f"Error uploading image to {self.bucket}/{path}: {e}")
            raise TransferError(f"Could not upload image: {e}") from e

        url = self.store.get_public_url(self.bucket, path)
        self.logger.info(f"Uploaded {metadata.file_name or 'image'} to {url}")
        return url
