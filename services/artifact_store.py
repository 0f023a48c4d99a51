"""
Persistence of generated artifacts and their export records.
"""
import logging
from typing import Optional

from config.settings import EXPORT_TABLE, SLIDES_BUCKET, UPLOAD_TABLE
from schemas.models import (
    ExportRecord,
    ExportUrls,
    GeneratedArtifact,
    ImageUploadRecord,
    SlideExportRequest,
    SynthesisResult,
    UploadedImage,
    UploadMetadata,
)
from services.storage_service import ObjectStore
from utils.exceptions import MetadataPersistError, ObjectStoreError, StorageError
from utils.performance import time_operation
from utils.storage_utils import build_export_basename, current_timestamp_ms


class ArtifactStore:
    """
    Writes both artifacts of an export under one basename, then appends an
    export record. The record is best-effort; the artifact writes are not.
    """

    def __init__(
        self,
        store: ObjectStore,
        bucket: str = SLIDES_BUCKET,
        export_table: str = EXPORT_TABLE,
        upload_table: str = UPLOAD_TABLE,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.bucket = bucket
        self.export_table = export_table
        self.upload_table = upload_table
        self.logger = logger or logging.getLogger(__name__)

    async def _write_artifact(self, artifact: GeneratedArtifact, basename: str) -> str:
        path = f"{basename}.{artifact.extension}"
        try:
            await self.store.upload_object(
                self.bucket,
                path,
                artifact.payload,
                content_type=artifact.content_type,
                no_overwrite=True,
            )
        except ObjectStoreError as e:
            self.logger.error(f"Error storing {artifact.kind.value} artifact {path}: {e}")
            raise StorageError(f"Could not store {artifact.kind.value}: {e}") from e
        return path

    @time_operation("persist")
    async def persist(self, artifacts: SynthesisResult, request: SlideExportRequest) -> ExportUrls:
        """
        Store both artifacts and record the export.

        Args:
            artifacts: Presentation and PDF produced by the synthesizer
            request: The request they were generated from

        Returns:
            Public URLs of both artifacts and their shared basename

        Raises:
            StorageError: If either artifact write fails
        """
        basename = build_export_basename(current_timestamp_ms())

        pptx_path = await self._write_artifact(artifacts.presentation, basename)
        pdf_path = await self._write_artifact(artifacts.pdf, basename)

        urls = ExportUrls(
            presentation_url=self.store.get_public_url(self.bucket, pptx_path),
            pdf_url=self.store.get_public_url(self.bucket, pdf_path),
            basename=basename,
        )

        record = ExportRecord(
            image_url=request.image_reference,
            extracted_text=request.extracted_text,
            pptx_url=urls.presentation_url,
            pdf_url=urls.pdf_url,
        )
        try:
            await self._append(self.export_table, record.to_row())
        except MetadataPersistError as e:
            # Both files are already stored
            self.logger.error(f"Error storing slide record: {e}")

        self.logger.info(f"Saved slides {basename} to bucket '{self.bucket}'")
        return urls

    async def record_upload(self, image: UploadedImage, metadata: UploadMetadata) -> bool:
        """
        Append an upload record for a processed image. Failures are logged.

        Returns:
            True if the record was appended
        """
        record = ImageUploadRecord(
            file_name=metadata.file_name,
            file_size=image.size_bytes,
            file_type=image.mime_type,
            storage_url=image.remote_reference or "",
            processed=True,
        )
        try:
            await self._append(self.upload_table, record.to_row())
        except MetadataPersistError as e:
            self.logger.error(f"Error storing image record: {e}")
            return False
        return True

    async def _append(self, table: str, row: dict) -> None:
        try:
            await self.store.append_record(table, row)
        except Exception as e:
            raise MetadataPersistError(f"Could not append to {table}: {e}") from e
