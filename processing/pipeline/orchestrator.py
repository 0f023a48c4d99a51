"""
Pipeline orchestrator that wires together all processing steps.

This module sequences upload, text extraction, document synthesis and
persistence for one session, drives the stage machine and publishes the
outcome of each run.
"""
import uuid
from typing import Callable, Optional

from schemas.models import UploadMetadata
from services.capture_service import CameraCapture, MediaDevice
from utils.exceptions import PipelineBusyError
from utils.performance import time_operation
from processing.pipeline.stage_machine import StageMachine
from processing.pipeline.types import (
    FailureKind,
    PipelineResult,
    PipelineState,
    Stage,
)
from processing.pipeline.services import PipelineServices
from processing.pipeline.status import failure_summary
from processing.pipeline.upload import step_create_preview, step_upload_image
from processing.pipeline.synthesis import step_extract_text, step_synthesize_documents
from processing.pipeline.persist import step_persist_artifacts, step_record_upload

CompletionCallback = Callable[[PipelineResult], None]


class PipelineOrchestrator:
    """
    The single entry point for converting a whiteboard image.

    One orchestrator serves one session. Progress is observable through
    ``stages``; the outcome of the latest run lands in ``result`` and is
    passed to ``on_complete``.
    """

    def __init__(
        self,
        services: PipelineServices,
        stage_machine: Optional[StageMachine] = None,
        on_complete: Optional[CompletionCallback] = None,
    ):
        self.services = services
        self.logger = services["logger"]
        self.stages = stage_machine or StageMachine(self.logger)
        self.on_complete = on_complete
        self.result: Optional[PipelineResult] = None
        self._active_capture: Optional[CameraCapture] = None

    @property
    def stage(self) -> Stage:
        return self.stages.stage

    def reset(self) -> None:
        """
        Return to idle. In-flight runs keep going but their outcome is
        discarded; held previews and any open camera are released.
        """
        self.cancel_capture()
        self.stages.reset()
        self.result = None
        self.logger.info("Pipeline reset")

    def cancel_capture(self) -> None:
        capture, self._active_capture = self._active_capture, None
        if capture is not None:
            capture.cancel()

    def _is_stale(self, generation: int) -> bool:
        return generation != self.stages.generation

    def _check_accepting(self) -> None:
        if not self.stages.accepts_submission:
            raise PipelineBusyError(
                f"A conversion is already in progress (stage: {self.stages.stage.value})"
            )

    def _publish(self, result: PipelineResult) -> None:
        self.result = result
        if self.on_complete is not None:
            try:
                self.on_complete(result)
            except Exception as e:
                self.logger.warning(f"Completion callback failed: {e}")

    def _fail(
        self,
        generation: int,
        state: PipelineState,
        kind: FailureKind,
        error: Exception,
    ) -> None:
        if self._is_stale(generation):
            self.logger.info(
                f"Discarding failure of stale pipeline_id={state['pipeline_id']}: {error}"
            )
            return
        self.logger.error(f"Pipeline {kind.value} step failed: {error}", exc_info=error)
        self.stages.transition(Stage.ERROR)
        image = state["uploaded_image"]
        self._publish(
            PipelineResult(
                stage=Stage.ERROR,
                pipeline_id=state["pipeline_id"],
                image_url=image.remote_reference if image else None,
                failure=kind,
                error=failure_summary(kind),
                detail=str(error),
            )
        )

    @time_operation("total_processing")
    async def run(
        self,
        image_bytes: bytes,
        metadata: UploadMetadata,
        title: Optional[str] = None,
    ) -> None:
        """
        Convert one image into a presentation and a PDF.

        Sequence: uploading -> upload -> processing -> extract text ->
        synthesize -> persist -> complete. Any failure stops the run in the
        error stage with a summary in ``result``.

        Raises:
            PipelineBusyError: If a previous run has not reached idle or error
            ValidationError: If the image has the wrong type or is too large;
                the stage is left unchanged and nothing is written
        """
        self._check_accepting()
        self.services["uploader"].validate(image_bytes, metadata)

        if self.stages.stage is Stage.ERROR:
            self.stages.reset()

        generation = self.stages.generation
        state: PipelineState = {
            "pipeline_id": str(uuid.uuid4()),
            "metadata": metadata,
            "title": title,
            "preview": None,
            "uploaded_image": None,
            "extracted_text": "",
            "export_request": None,
            "artifacts": None,
            "export_urls": None,
        }
        self.result = None
        pipeline_id = state["pipeline_id"]
        self.logger.info(
            f"PIPELINE_START file={metadata.file_name or 'image'} pipeline_id={pipeline_id}"
        )
        try:
            await self._run_steps(generation, state, image_bytes)
        finally:
            self.logger.info(f"PIPELINE_END pipeline_id={pipeline_id} stage={self.stage.value}")

    async def _run_steps(self, generation: int, state: PipelineState, image_bytes: bytes) -> None:
        self.stages.transition(Stage.UPLOADING)

        # Step 1: Upload
        try:
            await step_create_preview(state, self.services, image_bytes)
            if self._is_stale(generation):
                state["preview"].release()
                return
            self.stages.hold(state["preview"].release)
            await step_upload_image(state, self.services, image_bytes)
        except Exception as e:
            self._fail(generation, state, FailureKind.UPLOAD, e)
            return
        if self._is_stale(generation):
            return
        self.stages.transition(Stage.PROCESSING)

        # Step 2: Extracted text and document synthesis
        try:
            await step_extract_text(state, self.services)
            if self._is_stale(generation):
                return
            await step_synthesize_documents(state, self.services)
        except Exception as e:
            self._fail(generation, state, FailureKind.GENERATE, e)
            return
        if self._is_stale(generation):
            return

        # Step 3: Persist artifacts and export record
        try:
            await step_persist_artifacts(state, self.services)
        except Exception as e:
            self._fail(generation, state, FailureKind.SAVE, e)
            return
        if self._is_stale(generation):
            return

        await step_record_upload(state, self.services)
        if self._is_stale(generation):
            self.logger.info(f"Discarding result of stale pipeline_id={state['pipeline_id']}")
            return

        self.stages.transition(Stage.COMPLETE)
        artifacts = state["artifacts"]
        urls = state["export_urls"]
        self._publish(
            PipelineResult(
                stage=Stage.COMPLETE,
                pipeline_id=state["pipeline_id"],
                image_url=state["uploaded_image"].remote_reference,
                presentation_url=urls.presentation_url if urls else None,
                pdf_url=urls.pdf_url if urls else None,
                basename=urls.basename if urls else None,
                degraded=artifacts.degraded,
                artifacts=artifacts,
            )
        )
        self.logger.info(f"✅ Slides ready for pipeline_id={state['pipeline_id']}")

    async def capture_and_run(self, device: MediaDevice, title: Optional[str] = None) -> None:
        """
        Take a photo with a camera and convert it.

        The camera is released once the frame is taken, on cancel and on
        error. A reset during capture abandons the run.

        Raises:
            PipelineBusyError: If a previous run has not reached idle or error
            CaptureError: If the camera cannot be opened or read
        """
        self._check_accepting()
        generation = self.stages.generation
        capture = CameraCapture(device, logger=self.logger)
        self._active_capture = capture
        try:
            async with capture:
                image_bytes, metadata = await capture.capture()
        finally:
            if self._active_capture is capture:
                self._active_capture = None

        if self._is_stale(generation):
            self.logger.info("Camera capture finished after reset; discarding image")
            return
        await self.run(image_bytes, metadata, title)
