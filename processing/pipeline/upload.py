"""
Upload step for the processing pipeline.

Keeps a local preview of the submitted image and transfers it to the store.
"""
from schemas.models import UploadedImage
from processing.pipeline.types import PipelineState
from processing.pipeline.services import PipelineServices
from services.preview_service import LocalPreview


async def step_create_preview(
    state: PipelineState,
    services: PipelineServices,
    image_bytes: bytes,
) -> PipelineState:
    """
    Write the local preview copy of the image.

    Note: Mutates state in place.
    """
    metadata = state["metadata"]
    preview = await LocalPreview.create(image_bytes, metadata.mime_type, logger=services["logger"])
    state["preview"] = preview
    state["uploaded_image"] = UploadedImage(
        local_handle=preview.path,
        size_bytes=len(image_bytes),
        mime_type=metadata.mime_type,
    )
    return state


async def step_upload_image(
    state: PipelineState,
    services: PipelineServices,
    image_bytes: bytes,
) -> PipelineState:
    """
    Transfer the image to the store and record its remote reference.

    Note: Mutates state in place.

    Raises:
        TransferError: If the upload fails
    """
    reference = await services["uploader"].upload(image_bytes, state["metadata"])
    state["uploaded_image"].assign_remote_reference(reference)
    services["logger"].info(
        f"Uploaded image for pipeline_id={state['pipeline_id']} to {reference}"
    )
    return state
