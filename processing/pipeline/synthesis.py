"""
Text and document generation steps for the processing pipeline.
"""
from schemas.models import SlideExportRequest
from processing.pipeline.types import PipelineState
from processing.pipeline.services import PipelineServices
from utils.performance import time_operation_context


async def step_extract_text(
    state: PipelineState,
    services: PipelineServices,
) -> PipelineState:
    """
    Ask the text-extraction collaborator for the whiteboard text.

    Missing text is not an error: None, empty results and collaborator
    failures all continue with an empty string.

    Note: Mutates state in place.
    """
    logger = services["logger"]
    try:
        with time_operation_context("text_extraction", pipeline_id=state["pipeline_id"]):
            text = await services["text_extractor"].extract(state["uploaded_image"])
    except Exception as e:
        logger.warning(f"Text extraction failed, continuing without text: {e}", exc_info=True)
        text = None

    state["extracted_text"] = text or ""
    if not state["extracted_text"].strip():
        logger.info(f"No extracted text for pipeline_id={state['pipeline_id']}")
    return state


async def step_synthesize_documents(
    state: PipelineState,
    services: PipelineServices,
) -> PipelineState:
    """
    Build the export request and render both documents.

    Note: Mutates state in place.

    Raises:
        SynthesisError: If rendering fails
    """
    request = SlideExportRequest.from_uploaded_image(
        state["uploaded_image"],
        state["extracted_text"],
        state["title"],
    )
    state["export_request"] = request
    state["artifacts"] = await services["synthesizer"].synthesize(request)
    return state
