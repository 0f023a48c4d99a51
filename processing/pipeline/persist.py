"""
Persistence steps for the processing pipeline.

Stores both artifacts and appends the upload record.
"""
from processing.pipeline.types import PipelineState
from processing.pipeline.services import PipelineServices


async def step_persist_artifacts(
    state: PipelineState,
    services: PipelineServices,
) -> PipelineState:
    """
    Write both artifacts and the export record.

    Skipped when the services carry no artifact store.

    Note: Mutates state in place.

    Raises:
        StorageError: If either artifact write fails
    """
    artifact_store = services["artifact_store"]
    if artifact_store is None:
        services["logger"].info("No artifact store configured; keeping documents in memory only")
        return state

    state["export_urls"] = await artifact_store.persist(state["artifacts"], state["export_request"])
    return state


async def step_record_upload(
    state: PipelineState,
    services: PipelineServices,
) -> PipelineState:
    """
    Append the processed-image record. Best-effort.

    Note: Mutates state in place (though this step doesn't modify state).
    """
    artifact_store = services["artifact_store"]
    if artifact_store is None:
        return state

    await artifact_store.record_upload(state["uploaded_image"], state["metadata"])
    return state
