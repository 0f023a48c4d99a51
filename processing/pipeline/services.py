"""
Service dependencies for the processing pipeline.

Contains the PipelineServices TypedDict that bundles the capabilities a run
needs: upload, text extraction, synthesis and (optionally) persistence.
"""
import logging
from typing import Optional, TypedDict

from services.artifact_store import ArtifactStore
from services.synthesis import DocumentSynthesizer
from services.text_service import TextExtractor
from services.upload_service import UploadCoordinator


class PipelineServices(TypedDict):
    """Bundled services required by pipeline steps.

    ``artifact_store`` may be None, in which case generated documents are
    only kept in the run result and never written to the store.
    """
    uploader: UploadCoordinator
    text_extractor: TextExtractor
    synthesizer: DocumentSynthesizer
    artifact_store: Optional[ArtifactStore]
    logger: logging.Logger


def build_pipeline_services(
    store,
    text_extractor: TextExtractor,
    persist: bool = True,
    logger: Optional[logging.Logger] = None,
) -> PipelineServices:
    """Wire the default services around one object store."""
    logger = logger or logging.getLogger("processing.pipeline.orchestrator")
    return {
        "uploader": UploadCoordinator(store, logger=logger),
        "text_extractor": text_extractor,
        "synthesizer": DocumentSynthesizer(logger=logger),
        "artifact_store": ArtifactStore(store, logger=logger) if persist else None,
        "logger": logger,
    }
