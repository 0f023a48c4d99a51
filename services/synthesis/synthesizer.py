"""
DocumentSynthesizer: renders the presentation and the PDF for one export.
"""
import asyncio
import logging
from typing import Optional

from config.settings import DEFAULT_TITLE, SLIDE_SUBTITLE
from schemas.models import (
    ArtifactKind,
    EmbeddedImage,
    GeneratedArtifact,
    SlideExportRequest,
    SynthesisResult,
)
from services.synthesis.images import EmbeddableImage, ImageFetcher, decode_image
from services.synthesis.pdf import build_pdf
from services.synthesis.presentation import build_presentation
from utils.exceptions import ImageEmbedError, SynthesisError
from utils.performance import time_operation


class DocumentSynthesizer:
    """
    Produces both document formats from the same request.

    The image behind ``request.image_reference`` is fetched and decoded once
    and shared by both renderers. If that fails, both documents are still
    produced without it and flagged as degraded.
    """

    def __init__(
        self,
        fetcher: Optional[ImageFetcher] = None,
        default_title: str = DEFAULT_TITLE,
        subtitle: str = SLIDE_SUBTITLE,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.fetcher = fetcher or ImageFetcher(logger=self.logger)
        self.default_title = default_title
        self.subtitle = subtitle

    @time_operation("synthesis")
    async def synthesize(self, request: SlideExportRequest) -> SynthesisResult:
        """
        Render the presentation and PDF artifacts.

        Rendering is CPU-bound and runs in the default executor.

        Raises:
            SynthesisError: If rendering fails for a reason unrelated to the image
        """
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self._synthesize_sync, request)

    def _load_image(self, reference: str) -> Optional[EmbeddableImage]:
        try:
            return decode_image(self.fetcher.fetch(reference))
        except ImageEmbedError as e:
            self.logger.warning(f"Continuing without embedded image: {e}")
            return None

    def _synthesize_sync(self, request: SlideExportRequest) -> SynthesisResult:
        image = self._load_image(request.image_reference)
        title = (request.title or "").strip() or self.default_title
        text = request.extracted_text or ""

        try:
            pptx_bytes, pptx_embedded = build_presentation(title, self.subtitle, text, image)
            pdf_bytes, pdf_embedded = build_pdf(title, self.subtitle, text, image)
        except Exception as e:
            self.logger.error(f"Error generating documents: {str(e)}", exc_info=True)
            raise SynthesisError(f"Could not generate documents: {e}") from e

        result = SynthesisResult(
            presentation=GeneratedArtifact(
                kind=ArtifactKind.PRESENTATION,
                payload=pptx_bytes,
                embedded_image=EmbeddedImage.PRESENT if pptx_embedded else EmbeddedImage.DEGRADED,
            ),
            pdf=GeneratedArtifact(
                kind=ArtifactKind.PDF,
                payload=pdf_bytes,
                embedded_image=EmbeddedImage.PRESENT if pdf_embedded else EmbeddedImage.DEGRADED,
            ),
        )
        self.logger.info(
            f"Generated presentation ({len(pptx_bytes)} bytes) and PDF ({len(pdf_bytes)} bytes)"
            f"{' without image' if result.degraded else ''}"
        )
        return result
