"""
Tests for presentation and PDF generation.
"""
from io import BytesIO
from unittest.mock import MagicMock

import pymupdf as fitz
import pytest
import requests
from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE_TYPE
from pptx.util import Inches

from conftest import make_image_bytes
from config.settings import DEFAULT_TITLE
from schemas.models import EmbeddedImage, SlideExportRequest
from services.synthesis import DocumentSynthesizer, ImageFetcher, decode_image
from services.synthesis.layout import (
    CONTENT_IMAGE_BOX_IN,
    PDF_IMAGE_WIDTH_MM,
    fit_within,
    mm_to_pt,
    pdf_image_height_mm,
)
from services.synthesis.pdf import build_pdf, needs_unicode_font, wrap_text
from services.synthesis.presentation import build_presentation
from utils.exceptions import ImageEmbedError


def _write_image(tmp_path, data: bytes, name: str = "board.png") -> str:
    path = tmp_path / name
    path.write_bytes(data)
    return path.as_uri()


def _pdf_page(payload: bytes):
    doc = fitz.open(stream=payload, filetype="pdf")
    return doc, doc[0]


@pytest.mark.asyncio
async def test_synthesize_embeds_image_in_both_documents(tmp_path):
    reference = _write_image(tmp_path, make_image_bytes(200, 100, "PNG"))
    synthesizer = DocumentSynthesizer()

    result = await synthesizer.synthesize(
        SlideExportRequest(image_reference=reference, extracted_text="Q1 Roadmap", title="Planning")
    )

    assert not result.degraded
    assert result.presentation.embedded_image is EmbeddedImage.PRESENT
    assert result.pdf.embedded_image is EmbeddedImage.PRESENT

    prs = Presentation(BytesIO(result.presentation.payload))
    slides = list(prs.slides)
    assert len(slides) == 2
    title_text = " ".join(s.text_frame.text for s in slides[0].shapes if s.has_text_frame)
    assert "Planning" in title_text
    content_text = " ".join(s.text_frame.text for s in slides[1].shapes if s.has_text_frame)
    assert "Q1 Roadmap" in content_text
    pictures = [s for s in slides[1].shapes if s.shape_type == MSO_SHAPE_TYPE.PICTURE]
    assert len(pictures) == 1

    doc, page = _pdf_page(result.pdf.payload)
    try:
        assert doc.page_count == 1
        assert page.rect.width > page.rect.height
        text = page.get_text()
        assert "Planning" in text
        assert "Q1 Roadmap" in text
        assert len(page.get_images()) == 1
    finally:
        doc.close()


@pytest.mark.asyncio
async def test_unreachable_image_degrades_both_documents(tmp_path):
    synthesizer = DocumentSynthesizer()
    missing = (tmp_path / "gone.png").as_uri()

    result = await synthesizer.synthesize(
        SlideExportRequest(image_reference=missing, extracted_text="Notes")
    )

    assert result.degraded
    assert result.presentation.embedded_image is EmbeddedImage.DEGRADED
    assert result.pdf.embedded_image is EmbeddedImage.DEGRADED

    doc, page = _pdf_page(result.pdf.payload)
    try:
        assert page.get_images() == []
        assert DEFAULT_TITLE in page.get_text()
        assert "Notes" in page.get_text()
    finally:
        doc.close()


@pytest.mark.asyncio
async def test_empty_text_still_produces_two_slides(tmp_path):
    reference = _write_image(tmp_path, make_image_bytes(50, 50, "JPEG"), "board.jpg")
    result = await DocumentSynthesizer().synthesize(SlideExportRequest(image_reference=reference))

    prs = Presentation(BytesIO(result.presentation.payload))
    assert len(list(prs.slides)) == 2
    assert not result.degraded


@pytest.mark.asyncio
async def test_webp_images_are_converted_before_embedding(tmp_path):
    reference = _write_image(tmp_path, make_image_bytes(40, 20, "WEBP"), "board.webp")
    result = await DocumentSynthesizer().synthesize(SlideExportRequest(image_reference=reference))

    assert not result.degraded


@pytest.mark.asyncio
async def test_fetcher_failure_is_contained(tmp_path):
    fetcher = MagicMock()
    fetcher.fetch.side_effect = ImageEmbedError("timed out")
    synthesizer = DocumentSynthesizer(fetcher=fetcher)

    result = await synthesizer.synthesize(SlideExportRequest(image_reference="https://example.com/x.png"))

    assert result.degraded
    fetcher.fetch.assert_called_once_with("https://example.com/x.png")


def test_pdf_image_keeps_aspect_ratio_at_fixed_width():
    image = decode_image(make_image_bytes(400, 100, "PNG"))

    payload, embedded = build_pdf("Title", "Subtitle", "", image)
    doc, page = _pdf_page(payload)
    try:
        rect = page.get_image_rects(page.get_images()[0][0])[0]
        assert embedded
        assert rect.width == pytest.approx(mm_to_pt(PDF_IMAGE_WIDTH_MM), abs=0.5)
        assert rect.height == pytest.approx(mm_to_pt(pdf_image_height_mm(400, 100)), abs=0.5)
    finally:
        doc.close()


def test_presentation_image_fits_inside_box():
    image = decode_image(make_image_bytes(300, 300, "PNG"))
    payload, embedded = build_presentation("Title", "Subtitle", "text", image)

    picture = [s for s in Presentation(BytesIO(payload)).slides[1].shapes if s.shape_type == MSO_SHAPE_TYPE.PICTURE][0]
    left, top, width, height = CONTENT_IMAGE_BOX_IN
    assert embedded
    assert picture.left >= Inches(left) - 1
    assert picture.top >= Inches(top) - 1
    assert picture.left + picture.width <= Inches(left + width) + 1
    assert picture.top + picture.height <= Inches(top + height) + 1


def test_fit_within_preserves_aspect_and_centres():
    assert fit_within(200, 100, 8, 4) == pytest.approx((0, 0, 8, 4))
    assert fit_within(100, 100, 8, 4) == pytest.approx((2, 0, 4, 4))


def test_wrap_text_respects_width_and_newlines():
    lines = wrap_text("alpha beta gamma\nsecond", max_width=60, fontsize=12)

    assert lines[-1] == "second"
    assert all(fitz.Font("helv").text_length(line, fontsize=12) <= 60 for line in lines)
    assert " ".join(lines[:-1]).split() == ["alpha", "beta", "gamma"]


def test_decode_image_rejects_garbage():
    with pytest.raises(ImageEmbedError):
        decode_image(b"not an image")


def test_fetcher_rejects_unknown_scheme():
    with pytest.raises(ImageEmbedError):
        ImageFetcher().fetch("ftp://example.com/board.png")


def _http_fetcher(response=None, error=None):
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = response
    return ImageFetcher(timeout=7, session=session), session


def _response(status_code: int, content: bytes = b""):
    response = MagicMock()
    response.content = content
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Client Error")
    return response


@pytest.mark.asyncio
async def test_http_image_is_downloaded_and_embedded():
    fetcher, session = _http_fetcher(_response(200, make_image_bytes(60, 40, "PNG")))
    url = "https://acct.blob.core.windows.net/whiteboard-images/board.png"

    result = await DocumentSynthesizer(fetcher=fetcher).synthesize(SlideExportRequest(image_reference=url))

    assert not result.degraded
    assert result.pdf.embedded_image is EmbeddedImage.PRESENT
    session.get.assert_called_once_with(url, timeout=7)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "fetcher_args",
    [
        {"response": _response(404)},
        {"error": requests.Timeout("read timed out")},
    ],
)
async def test_http_fetch_failures_degrade_documents(fetcher_args):
    fetcher, session = _http_fetcher(**fetcher_args)

    result = await DocumentSynthesizer(fetcher=fetcher).synthesize(
        SlideExportRequest(image_reference="https://example.com/board.png", extracted_text="Notes")
    )

    assert result.presentation.embedded_image is EmbeddedImage.DEGRADED
    assert result.pdf.embedded_image is EmbeddedImage.DEGRADED
    assert session.get.call_args.kwargs["timeout"] == 7


def test_pdf_keeps_text_outside_latin1():
    text = "Q1 Roadmap 日本語"
    payload, _ = build_pdf("Planning", "Subtitle", text, None)

    doc, page = _pdf_page(payload)
    try:
        assert "日本語" in page.get_text()
    finally:
        doc.close()


def test_latin1_text_keeps_base_font():
    assert not needs_unicode_font("Café Q1 Roadmap", "Subtitle")
    assert needs_unicode_font("Q1 → Roadmap")
