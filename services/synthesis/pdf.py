"""
Single-page landscape PDF rendering with PyMuPDF.
"""
import logging
from typing import List, Optional, Tuple

import pymupdf as fitz

from services.synthesis.images import EmbeddableImage
from services.synthesis.layout import (
    MUTED_COLOR,
    PDF_BODY_FONT_PT,
    PDF_BODY_WIDTH_MM,
    PDF_BODY_Y_MM,
    PDF_IMAGE_WIDTH_MM,
    PDF_IMAGE_Y_MM,
    PDF_MARGIN_X_MM,
    PDF_PAGE_HEIGHT_MM,
    PDF_PAGE_WIDTH_MM,
    PDF_SUBTITLE_FONT_PT,
    PDF_SUBTITLE_Y_MM,
    PDF_TITLE_FONT_PT,
    PDF_TITLE_Y_MM,
    TEXT_COLOR,
    mm_to_pt,
    pdf_image_height_mm,
)

FONT_NAME = "helv"
# PyMuPDF's bundled Droid Sans Fallback, embedded for text outside Latin-1
UNICODE_FONT_NAME = "cjk"
UNICODE_FONT_ALIAS = "wbuni"

logger = logging.getLogger(__name__)


def _pdf_color(rgb) -> Tuple[float, float, float]:
    return tuple(channel / 255.0 for channel in rgb)


def needs_unicode_font(*texts: str) -> bool:
    """True if any character falls outside what the Base-14 Helvetica can encode."""
    return any(ord(ch) > 0xFF for text in texts if text for ch in text)


def wrap_text(text: str, max_width: float, fontsize: float, font: Optional[fitz.Font] = None) -> List[str]:
    """
    Greedy word wrap measured with the PDF font metrics.

    Explicit newlines start a new line; a single word wider than the
    column is broken by characters.
    """
    font = font or fitz.Font(FONT_NAME)

    def width_of(value: str) -> float:
        return font.text_length(value, fontsize=fontsize)

    lines: List[str] = []
    for paragraph in text.splitlines():
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if width_of(candidate) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            current = ""
            while width_of(word) > max_width:
                cut = len(word)
                while cut > 1 and width_of(word[:cut]) > max_width:
                    cut -= 1
                lines.append(word[:cut])
                word = word[cut:]
            current = word
        lines.append(current)
    return lines


def build_pdf(
    title: str,
    subtitle: str,
    extracted_text: str,
    image: Optional[EmbeddableImage],
) -> Tuple[bytes, bool]:
    """
    Render header, word-wrapped body and image on one A4 landscape page.

    Returns:
        Tuple of (pdf bytes, whether the image was embedded)
    """
    doc = fitz.open()
    try:
        page = doc.new_page(width=mm_to_pt(PDF_PAGE_WIDTH_MM), height=mm_to_pt(PDF_PAGE_HEIGHT_MM))
        left = mm_to_pt(PDF_MARGIN_X_MM)

        fontname = FONT_NAME
        font = fitz.Font(FONT_NAME)
        if needs_unicode_font(title, subtitle, extracted_text):
            font = fitz.Font(UNICODE_FONT_NAME)
            page.insert_font(fontname=UNICODE_FONT_ALIAS, fontbuffer=font.buffer)
            fontname = UNICODE_FONT_ALIAS

        page.insert_text(
            fitz.Point(left, mm_to_pt(PDF_TITLE_Y_MM)),
            title,
            fontname=fontname,
            fontsize=PDF_TITLE_FONT_PT,
            color=_pdf_color(TEXT_COLOR),
        )
        page.insert_text(
            fitz.Point(left, mm_to_pt(PDF_SUBTITLE_Y_MM)),
            subtitle,
            fontname=fontname,
            fontsize=PDF_SUBTITLE_FONT_PT,
            color=_pdf_color(MUTED_COLOR),
        )

        if extracted_text and extracted_text.strip():
            lines = wrap_text(extracted_text, mm_to_pt(PDF_BODY_WIDTH_MM), PDF_BODY_FONT_PT, font)
            page.insert_text(
                fitz.Point(left, mm_to_pt(PDF_BODY_Y_MM)),
                "\n".join(lines),
                fontname=fontname,
                fontsize=PDF_BODY_FONT_PT,
                color=_pdf_color(TEXT_COLOR),
            )

        embedded = False
        if image is not None:
            height_mm = pdf_image_height_mm(image.width, image.height)
            top = mm_to_pt(PDF_IMAGE_Y_MM)
            rect = fitz.Rect(left, top, left + mm_to_pt(PDF_IMAGE_WIDTH_MM), top + mm_to_pt(height_mm))
            try:
                page.insert_image(rect, stream=image.data)
                embedded = True
            except Exception as e:
                logger.warning(f"Error adding image to PDF: {e}")

        return doc.tobytes(garbage=3, deflate=True), embedded
    finally:
        doc.close()
