"""
Two-slide PowerPoint rendering with python-pptx.
"""
import logging
from io import BytesIO
from typing import Optional, Tuple

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.util import Inches, Pt

from services.synthesis.images import EmbeddableImage
from services.synthesis.layout import (
    CONTENT_IMAGE_BOX_IN,
    CONTENT_TEXT_BOX_IN,
    CONTENT_TEXT_FONT_PT,
    MUTED_COLOR,
    SLIDE_HEIGHT_IN,
    SLIDE_WIDTH_IN,
    SUBTITLE_BOX_IN,
    SUBTITLE_FONT_PT,
    TEXT_COLOR,
    TITLE_BOX_IN,
    TITLE_FONT_PT,
    fit_within,
)

# Index of the "Blank" layout in the default python-pptx template
BLANK_LAYOUT_INDEX = 6

logger = logging.getLogger(__name__)


def _add_text_box(slide, box, text: str, font_pt: int, color, bold: bool = False) -> None:
    left, top, width, height = box
    shape = slide.shapes.add_textbox(Inches(left), Inches(top), Inches(width), Inches(height))
    text_frame = shape.text_frame
    text_frame.word_wrap = True

    for index, line in enumerate(text.splitlines() or [""]):
        paragraph = text_frame.paragraphs[0] if index == 0 else text_frame.add_paragraph()
        run = paragraph.add_run()
        run.text = line
        run.font.size = Pt(font_pt)
        run.font.bold = bold
        run.font.color.rgb = RGBColor(*color)


def _add_image(slide, image: EmbeddableImage) -> None:
    box_left, box_top, box_width, box_height = CONTENT_IMAGE_BOX_IN
    x_offset, y_offset, width, height = fit_within(
        image.width, image.height, box_width, box_height
    )
    slide.shapes.add_picture(
        BytesIO(image.data),
        Inches(box_left + x_offset),
        Inches(box_top + y_offset),
        Inches(width),
        Inches(height),
    )


def build_presentation(
    title: str,
    subtitle: str,
    extracted_text: str,
    image: Optional[EmbeddableImage],
) -> Tuple[bytes, bool]:
    """
    Render the title slide and the content slide.

    The content slide carries the extracted text (when there is any) and
    the image scaled into a fixed box. A failure to place the image leaves
    the slide without it.

    Returns:
        Tuple of (pptx bytes, whether the image was embedded)
    """
    prs = Presentation()
    prs.slide_width = Inches(SLIDE_WIDTH_IN)
    prs.slide_height = Inches(SLIDE_HEIGHT_IN)
    prs.core_properties.title = title
    blank_layout = prs.slide_layouts[BLANK_LAYOUT_INDEX]

    title_slide = prs.slides.add_slide(blank_layout)
    _add_text_box(title_slide, TITLE_BOX_IN, title, TITLE_FONT_PT, TEXT_COLOR, bold=True)
    _add_text_box(title_slide, SUBTITLE_BOX_IN, subtitle, SUBTITLE_FONT_PT, MUTED_COLOR)

    content_slide = prs.slides.add_slide(blank_layout)
    if extracted_text and extracted_text.strip():
        _add_text_box(
            content_slide, CONTENT_TEXT_BOX_IN, extracted_text, CONTENT_TEXT_FONT_PT, TEXT_COLOR
        )

    embedded = False
    if image is not None:
        try:
            _add_image(content_slide, image)
            embedded = True
        except Exception as e:
            logger.warning(f"Error adding image to slide: {e}")

    buffer = BytesIO()
    prs.save(buffer)
    return buffer.getvalue(), embedded
