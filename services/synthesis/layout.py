"""
Fixed layout for both generated documents.

Presentation positions are in inches on a 10 x 7.5 in slide. PDF positions
are in millimetres on an A4 landscape page and converted to points when drawn.
"""

# Presentation (inches)
SLIDE_WIDTH_IN = 10.0
SLIDE_HEIGHT_IN = 7.5

TITLE_BOX_IN = (1.0, 1.0, 8.0, 1.0)
TITLE_FONT_PT = 24
SUBTITLE_BOX_IN = (1.0, 2.0, 8.0, 0.5)
SUBTITLE_FONT_PT = 14

CONTENT_TEXT_BOX_IN = (0.5, 0.5, 9.0, 2.0)
CONTENT_TEXT_FONT_PT = 14
CONTENT_IMAGE_BOX_IN = (1.0, 2.5, 8.0, 4.0)

# Shared colours (RGB 0-255)
TEXT_COLOR = (0x36, 0x36, 0x36)
MUTED_COLOR = (0x66, 0x66, 0x66)

# PDF (millimetres)
PDF_PAGE_WIDTH_MM = 297.0
PDF_PAGE_HEIGHT_MM = 210.0
PDF_MARGIN_X_MM = 20.0
PDF_TITLE_Y_MM = 20.0
PDF_TITLE_FONT_PT = 24
PDF_SUBTITLE_Y_MM = 30.0
PDF_SUBTITLE_FONT_PT = 12
PDF_BODY_Y_MM = 45.0
PDF_BODY_FONT_PT = 12
PDF_BODY_WIDTH_MM = 250.0
PDF_IMAGE_Y_MM = 70.0
PDF_IMAGE_WIDTH_MM = 180.0

POINTS_PER_MM = 72.0 / 25.4


def mm_to_pt(value_mm: float) -> float:
    return value_mm * POINTS_PER_MM


def pdf_image_height_mm(original_width: int, original_height: int) -> float:
    """Height that keeps the original aspect ratio at the fixed PDF image width."""
    return original_height * PDF_IMAGE_WIDTH_MM / original_width


def fit_within(width: float, height: float, box_width: float, box_height: float):
    """
    Scale (width, height) to fit inside a box, preserving aspect ratio.

    Returns:
        Tuple of (x_offset, y_offset, scaled_width, scaled_height) relative to
        the box's top-left corner, centred within the box
    """
    scale = min(box_width / width, box_height / height)
    scaled_width = width * scale
    scaled_height = height * scale
    return (
        (box_width - scaled_width) / 2,
        (box_height - scaled_height) / 2,
        scaled_width,
        scaled_height,
    )
