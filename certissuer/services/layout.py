"""
Field Layout
Maps field positions from design canvas space onto the native-resolution page

Design canvas: origin top-left, Y grows downward, sized to the image as the
browser displayed it. PDF page: origin bottom-left, Y grows upward, sized to
the image's native pixels.
"""

import logging
import math
from typing import NamedTuple, Optional

from certissuer.config import settings

logger = logging.getLogger(__name__)


class ScaleFactors(NamedTuple):
    scale_x: float
    scale_y: float
    canvas_width: float
    canvas_height: float
    canvas_fallback: bool


class FieldPlacement(NamedTuple):
    x: float
    y: float
    font_size: int


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_scale(
    native_width: float,
    native_height: float,
    canvas_width: Optional[float] = None,
    canvas_height: Optional[float] = None,
) -> ScaleFactors:
    """Scale factors from design canvas to native pixels

    A missing or non-positive canvas dimension means the layout was never
    saved from the designer; that axis then uses the native size (scale 1).
    """
    fallback = False
    if not canvas_width or canvas_width <= 0:
        canvas_width = native_width
        fallback = True
    if not canvas_height or canvas_height <= 0:
        canvas_height = native_height
        fallback = True
    if fallback:
        logger.info(
            "[PDF] canvas size unset, positions treated as native pixels (%sx%s)",
            native_width,
            native_height,
        )
    return ScaleFactors(
        scale_x=native_width / canvas_width,
        scale_y=native_height / canvas_height,
        canvas_width=canvas_width,
        canvas_height=canvas_height,
        canvas_fallback=fallback,
    )


def place_field(
    position_x: float,
    position_y: float,
    font_size: float,
    scale: ScaleFactors,
    page_height: float,
) -> FieldPlacement:
    """Scale a field and flip its Y onto the page

    Font size follows the horizontal factor only. The flip subtracts the
    scaled size so the text sits where its top edge was placed.
    """
    scaled_font_size = round_half_up(font_size * scale.scale_x)
    pdf_x = position_x * scale.scale_x
    pdf_y = page_height - position_y * scale.scale_y - scaled_font_size
    return FieldPlacement(x=pdf_x, y=pdf_y, font_size=scaled_font_size)


def is_on_page(placement: FieldPlacement, page_width: float, page_height: float, tolerance: float = None) -> bool:
    """X must lie on the page; Y may overshoot either edge by `tolerance`"""
    if tolerance is None:
        tolerance = settings.OFF_PAGE_TOLERANCE
    if placement.x < 0 or placement.x > page_width:
        return False
    if placement.y < -tolerance or placement.y > page_height + tolerance:
        return False
    return True
