"""
Font and Color Resolution
Maps designer font families to PDF fonts and hex colors to RGB fills
"""

import logging
from typing import NamedTuple, Tuple

from certissuer.config import settings

logger = logging.getLogger(__name__)


class FontVariants(NamedTuple):
    regular: str
    bold: str


# Standard PDF fonts, always available to reportlab without embedding files.
# Italic is accepted on fields but has no entry here.
FONT_VARIANTS = {
    "Helvetica": FontVariants("Helvetica", "Helvetica-Bold"),
    "Times-Roman": FontVariants("Times-Roman", "Times-Bold"),
    "TimesRoman": FontVariants("Times-Roman", "Times-Bold"),
    "Courier": FontVariants("Courier", "Courier-Bold"),
}

FALLBACK_FONT_FAMILY = "Helvetica"


def resolve_font(font_family: str, is_bold: bool = False) -> str:
    """Return the PDF font name for a family/weight

    Unknown families use DEFAULT_FONT_FAMILY, or Helvetica when that setting
    is itself not a known family.
    """
    variants = FONT_VARIANTS.get(font_family)
    if variants is None:
        default_family = settings.DEFAULT_FONT_FAMILY
        if default_family not in FONT_VARIANTS:
            default_family = FALLBACK_FONT_FAMILY
        logger.debug("[PDF] font family %r not available, using %s", font_family, default_family)
        variants = FONT_VARIANTS[default_family]
    return variants.bold if is_bold else variants.regular


def hex_to_rgb(hex_color: str) -> Tuple[float, float, float]:
    """Convert `#RRGGBB` to an (r, g, b) triple in [0, 1]; black when malformed"""
    if not hex_color:
        return (0.0, 0.0, 0.0)
    color = hex_color.strip().lstrip("#")
    if len(color) != 6:
        return (0.0, 0.0, 0.0)
    try:
        return tuple(int(color[i:i + 2], 16) / 255 for i in (0, 2, 4))
    except ValueError:
        return (0.0, 0.0, 0.0)
