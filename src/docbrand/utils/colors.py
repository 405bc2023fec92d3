"""Color parsing helpers."""

import logging
import re

from docbrand.types import RGBColor

logger = logging.getLogger(__name__)

BLACK: RGBColor = (0.0, 0.0, 0.0)

_HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")


def hex_to_rgb(value: str | None, default: RGBColor = BLACK) -> RGBColor:
    """
    Parse a hex color string into RGB in 0-1 range.

    Accepts "#rrggbb", "rrggbb" and the short "#rgb" form.

    Args:
        value: Hex color string.
        default: Color returned when value is empty or malformed.

    Returns:
        RGB tuple in 0-1 range.
    """
    if not value:
        return default

    match = _HEX_PATTERN.match(value.strip())
    if not match:
        logger.warning(f"Invalid color '{value}', using default {default}")
        return default

    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)

    return (
        int(digits[0:2], 16) / 255,
        int(digits[2:4], 16) / 255,
        int(digits[4:6], 16) / 255,
    )


def opacity_to_alpha(opacity: float | None, default: float = 1.0) -> float:
    """Convert an editor opacity (0-100) to an alpha value clamped to 0-1."""
    if opacity is None:
        return default
    return max(0.0, min(1.0, opacity / 100))
