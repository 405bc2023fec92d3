"""Coordinate conversion between editor space and PDF page space.

The template editor positions elements in percent of the page with the origin
at the top-left corner and rotation measured clockwise. PDF pages use points
with the origin at the bottom-left corner and counter-clockwise rotation.
Everything that crosses between the two goes through this module.
"""

import math
from dataclasses import dataclass

from docbrand.types import NativePoint, PercentPoint

# Editor angles below this magnitude are treated as no rotation at all
ROTATION_EPSILON = 0.01


@dataclass(frozen=True)
class PageFormat:
    """Named page geometry in points."""

    width: float
    height: float
    label: str


# Registry of the page formats used by templates and placeholders
PAGE_FORMATS = {
    "portrait": PageFormat(595, 842, "A4 portrait (595×842)"),
    "landscape": PageFormat(842, 595, "A4 landscape (842×595)"),
    "slide": PageFormat(800, 600, "Slide 4:3 (800×600)"),
}


def percentage_to_native(
    x_percent: float, y_percent: float, page_width: float, page_height: float
) -> NativePoint:
    """
    Convert an editor position to PDF points.

    Values outside 0-100 are allowed and project off-page.

    Args:
        x_percent: Horizontal position, percent of page width from the left edge.
        y_percent: Vertical position, percent of page height from the top edge.
        page_width: Page width in points.
        page_height: Page height in points.

    Returns:
        (x, y) in points with the origin at the bottom-left corner.
    """
    x = page_width * x_percent / 100
    y = page_height - page_height * y_percent / 100
    return x, y


def native_to_percentage(
    x: float, y: float, page_width: float, page_height: float
) -> PercentPoint:
    """
    Convert PDF points back to an editor position.

    Args:
        x: Horizontal position in points from the left edge.
        y: Vertical position in points from the bottom edge.
        page_width: Page width in points.
        page_height: Page height in points.

    Returns:
        (x%, y%) with the origin at the top-left corner.
    """
    x_percent = x / page_width * 100
    y_percent = (page_height - y) / page_height * 100
    return x_percent, y_percent


def normalize_rotation(degrees: float | None) -> float:
    """
    Convert a clockwise editor angle to the counter-clockwise PDF angle.

    Args:
        degrees: Editor rotation in degrees (None means no rotation).

    Returns:
        Negated angle, or exactly 0.0 when the magnitude is below 0.01.
    """
    if degrees is None or abs(degrees) < ROTATION_EPSILON:
        return 0.0
    return -float(degrees)


def rotate_offset(dx: float, dy: float, native_degrees: float) -> tuple[float, float]:
    """Rotate a vector counter-clockwise by the given angle."""
    if native_degrees == 0:
        return dx, dy
    theta = math.radians(native_degrees)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    return dx * cos_t - dy * sin_t, dx * sin_t + dy * cos_t


def centered_origin(
    anchor: NativePoint, width: float, height: float, native_degrees: float
) -> NativePoint:
    """
    Find where to put the drawing origin so a rotated box is centered on anchor.

    PDF rotation pivots around the current origin, which is the box's
    bottom-left corner. Rotating the corner offset with the same matrix puts
    the visual center of the rotated box back on the anchor.

    Args:
        anchor: Desired visual center in points.
        width: Box width in points.
        height: Box height in points.
        native_degrees: Counter-clockwise rotation applied after translation.

    Returns:
        Origin (x, y) to translate to before rotating.
    """
    dx, dy = rotate_offset(-width / 2, -height / 2, native_degrees)
    return anchor[0] + dx, anchor[1] + dy


def line_endpoints(
    anchor: NativePoint, length: float, native_degrees: float
) -> tuple[NativePoint, NativePoint]:
    """
    Compute the endpoints of a line of the given length centered on anchor.

    Args:
        anchor: Line midpoint in points.
        length: Line length in points.
        native_degrees: Counter-clockwise rotation from horizontal.

    Returns:
        ((x1, y1), (x2, y2)) start and end points.
    """
    dx, dy = rotate_offset(length / 2, 0, native_degrees)
    start = (anchor[0] - dx, anchor[1] - dy)
    end = (anchor[0] + dx, anchor[1] + dy)
    return start, end


@dataclass(frozen=True)
class EditorTransform:
    """Element placement resolved into page space."""

    x: float
    y: float
    rotation: float  # counter-clockwise degrees, 0.0 when snapped

    @property
    def anchor(self) -> NativePoint:
        return self.x, self.y

    @property
    def rotated(self) -> bool:
        return self.rotation != 0.0


class CoordinateConverter:
    """Converts between editor percentages and points for one page size."""

    def __init__(self, page_width: float, page_height: float) -> None:
        if page_width <= 0 or page_height <= 0:
            raise ValueError(f"Page dimensions must be positive, got {page_width}x{page_height}")
        self.page_width = page_width
        self.page_height = page_height

    def to_native(self, x_percent: float, y_percent: float) -> NativePoint:
        return percentage_to_native(x_percent, y_percent, self.page_width, self.page_height)

    def to_percentage(self, x: float, y: float) -> PercentPoint:
        return native_to_percentage(x, y, self.page_width, self.page_height)

    def with_dimensions(self, page_width: float, page_height: float) -> "CoordinateConverter":
        """Return a converter for another page size."""
        return CoordinateConverter(page_width, page_height)

    def editor_to_native(
        self, x_percent: float, y_percent: float, rotation: float | None = None
    ) -> EditorTransform:
        """
        Resolve an editor position and clockwise rotation into page space.

        This is the single transform used by every element renderer, so
        position and rotation conventions cannot drift between kinds.
        """
        x, y = self.to_native(x_percent, y_percent)
        return EditorTransform(x=x, y=y, rotation=normalize_rotation(rotation))

    def __repr__(self) -> str:
        return f"CoordinateConverter({self.page_width}x{self.page_height})"


def create_converter(format_name: str) -> CoordinateConverter:
    """
    Create a converter for a named page format.

    Args:
        format_name: Key in PAGE_FORMATS ("portrait", "landscape", "slide").

    Returns:
        CoordinateConverter for that format.

    Raises:
        ValueError: If the format name is unknown.
    """
    page_format = PAGE_FORMATS.get(format_name.lower())
    if page_format is None:
        raise ValueError(
            f"Unknown page format '{format_name}'. Expected one of: {', '.join(PAGE_FORMATS)}"
        )
    return CoordinateConverter(page_format.width, page_format.height)
