"""Box, circle and line element rendering."""

from dataclasses import dataclass

from reportlab.pdfgen import canvas

from docbrand.design.base import ElementRenderer, PageContext, Paint, element_color
from docbrand.design.template import ElementKind, PlacedElement
from docbrand.types import RGBColor
from docbrand.utils.colors import BLACK
from docbrand.utils.geometry import EditorTransform, line_endpoints

DOTTED_DASH = (3, 3)


@dataclass(frozen=True)
class PreparedShape:
    """Resolved shape geometry and colors in points."""

    width: float
    height: float
    stroke: RGBColor
    stroke_width: float
    fill: RGBColor | None = None
    dashed: bool = False


def _stroke_and_fill(c: canvas.Canvas, shape: PreparedShape, paint: Paint) -> tuple[int, int]:
    """Set colors for a pass and return (stroke, fill) flags for the primitive."""
    stroke = paint.color or shape.stroke
    c.setStrokeColorRGB(*stroke)
    c.setLineWidth(shape.stroke_width)

    if shape.fill is None:
        return 1, 0
    c.setFillColorRGB(*(paint.color or shape.fill))
    return 1, 1


class BoxRenderer(ElementRenderer):
    """Rectangle centered on the anchor, rotated in a local coordinate frame."""

    kind = ElementKind.BOX

    def prepare(self, placed: PlacedElement, context: PageContext) -> PreparedShape:
        element = placed.element
        return PreparedShape(
            width=float(element.style_value(self.kind, "width")),
            height=float(element.style_value(self.kind, "height")),
            stroke=element_color(element, self.kind) or BLACK,
            stroke_width=float(element.style_value(self.kind, "border_width")),
            fill=element_color(element, self.kind, "fill_color"),
        )

    def draw(self, c: canvas.Canvas, prepared: PreparedShape, transform: EditorTransform, paint: Paint) -> None:
        stroke, fill = _stroke_and_fill(c, prepared, paint)
        if transform.rotated:
            c.translate(transform.x, transform.y)
            c.rotate(transform.rotation)
            x, y = -prepared.width / 2, -prepared.height / 2
        else:
            x = transform.x - prepared.width / 2
            y = transform.y - prepared.height / 2
        c.rect(x, y, prepared.width, prepared.height, stroke=stroke, fill=fill)


class CircleRenderer(ElementRenderer):
    """
    Circle centered on the anchor.

    style.size is the diameter; style.radius is read the same way, matching
    how the editor sizes circles. Rotation has no visible effect.
    """

    kind = ElementKind.CIRCLE

    def prepare(self, placed: PlacedElement, context: PageContext) -> PreparedShape:
        element = placed.element
        style = element.style
        diameter = float(style.size or style.radius or element.style_value(self.kind, "size"))
        return PreparedShape(
            width=diameter,
            height=diameter,
            stroke=element_color(element, self.kind) or BLACK,
            stroke_width=float(element.style_value(self.kind, "border_width")),
            fill=element_color(element, self.kind, "fill_color"),
        )

    def draw(self, c: canvas.Canvas, prepared: PreparedShape, transform: EditorTransform, paint: Paint) -> None:
        stroke, fill = _stroke_and_fill(c, prepared, paint)
        c.circle(transform.x, transform.y, prepared.width / 2, stroke=stroke, fill=fill)


class LineRenderer(ElementRenderer):
    """Straight line centered on the anchor; dashed for dotted lines."""

    kind = ElementKind.LINE

    def prepare(self, placed: PlacedElement, context: PageContext) -> PreparedShape:
        element = placed.element
        kind = placed.kind
        return PreparedShape(
            width=float(element.style_value(kind, "length")),
            height=0.0,
            stroke=element_color(element, kind) or BLACK,
            stroke_width=float(element.style_value(kind, "thickness")),
            dashed=kind is ElementKind.DOTTED_LINE or element.style.dotted,
        )

    def draw(self, c: canvas.Canvas, prepared: PreparedShape, transform: EditorTransform, paint: Paint) -> None:
        c.setStrokeColorRGB(*(paint.color or prepared.stroke))
        c.setLineWidth(prepared.stroke_width)
        if prepared.dashed:
            c.setDash(*DOTTED_DASH)
        (x1, y1), (x2, y2) = line_endpoints(transform.anchor, prepared.width, transform.rotation)
        c.line(x1, y1, x2, y2)


class DottedLineRenderer(LineRenderer):
    kind = ElementKind.DOTTED_LINE
