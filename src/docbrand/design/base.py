"""Base abstractions for element renderers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, ClassVar

from reportlab.pdfgen import canvas

from docbrand.design.template import Element, ElementKind, PlacedElement, Shadow
from docbrand.types import RGBColor
from docbrand.utils.colors import hex_to_rgb, opacity_to_alpha
from docbrand.utils.geometry import CoordinateConverter, EditorTransform

if TYPE_CHECKING:
    from docbrand.config import EngineConfig
    from docbrand.fonts.selector import FontSelector
    from docbrand.render.assets import AssetManager


@dataclass
class PageContext:
    """Context passed to element renderers for one page."""

    canvas: canvas.Canvas  # type: ignore
    width: float  # Page width in points
    height: float  # Page height in points
    converter: CoordinateConverter
    variables: dict[str, Any]  # Document variables plus page keys
    page_number: int  # 1-based
    total_pages: int
    fonts: "FontSelector"
    assets: "AssetManager"
    config: "EngineConfig"
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Paint:
    """
    How one pass of an element is painted.

    The shadow pass and the main pass share the same drawing code; only the
    paint differs.

    Attributes:
        alpha: Fill and stroke alpha, 0-1.
        color: Color override for every painted part (None keeps the element's colors).
        shadow: True for the shadow pass.
    """

    alpha: float = 1.0
    color: RGBColor | None = None
    shadow: bool = False


class ElementRenderer(ABC):
    """
    Base class for per-kind element renderers.

    Subclasses split work in two: prepare() resolves content and resources
    once, draw() paints the prepared item and may run twice (shadow, then main).
    """

    kind: ClassVar[ElementKind]

    def render(self, placed: PlacedElement, context: PageContext) -> None:
        """
        Render one element onto the page canvas.

        Args:
            placed: Element with its resolved kind.
            context: Page context with canvas, geometry and resources.
        """
        element = placed.element
        prepared = self.prepare(placed, context)
        if prepared is None:
            return

        transform = context.converter.editor_to_native(
            element.position.x, element.position.y, element.editor_rotation
        )
        c = context.canvas

        shadow = element.shadow
        if shadow is not None:
            shadow_transform = replace(
                transform, x=transform.x + shadow.offset_x, y=transform.y - shadow.offset_y
            )
            self._paint(c, prepared, shadow_transform, shadow_paint(shadow))

        self._paint(c, prepared, transform, Paint(alpha=opacity_to_alpha(element.style.opacity)))

    def _paint(self, c: canvas.Canvas, prepared: Any, transform: EditorTransform, paint: Paint) -> None:
        c.saveState()
        try:
            c.setFillAlpha(paint.alpha)
            c.setStrokeAlpha(paint.alpha)
            self.draw(c, prepared, transform, paint)
        finally:
            c.restoreState()

    @abstractmethod
    def prepare(self, placed: PlacedElement, context: PageContext) -> Any | None:
        """
        Resolve everything draw() needs.

        Returns:
            Prepared item, or None when there is nothing to draw.
        """
        pass

    @abstractmethod
    def draw(self, c: canvas.Canvas, prepared: Any, transform: EditorTransform, paint: Paint) -> None:
        """
        Paint a prepared item centered on the transform's anchor.

        Args:
            c: Canvas with alpha already applied.
            prepared: Value returned by prepare().
            transform: Anchor and counter-clockwise rotation in page space.
            paint: Pass description (shadow or main).
        """
        pass


def shadow_paint(shadow: Shadow) -> Paint:
    return Paint(
        alpha=opacity_to_alpha(shadow.opacity, default=0.5),
        color=hex_to_rgb(shadow.color),
        shadow=True,
    )


def element_color(element: Element, kind: ElementKind, name: str = "color") -> RGBColor | None:
    """Resolve a color style attribute (with kind default) to RGB."""
    value = element.style_value(kind, name)
    if value is None:
        return None
    return hex_to_rgb(value)
