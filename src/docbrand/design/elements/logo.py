"""Logo element rendering."""

import math
from dataclasses import dataclass

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from docbrand.design.base import ElementRenderer, PageContext, Paint
from docbrand.design.template import ElementKind, PlacedElement
from docbrand.render.assets import LogoAsset
from docbrand.render.image import bytes_to_image_reader
from docbrand.utils.colors import BLACK
from docbrand.utils.geometry import EditorTransform, centered_origin
from docbrand.utils.text import string_width

FALLBACK_FONT = "Helvetica"


def raster_size(size: float, density: int) -> int:
    """Pixel box for a vector logo drawn size points wide at density DPI."""
    return max(1, math.ceil(size * density / 72))


@dataclass(frozen=True)
class PreparedLogo:
    """Logo image (or fallback label) with its drawn size in points."""

    asset: LogoAsset
    width: float
    height: float
    image: ImageReader | None = None
    label_size: float = 0.0


class LogoRenderer(ElementRenderer):
    """
    Draws the logo scaled to style.size points wide, centered on the anchor.

    When the asset is a fallback, its label is drawn instead at a quarter of
    the logo size in the fallback color.
    """

    kind = ElementKind.LOGO

    def prepare(self, placed: PlacedElement, context: PageContext) -> PreparedLogo:
        element = placed.element
        size = float(element.style.size or context.config.logo_size)
        asset = context.assets.load_logo(
            element.source or "file", element.locator, size_hint=raster_size(size, context.config.svg_density)
        )

        if asset.fallback:
            label_size = size / 4
            label = asset.text or context.config.logo_fallback_text
            return PreparedLogo(
                asset=asset,
                width=string_width(label, FALLBACK_FONT, label_size),
                height=label_size,
                label_size=label_size,
            )

        return PreparedLogo(
            asset=asset,
            width=size,
            height=size * asset.aspect_ratio,
            image=bytes_to_image_reader(asset.data),
        )

    def draw(self, c: canvas.Canvas, prepared: PreparedLogo, transform: EditorTransform, paint: Paint) -> None:
        if transform.rotated:
            origin = centered_origin(transform.anchor, prepared.width, prepared.height, transform.rotation)
            c.translate(*origin)
            c.rotate(transform.rotation)
            x, y = 0.0, 0.0
        else:
            x = transform.x - prepared.width / 2
            y = transform.y - prepared.height / 2

        if prepared.image is not None:
            c.drawImage(
                prepared.image, x, y,
                width=prepared.width, height=prepared.height,
                mask="auto",
            )
            return

        asset = prepared.asset
        c.setFont(FALLBACK_FONT, prepared.label_size)
        c.setFillColorRGB(*(paint.color or asset.color or BLACK))
        c.drawString(x, y, asset.text or "")
