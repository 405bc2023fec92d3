"""Text and url element rendering."""

import logging
from dataclasses import dataclass

from reportlab.pdfgen import canvas

from docbrand.design.base import ElementRenderer, PageContext, Paint, element_color
from docbrand.design.template import ElementKind, PlacedElement
from docbrand.fonts.selector import FontSelection
from docbrand.types import RGBColor
from docbrand.utils.colors import BLACK
from docbrand.utils.geometry import EditorTransform, rotate_offset
from docbrand.utils.text import (
    TextBlock,
    layout_text_block,
    needs_wrapping,
    reverse_emails_for_rtl,
    string_width,
)
from docbrand.utils.variables import substitute_variables

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedText:
    """Text laid out and ready to draw."""

    block: TextBlock
    color: RGBColor
    selection: FontSelection
    link: str | None = None


class TextRenderer(ElementRenderer):
    """
    Renders text content centered on the element anchor.

    Short text is a single line; text longer than the wrap threshold or with
    explicit line breaks becomes a word-wrapped block whose lines are each
    centered, with the block vertically centered on the anchor.
    """

    kind = ElementKind.TEXT

    def content_for(self, placed: PlacedElement, context: PageContext) -> str:
        element = placed.element
        content = element.content or ""
        if not content and placed.variant == "user-info":
            content = context.config.user_info_template
        return content

    def prepare(self, placed: PlacedElement, context: PageContext) -> PreparedText | None:
        element = placed.element
        kind = placed.kind

        text = substitute_variables(
            self.content_for(placed, context), context.variables, context.config.default_user_label
        )
        if not text.strip():
            return None

        font_size = float(element.style_value(kind, "font_size"))
        selection = context.fonts.select_font(text, bold=element.style.bold, italic=element.style.italic)
        if selection.warning:
            logger.warning(
                f"Font downgrade for element {element.label()}: {selection.warning}",
                extra={"element_id": element.label(), "warning": selection.warning},
            )
            context.warnings.append(selection.warning)

        if selection.is_hebrew:
            text = reverse_emails_for_rtl(text)

        if needs_wrapping(text, context.config.wrap_threshold):
            width = element.style.width or context.config.default_text_width
            block = layout_text_block(text, width, selection.font, font_size, context.config.line_height)
        else:
            block = TextBlock(
                lines=(text,),
                font_name=selection.font,
                font_size=font_size,
                line_height=font_size * context.config.line_height,
                width=string_width(text, selection.font, font_size),
            )

        return PreparedText(
            block=block,
            color=element_color(element, kind) or BLACK,
            selection=selection,
            link=self.link_for(text),
        )

    def link_for(self, text: str) -> str | None:
        return None

    def draw(self, c: canvas.Canvas, prepared: PreparedText, transform: EditorTransform, paint: Paint) -> None:
        block = prepared.block
        c.setFont(block.font_name, block.font_size)
        c.setFillColorRGB(*(paint.color or prepared.color))

        for dx, dy, line in self.line_offsets(block):
            if transform.rotated:
                ox, oy = rotate_offset(dx, dy, transform.rotation)
                c.saveState()
                c.translate(transform.x + ox, transform.y + oy)
                c.rotate(transform.rotation)
                c.drawString(0, 0, line)
                c.restoreState()
            else:
                c.drawString(transform.x + dx, transform.y + dy, line)

        if prepared.link and not paint.shadow:
            c.linkURL(prepared.link, self.link_rect(block, transform), relative=0)

    @staticmethod
    def line_offsets(block: TextBlock) -> list[tuple[float, float, str]]:
        """
        Offsets of each line's drawing origin from the anchor, before rotation.

        Line i is centered horizontally; the block is centered vertically with
        the baseline sitting half a font size below each line's center.
        """
        first_center = block.height / 2 - block.line_height / 2
        offsets = []
        for index, line in enumerate(block.lines):
            line_width = string_width(line, block.font_name, block.font_size)
            center_y = first_center - index * block.line_height
            offsets.append((-line_width / 2, center_y - block.font_size / 2, line))
        return offsets

    @staticmethod
    def link_rect(block: TextBlock, transform: EditorTransform) -> tuple[float, float, float, float]:
        """Axis-aligned page rectangle covering the (possibly rotated) block."""
        half_w = block.width / 2
        half_h = block.height / 2
        corners = [
            rotate_offset(sx * half_w, sy * half_h, transform.rotation)
            for sx in (-1, 1)
            for sy in (-1, 1)
        ]
        xs = [transform.x + dx for dx, _ in corners]
        ys = [transform.y + dy for _, dy in corners]
        return min(xs), min(ys), max(xs), max(ys)


class UrlRenderer(TextRenderer):
    """Renders link text; falls back to href, then to the site URL."""

    kind = ElementKind.URL

    def content_for(self, placed: PlacedElement, context: PageContext) -> str:
        element = placed.element
        return element.content or element.href or context.config.site_url

    def link_for(self, text: str) -> str | None:
        candidate = text.strip()
        if candidate.startswith(("http://", "https://")) and " " not in candidate:
            return candidate
        return None
