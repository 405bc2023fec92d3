"""PDF composition: template overlays merged onto source pages."""

import logging
from collections.abc import Callable, Mapping
from io import BytesIO
from pathlib import Path
from typing import Any, BinaryIO

from pypdf import PageObject, PdfReader, PdfWriter
from pypdf.errors import PdfReadError
from reportlab.pdfgen import canvas

from docbrand.config import EngineConfig
from docbrand.design.base import PageContext
from docbrand.design.elements import get_renderer
from docbrand.design.template import Template
from docbrand.errors import CompositionCancelled, SourceDocumentError
from docbrand.fonts.selector import FontSelector
from docbrand.types import PageState
from docbrand.render.assets import AssetManager
from docbrand.utils.geometry import CoordinateConverter
from docbrand.utils.variables import build_variables, page_variables

logger = logging.getLogger(__name__)

PdfSource = bytes | str | Path | BinaryIO

# Called with the 1-based number of the next page; False stops the run
ContinueCheck = Callable[[int], bool]

ERROR_MESSAGE = "This page could not be rendered"


def read_pdf(source: PdfSource) -> PdfReader:
    """
    Open a source PDF.

    Args:
        source: PDF bytes, a file path, or a binary file object.

    Returns:
        PdfReader over the document.

    Raises:
        SourceDocumentError: If the document cannot be read or is encrypted.
    """
    try:
        if isinstance(source, bytes):
            reader = PdfReader(BytesIO(source))
        elif isinstance(source, (str, Path)):
            reader = PdfReader(str(source))
        else:
            reader = PdfReader(source)
    except FileNotFoundError as e:
        raise SourceDocumentError(f"Source PDF not found: {source}") from e
    except (PdfReadError, ValueError, KeyError, OSError) as e:
        raise SourceDocumentError(f"Cannot read source PDF: {e}") from e

    if reader.is_encrypted:
        try:
            reader.decrypt("")
            _ = len(reader.pages)
        except Exception as e:
            raise SourceDocumentError(f"Source PDF is encrypted: {e}") from e

    return reader


def page_size(page: PageObject) -> tuple[float, float]:
    """Width and height of a page's media box in points."""
    return float(page.mediabox.width), float(page.mediabox.height)


def write_pdf(writer: PdfWriter) -> bytes:
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def check_continue(should_continue: ContinueCheck | None, page_number: int) -> None:
    if should_continue is not None and not should_continue(page_number):
        raise CompositionCancelled(f"Composition cancelled before page {page_number}")


def single_page(width: float, height: float, draw: Callable[[canvas.Canvas], None]) -> PageObject:
    """Draw one page of the given size with ReportLab and return it as a pypdf page."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=(width, height))
    draw(c)
    c.showPage()
    c.save()
    return PdfReader(BytesIO(buffer.getvalue())).pages[0]


def error_page(width: float, height: float, page_number: int) -> PageObject:
    """Blank page of the given size stating that the page failed to render."""

    def draw(c: canvas.Canvas) -> None:
        c.setFillColorRGB(0.4, 0.4, 0.4)
        c.setFont("Helvetica-Bold", 14)
        c.drawCentredString(width / 2, height / 2, ERROR_MESSAGE)
        c.setFont("Helvetica", 10)
        c.drawCentredString(width / 2, height / 2 - 20, f"Page {page_number}")

    return single_page(width, height, draw)


class DocumentComposer:
    """Applies a template to every page of a PDF."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        assets: AssetManager | None = None,
        fonts: FontSelector | None = None,
    ) -> None:
        """
        Initialize composer.

        Args:
            config: Engine configuration.
            assets: Asset manager (and with it the asset cache) to use.
            fonts: Font selector. Built from the configured fonts on first use when None.
        """
        self.config = config or EngineConfig()
        self.assets = assets or AssetManager(self.config)
        self._fonts = fonts

    @property
    def fonts(self) -> FontSelector:
        if self._fonts is None:
            self._fonts = FontSelector(self.assets.load_fonts())
        return self._fonts

    def document_variables(self, variables: Mapping[str, Any] | None = None) -> dict[str, Any]:
        return build_variables(self.config.site_url, variables)

    def compose(
        self,
        source: PdfSource,
        template: Template | Mapping[str, Any],
        variables: Mapping[str, Any] | None = None,
        should_continue: ContinueCheck | None = None,
    ) -> bytes:
        """
        Render a template onto every page of a PDF.

        The template is validated before any page is read, so a structural
        error never produces partial output.

        Args:
            source: Source PDF.
            template: Template payload or model.
            variables: Caller variables (user, filename, custom keys).
            should_continue: Checked before each page; returning False cancels.

        Returns:
            Composed PDF bytes with the same page count as the source.

        Raises:
            TemplateStructureError: If the template is malformed.
            SourceDocumentError: If the source cannot be read.
            CompositionCancelled: If should_continue returned False.
        """
        template = Template.from_payload(template)
        reader = read_pdf(source)
        document_variables = self.document_variables(variables)

        writer = PdfWriter()
        total_pages = len(reader.pages)
        logger.info(f"Composing template onto {total_pages} page(s)")

        for index, page in enumerate(reader.pages):
            page_number = index + 1
            check_continue(should_continue, page_number)
            self.add_composed_page(writer, page, page_number, total_pages, template, document_variables)

        return write_pdf(writer)

    def add_composed_page(
        self,
        writer: PdfWriter,
        page: PageObject,
        page_number: int,
        total_pages: int,
        template: Template,
        variables: Mapping[str, Any],
    ) -> PageState:
        """
        Apply the template to a page and append it to writer.

        A page that fails to compose is replaced by an error page of the same
        size, so the output keeps the source's page count.

        Returns:
            "accessible" when the page was composed, "error" otherwise.
        """
        try:
            self.apply_to_page(page, page_number, total_pages, template, variables)
            writer.add_page(page)
            return "accessible"
        except Exception as e:
            logger.error(f"Failed to compose page {page_number}, inserting error page: {e}")
            width, height = page_size(page)
            writer.add_page(error_page(width, height, page_number))
            return "error"

    def apply_to_page(
        self,
        page: PageObject,
        page_number: int,
        total_pages: int,
        template: Template,
        variables: Mapping[str, Any],
    ) -> list[str]:
        """
        Merge the template overlay onto one page in place.

        Args:
            page: Page to draw on.
            page_number: 1-based page number.
            total_pages: Document page count.
            template: Validated template.
            variables: Document variables (page keys are added here).

        Returns:
            Non-fatal warnings raised while rendering.
        """
        if not template.visible_elements():
            return []

        width, height = page_size(page)
        overlay_data, warnings = self.render_overlay(width, height, page_number, total_pages, template, variables)
        overlay = PdfReader(BytesIO(overlay_data)).pages[0]

        left = float(page.mediabox.left)
        bottom = float(page.mediabox.bottom)
        if left or bottom:
            page.merge_translated_page(overlay, left, bottom)
        else:
            page.merge_page(overlay)
        return warnings

    def render_overlay(
        self,
        width: float,
        height: float,
        page_number: int,
        total_pages: int,
        template: Template,
        variables: Mapping[str, Any],
    ) -> tuple[bytes, list[str]]:
        """
        Draw every visible template element onto a transparent page.

        A failing element is logged and skipped; the rest still render.

        Returns:
            (overlay PDF bytes, warnings).
        """
        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=(width, height))
        context = PageContext(
            canvas=c,
            width=width,
            height=height,
            converter=CoordinateConverter(width, height),
            variables=page_variables(variables, page_number, total_pages),
            page_number=page_number,
            total_pages=total_pages,
            fonts=self.fonts,
            assets=self.assets,
            config=self.config,
        )
        self.render_elements(template, context)
        c.showPage()
        c.save()
        return buffer.getvalue(), context.warnings

    def render_elements(self, template: Template, context: PageContext) -> None:
        """Render each visible element in template order, isolating failures."""
        for placed in template.visible_elements():
            try:
                get_renderer(placed.kind).render(placed, context)
            except Exception as e:
                logger.warning(
                    f"Element {placed.element.label()} ({placed.variant}) failed on page "
                    f"{context.page_number}: {e}",
                    extra={"element_id": placed.element.label(), "page": context.page_number},
                )
