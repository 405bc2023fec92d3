"""Selective page access: accessible pages are composed, the rest replaced.

The output always has the source's page count. Each output page is either the
source page with the template applied, a copy of the placeholder document
for the source's format, or a labeled error page when composing failed.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pypdf import PageObject, PdfReader, PdfWriter
from reportlab.pdfgen import canvas

from docbrand.config import EngineConfig
from docbrand.design.template import Template
from docbrand.render.pdf import (
    ContinueCheck,
    DocumentComposer,
    PdfSource,
    check_continue,
    page_size,
    read_pdf,
    single_page,
    write_pdf,
)
from docbrand.render.placeholders import DocumentFormat, PlaceholderLibrary, detect_format
from docbrand.types import PageState

logger = logging.getLogger(__name__)

LABEL_COLOR = (0.68, 0.71, 0.74)
LABEL_SIZE = 10


@dataclass(frozen=True)
class PageOutcome:
    """
    What was written for one output page.

    Attributes:
        number: 1-based page number.
        state: "accessible", "placeholder" or "error".
        origin: "source", or the placeholder file name, or "error".
    """

    number: int
    state: PageState
    origin: str


@dataclass
class RedactionResult:
    """Output document plus a per-page record of how it was built."""

    data: bytes
    pages: list[PageOutcome] = field(default_factory=list)
    document_format: DocumentFormat | None = None

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def pages_in_state(self, state: PageState) -> list[int]:
        return [outcome.number for outcome in self.pages if outcome.state == state]


def validate_accessible_pages(accessible_pages: Iterable[Any], total_pages: int) -> list[int]:
    """
    Keep the valid 1-based page numbers, sorted and de-duplicated.

    Entries that are not integers (booleans included), below 1, or past the
    last page are dropped and logged.

    Args:
        accessible_pages: Caller-supplied page numbers.
        total_pages: Source page count.

    Returns:
        Sorted list of valid page numbers.
    """
    valid = set()
    for page in accessible_pages:
        if isinstance(page, bool) or not isinstance(page, int) or not 1 <= page <= total_pages:
            logger.warning(f"Dropping invalid accessible page {page!r} (document has {total_pages} pages)")
            continue
        valid.add(page)
    return sorted(valid)


def page_label_overlay(width: float, height: float, page_number: int, total_pages: int, filename: str | None) -> PageObject:
    """Overlay with "Page N of M" bottom right and the filename bottom left."""

    def draw(c: canvas.Canvas) -> None:
        c.setFont("Helvetica", LABEL_SIZE)
        c.setFillColorRGB(*LABEL_COLOR)
        c.drawString(width - 100, 30, f"Page {page_number} of {total_pages}")
        if filename:
            c.drawString(50, 30, str(filename))

    return single_page(width, height, draw)


class RedactionEngine:
    """Builds access-restricted copies of documents."""

    def __init__(self, composer: DocumentComposer | None = None, placeholders: PlaceholderLibrary | None = None) -> None:
        """
        Initialize engine.

        Args:
            composer: Composer used for accessible pages and render-only mode.
            placeholders: Placeholder documents. Defaults to the composer's
                configured placeholder directory.
        """
        self.composer = composer or DocumentComposer()
        self.placeholders = placeholders or PlaceholderLibrary.from_config(self.composer.config)

    @property
    def config(self) -> EngineConfig:
        return self.composer.config

    def process(
        self,
        source: PdfSource,
        accessible_pages: Iterable[Any] | None,
        template: Template | Mapping[str, Any] | None = None,
        variables: Mapping[str, Any] | None = None,
        format_hint: DocumentFormat | str | None = None,
        should_continue: ContinueCheck | None = None,
    ) -> RedactionResult:
        """
        Produce the restricted document.

        Args:
            source: Source PDF.
            accessible_pages: 1-based page numbers the reader may see. None
                means every page is accessible (render-only mode); an empty
                list means none is.
            template: Template applied to accessible pages (optional).
            variables: Caller variables for the template.
            format_hint: Placeholder format to use instead of detecting it.
            should_continue: Checked before each page; returning False cancels.

        Returns:
            RedactionResult with the PDF bytes and one outcome per page.

        Raises:
            TemplateStructureError: If the template is malformed.
            SourceDocumentError: If the source cannot be read.
            PlaceholderMissingError: If the placeholder for the format is unusable.
            CompositionCancelled: If should_continue returned False.
        """
        template = Template.from_payload(template) if template is not None else Template()
        reader = read_pdf(source)
        total_pages = len(reader.pages)
        document_variables = self.composer.document_variables(variables)

        document_format = None
        if accessible_pages is None:
            accessible = set(range(1, total_pages + 1))
            logger.info(f"Rendering {total_pages} page(s) without restrictions")
        else:
            accessible = set(validate_accessible_pages(accessible_pages, total_pages))
            document_format = self.detect_format(reader, format_hint)
            # Fails here, before any page is produced
            self.placeholders.load(document_format)
            logger.info(
                f"Redacting {total_pages} page(s): {len(accessible)} accessible, "
                f"{document_format.value} placeholder"
            )

        writer = PdfWriter()
        outcomes = []
        for index, page in enumerate(reader.pages):
            page_number = index + 1
            check_continue(should_continue, page_number)

            if page_number in accessible:
                state = self.composer.add_composed_page(
                    writer, page, page_number, total_pages, template, document_variables
                )
                origin = "source" if state == "accessible" else "error"
            else:
                self._add_placeholder(writer, document_format, page_number, total_pages, document_variables)
                state, origin = "placeholder", document_format.filename
            outcomes.append(PageOutcome(number=page_number, state=state, origin=origin))

        return RedactionResult(data=write_pdf(writer), pages=outcomes, document_format=document_format)

    def detect_format(self, reader: PdfReader, format_hint: DocumentFormat | str | None = None) -> DocumentFormat:
        if not reader.pages:
            return detect_format(0, 0, format_hint)
        width, height = page_size(reader.pages[0])
        return detect_format(width, height, format_hint)

    def _add_placeholder(
        self,
        writer: PdfWriter,
        document_format: DocumentFormat,
        page_number: int,
        total_pages: int,
        variables: Mapping[str, Any],
    ) -> None:
        placeholder = self.placeholders.reader(document_format).pages[0]
        if self.config.label_placeholders:
            width, height = page_size(placeholder)
            placeholder.merge_page(
                page_label_overlay(width, height, page_number, total_pages, variables.get("filename"))
            )
        writer.add_page(placeholder)
