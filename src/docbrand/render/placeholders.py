"""Placeholder documents that replace restricted pages.

One placeholder PDF exists per document format. The format of a source
document is inferred from its first page, and every restricted page is
replaced with page one of the matching placeholder.
"""

import logging
import threading
from enum import Enum
from io import BytesIO
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PdfReadError
from reportlab.pdfgen import canvas

from docbrand.config import EngineConfig
from docbrand.errors import AssetLoadError, PlaceholderMissingError
from docbrand.render.assets import AssetManager
from docbrand.render.image import bytes_to_image_reader
from docbrand.utils.geometry import PAGE_FORMATS
from docbrand.utils.text import string_width, wrap_text

logger = logging.getLogger(__name__)


class DocumentFormat(str, Enum):
    """Page aspect class used to pick a matching placeholder."""

    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"
    SLIDE = "slide"

    @property
    def filename(self) -> str:
        return f"preview-not-available-{self.value}.pdf"

    @property
    def page_size(self) -> tuple[float, float]:
        page_format = PAGE_FORMATS[self.value]
        return page_format.width, page_format.height


def detect_format(width: float, height: float, hint: "DocumentFormat | str | None" = None) -> DocumentFormat:
    """
    Infer the document format from first-page geometry.

    Wider-than-tall pages are landscape; portrait and square pages are
    portrait. Slide is never inferred, only chosen through the hint.

    Args:
        width: First page width in points.
        height: First page height in points.
        hint: Explicit format that overrides inference.

    Returns:
        DocumentFormat.
    """
    if hint is not None:
        return DocumentFormat(hint)
    return DocumentFormat.LANDSCAPE if width > height else DocumentFormat.PORTRAIT


class PlaceholderLibrary:
    """
    Loads placeholder documents from a directory and keeps their bytes.

    Callers get fresh PdfReader objects, so pages copied from a placeholder
    never share objects between insertions.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        self._data: dict[DocumentFormat, bytes] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: EngineConfig) -> "PlaceholderLibrary":
        return cls(config.placeholder_dir)

    def path_for(self, document_format: DocumentFormat) -> Path:
        return self.directory / document_format.filename

    def load(self, document_format: DocumentFormat) -> bytes:
        """
        Get the placeholder bytes for a format, reading them once.

        Raises:
            PlaceholderMissingError: If the file is absent or not a readable PDF.
        """
        with self._lock:
            if document_format in self._data:
                return self._data[document_format]

            path = self.path_for(document_format)
            if not path.is_file():
                raise PlaceholderMissingError(
                    f"Placeholder PDF not found: {path}", format_name=document_format.value
                )

            data = path.read_bytes()
            try:
                if len(PdfReader(BytesIO(data)).pages) == 0:
                    raise PlaceholderMissingError(
                        f"Placeholder PDF has no pages: {path}", format_name=document_format.value
                    )
            except (PdfReadError, ValueError, KeyError, OSError) as e:
                raise PlaceholderMissingError(
                    f"Placeholder PDF unreadable: {path}: {e}", format_name=document_format.value
                ) from e

            self._data[document_format] = data
            logger.info(f"Loaded {document_format.value} placeholder from {path}")
            return data

    def reader(self, document_format: DocumentFormat) -> PdfReader:
        """Fresh reader over the placeholder for a format."""
        return PdfReader(BytesIO(self.load(document_format)))


# ============================================================================
# Placeholder generation
# ============================================================================

HEADLINE = "This page is protected and will be available after purchase"
SECONDARY = "Upgrade your plan for full access"

PRIMARY = (0.0, 0.48, 1.0)
GRAY = (0.42, 0.46, 0.49)
LIGHT_GRAY = (0.97, 0.98, 0.98)
BORDER_GRAY = (0.87, 0.89, 0.90)
DARK_GRAY = (0.29, 0.31, 0.32)
WHITE = (1.0, 1.0, 1.0)

# Content box (width, height) per format
CONTAINER_SIZES = {
    DocumentFormat.PORTRAIT: (440, 340),
    DocumentFormat.LANDSCAPE: (600, 300),
    DocumentFormat.SLIDE: (560, 320),
}

DOT_SPACING = 30


def _draw_background(c: canvas.Canvas, width: float, height: float) -> None:
    c.setFillColorRGB(*LIGHT_GRAY)
    c.rect(0, 0, width, height, stroke=0, fill=1)

    c.saveState()
    c.setFillColorRGB(*BORDER_GRAY)
    c.setFillAlpha(0.5)
    for x in range(DOT_SPACING, int(width), DOT_SPACING):
        for y in range(DOT_SPACING, int(height), DOT_SPACING):
            c.circle(x, y, 0.8, stroke=0, fill=1)
    c.restoreState()


def _draw_lock(c: canvas.Canvas, center_x: float, center_y: float, size: float = 36) -> None:
    body_height = size * 0.6
    shackle_width = size * 0.5

    # Shackle first so the body covers its lower ends
    c.setStrokeColorRGB(*GRAY)
    c.setLineWidth(3)
    c.roundRect(
        center_x - shackle_width / 2, center_y,
        shackle_width, size * 0.5, shackle_width / 2,
        stroke=1, fill=0,
    )

    c.setFillColorRGB(*GRAY)
    c.roundRect(center_x - size / 2, center_y - body_height / 2, size, body_height, 3, stroke=0, fill=1)

    c.setFillColorRGB(*WHITE)
    c.circle(center_x, center_y + 1, 3, stroke=0, fill=1)
    c.rect(center_x - 1, center_y - body_height * 0.3, 2, body_height * 0.3, stroke=0, fill=1)


def _draw_centered_lines(
    c: canvas.Canvas, lines: list[str], center_x: float, top: float,
    font_name: str, font_size: float, color: tuple[float, float, float],
) -> float:
    """Draw lines centered on center_x starting at baseline top; return the next free baseline."""
    c.setFont(font_name, font_size)
    c.setFillColorRGB(*color)
    y = top
    for line in lines:
        c.drawString(center_x - string_width(line, font_name, font_size) / 2, y, line)
        y -= font_size * 1.25
    return y


def _draw_brand(c: canvas.Canvas, logo_data: bytes | None, center_x: float, center_y: float, brand_text: str) -> None:
    if logo_data is not None:
        reader = bytes_to_image_reader(logo_data)
        image_width, image_height = reader.getSize()
        aspect = image_width / image_height if image_height else 1.0
        logo_width = 120.0
        logo_height = logo_width / aspect
        if logo_height > 60:
            logo_height = 60.0
            logo_width = logo_height * aspect
        c.drawImage(
            reader, center_x - logo_width / 2, center_y - logo_height / 2,
            width=logo_width, height=logo_height, mask="auto",
        )
        return

    font_size = 20
    text_width = string_width(brand_text, "Helvetica-Bold", font_size)
    c.saveState()
    c.setFillColorRGB(*PRIMARY)
    c.setFillAlpha(0.1)
    c.roundRect(center_x - text_width / 2 - 15, center_y - 15, text_width + 30, 30, 15, stroke=0, fill=1)
    c.restoreState()
    c.setFont("Helvetica-Bold", font_size)
    c.setFillColorRGB(*PRIMARY)
    c.drawString(center_x - text_width / 2, center_y - font_size / 3, brand_text)


def generate_placeholder(
    document_format: DocumentFormat | str,
    site_text: str = "ludora.app",
    logo_data: bytes | None = None,
    brand_text: str = "LUDORA",
) -> bytes:
    """
    Draw a one-page placeholder PDF for a format.

    Args:
        document_format: Target format (sets the page size).
        site_text: Site name printed under the message.
        logo_data: Raster logo bytes; the brand text is drawn when None.
        brand_text: Text logo used without logo data.

    Returns:
        PDF bytes.
    """
    document_format = DocumentFormat(document_format)
    width, height = document_format.page_size
    container_width, container_height = CONTAINER_SIZES[document_format]

    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=(width, height))
    c.setTitle("Preview not available")

    _draw_background(c, width, height)

    container_x = (width - container_width) / 2
    container_y = (height - container_height) / 2
    c.setFillColorRGB(*WHITE)
    c.setStrokeColorRGB(*BORDER_GRAY)
    c.setLineWidth(2)
    c.roundRect(container_x, container_y, container_width, container_height, 16, stroke=1, fill=1)

    center_x = width / 2
    current_y = container_y + container_height - 60
    _draw_lock(c, center_x, current_y)
    current_y -= 55

    headline_lines = wrap_text(HEADLINE, container_width - 60, "Helvetica-Bold", 20)
    current_y = _draw_centered_lines(c, headline_lines, center_x, current_y, "Helvetica-Bold", 20, DARK_GRAY)
    current_y -= 12
    current_y = _draw_centered_lines(c, [SECONDARY], center_x, current_y, "Helvetica", 16, PRIMARY)
    current_y -= 6
    current_y = _draw_centered_lines(c, [site_text], center_x, current_y, "Helvetica", 14, GRAY)

    _draw_brand(c, logo_data, center_x, max(current_y - 20, container_y + 40), brand_text)

    c.showPage()
    c.save()
    return buffer.getvalue()


def write_placeholders(
    directory: Path,
    config: EngineConfig | None = None,
    assets: AssetManager | None = None,
) -> list[Path]:
    """
    Generate the placeholder PDF for every format into a directory.

    Args:
        directory: Output directory (created if missing).
        config: Engine configuration for the site URL and logo.
        assets: Asset manager used to load the logo.

    Returns:
        Paths of the written files.
    """
    config = config or EngineConfig()
    assets = assets or AssetManager(config)
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    try:
        logo = assets.load_logo("file", config.logo_path, on_failure="raise")
        logo_data = logo.data
    except AssetLoadError as e:
        logger.warning(f"Placeholder logo unavailable, using text brand: {e}")
        logo_data = None

    site_text = config.site_url.split("://", 1)[-1].rstrip("/")
    written = []
    for document_format in DocumentFormat:
        path = directory / document_format.filename
        path.write_bytes(generate_placeholder(document_format, site_text=site_text, logo_data=logo_data))
        logger.info(f"Wrote {document_format.value} placeholder to {path}")
        written.append(path)
    return written
