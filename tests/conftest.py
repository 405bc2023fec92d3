"""
Pytest Configuration and Fixtures
==================================
Shared fixtures for docbrand tests. Every PDF is drawn with ReportLab at
test time, so the suite needs no binary fixtures.
"""

from io import BytesIO
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from PIL import Image
from reportlab.pdfgen import canvas
from reportlab.pdfgen.canvas import Canvas

from docbrand.config import EngineConfig
from docbrand.design.base import PageContext
from docbrand.fonts.selector import FontSelector
from docbrand.render.assets import AssetCache, AssetManager
from docbrand.render.placeholders import DocumentFormat, generate_placeholder
from docbrand.utils.geometry import CoordinateConverter
from docbrand.utils.variables import build_variables, page_variables

PORTRAIT = (595, 842)
LANDSCAPE = (842, 595)


def make_pdf(page_count: int = 1, size: tuple[float, float] = PORTRAIT) -> bytes:
    """Build a PDF whose pages each read "Source page N"."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=size)
    for number in range(1, page_count + 1):
        c.setFont("Helvetica", 24)
        c.drawString(72, size[1] / 2, f"Source page {number}")
        c.showPage()
    c.save()
    return buffer.getvalue()


def make_png(width: int = 40, height: int = 20, color: tuple[int, int, int] = (200, 30, 30)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


SIMPLE_SVG = (
    b'<svg xmlns="http://www.w3.org/2000/svg" width="100" height="50" viewBox="0 0 100 50">'
    b'<rect x="0" y="0" width="100" height="50" fill="#3366cc"/></svg>'
)


@pytest.fixture
def portrait_pdf() -> bytes:
    """Five portrait A4 pages."""
    return make_pdf(5, PORTRAIT)


@pytest.fixture
def landscape_pdf() -> bytes:
    """Three landscape A4 pages."""
    return make_pdf(3, LANDSCAPE)


@pytest.fixture
def png_logo(tmp_path: Path) -> Path:
    path = tmp_path / "logo.png"
    path.write_bytes(make_png())
    return path


@pytest.fixture
def placeholder_dir(tmp_path: Path) -> Path:
    """Directory holding a placeholder PDF for every format."""
    directory = tmp_path / "placeholders"
    directory.mkdir()
    for document_format in DocumentFormat:
        (directory / document_format.filename).write_bytes(generate_placeholder(document_format))
    return directory


@pytest.fixture
def config(tmp_path: Path, png_logo: Path, placeholder_dir: Path) -> EngineConfig:
    """Config with no custom fonts on disk, a PNG logo and test placeholders."""
    return EngineConfig(
        fonts_dir=tmp_path / "fonts",
        logo_path=png_logo,
        placeholder_dir=placeholder_dir,
    )


@pytest.fixture
def assets(config: EngineConfig) -> AssetManager:
    return AssetManager(config, AssetCache())


@pytest.fixture
def mock_canvas() -> MagicMock:
    """Canvas double that records drawing calls."""
    return MagicMock(spec=Canvas)


@pytest.fixture
def page_context(mock_canvas: MagicMock, config: EngineConfig, assets: AssetManager):
    """Build a PageContext on the mock canvas for a portrait page."""

    def build(variables: dict | None = None, size: tuple[float, float] = PORTRAIT) -> PageContext:
        width, height = size
        return PageContext(
            canvas=mock_canvas,
            width=width,
            height=height,
            converter=CoordinateConverter(width, height),
            variables=page_variables(build_variables(config.site_url, variables), 1, 1),
            page_number=1,
            total_pages=1,
            fonts=FontSelector(),
            assets=assets,
            config=config,
        )

    return build
