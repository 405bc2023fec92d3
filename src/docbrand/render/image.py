"""Image detection and rasterization using Pillow and svglib."""

import logging
from io import BytesIO
from typing import Literal

from PIL import Image, ImageChops
from reportlab.graphics import renderPM
from reportlab.lib.utils import ImageReader
from svglib.svglib import svg2rlg

from docbrand.errors import SvgConversionError, UnsupportedImageFormatError

logger = logging.getLogger(__name__)

ImageType = Literal["png", "jpeg", "svg"]

PNG_SIGNATURE = b"\x89PNG"
JPEG_SIGNATURE = b"\xff\xd8\xff"

# How far into the data to look for vector markup
SVG_SNIFF_BYTES = 200


def detect_image_type(data: bytes) -> ImageType:
    """
    Detect image format from content, never from a file name.

    Args:
        data: Raw image bytes.

    Returns:
        "png", "jpeg" or "svg".

    Raises:
        UnsupportedImageFormatError: If the bytes match no known format.
    """
    if data.startswith(PNG_SIGNATURE):
        return "png"
    if data.startswith(JPEG_SIGNATURE):
        return "jpeg"

    head = data[:SVG_SNIFF_BYTES].decode("utf-8", errors="ignore").lower()
    if "<svg" in head:
        return "svg"

    raise UnsupportedImageFormatError(
        f"Unsupported image format (first bytes: {data[:4].hex() or 'empty'})"
    )


def load_image_from_bytes(image_data: bytes) -> Image.Image:
    """
    Load image from raw bytes.

    Args:
        image_data: Raw image bytes (JPEG, PNG, etc.).

    Returns:
        PIL Image object.
    """
    return Image.open(BytesIO(image_data))


def save_image_to_bytes(img: Image.Image, format: str = "PNG") -> bytes:
    """
    Save PIL Image to bytes.

    Args:
        img: PIL Image object.
        format: Image format (PNG, JPEG, etc.).

    Returns:
        Image as bytes.
    """
    buffer = BytesIO()
    img.save(buffer, format=format)
    return buffer.getvalue()


def get_image_dimensions(image_data: bytes) -> tuple[int, int]:
    """
    Get dimensions of image without fully loading it.

    Args:
        image_data: Raw image bytes.

    Returns:
        Tuple of (width, height) in pixels.
    """
    img = load_image_from_bytes(image_data)
    return (img.width, img.height)


def bytes_to_image_reader(image_data: bytes) -> ImageReader:
    """Wrap image bytes in a ReportLab ImageReader for canvas.drawImage()."""
    return ImageReader(BytesIO(image_data))


def fit_contain(img: Image.Image, size: int) -> Image.Image:
    """
    Fit an image inside a size x size box on a transparent canvas.

    The image keeps its aspect ratio and is centered; unused space stays
    fully transparent.

    Args:
        img: Source image.
        size: Box edge in pixels.

    Returns:
        New RGBA image of exactly size x size pixels.
    """
    img = img.convert("RGBA")
    scale = min(size / img.width, size / img.height)
    new_width = max(1, round(img.width * scale))
    new_height = max(1, round(img.height * scale))
    img = img.resize((new_width, new_height), Image.Resampling.LANCZOS)

    canvas = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    canvas.paste(img, ((size - new_width) // 2, (size - new_height) // 2), img)
    return canvas


def _alpha_from_backgrounds(on_black: Image.Image, on_white: Image.Image) -> Image.Image:
    """
    Recover an RGBA image from two renders of the same drawing.

    Where the drawing is opaque both renders agree; where it is transparent
    they differ by the full background difference. The black render is the
    color premultiplied by alpha.
    """
    on_black = on_black.convert("RGB")
    difference = ImageChops.subtract(on_white.convert("RGB"), on_black).convert("L")
    alpha = ImageChops.invert(difference)
    red, green, blue = on_black.split()
    return Image.merge("RGBa", (red, green, blue, alpha)).convert("RGBA")


def rasterize_svg(svg_data: bytes, size: int = 400, density: int = 300) -> bytes:
    """
    Convert SVG markup to a transparent PNG.

    The drawing is rendered at the given density, then fitted into a
    size x size pixel box preserving aspect ratio.

    Args:
        svg_data: SVG document bytes.
        size: Target box edge in pixels.
        density: Render density in DPI (72 = one pixel per SVG unit).

    Returns:
        PNG bytes.

    Raises:
        SvgConversionError: If the SVG cannot be parsed or rendered.
    """
    try:
        drawing = svg2rlg(BytesIO(svg_data))
    except Exception as e:
        raise SvgConversionError(f"Failed to parse SVG: {e}") from e

    if drawing is None or not drawing.width or not drawing.height:
        raise SvgConversionError("Failed to parse SVG: empty or invalid drawing")

    try:
        # Render at the requested density, then downsample into the box
        scale = density / 72
        drawing.scale(scale, scale)
        drawing.width *= scale
        drawing.height *= scale
        on_black = renderPM.drawToPIL(drawing, dpi=72, bg=0x000000)
        on_white = renderPM.drawToPIL(drawing, dpi=72, bg=0xFFFFFF)
    except Exception as e:
        raise SvgConversionError(f"Failed to render SVG: {e}") from e

    logger.debug(f"Rasterized SVG to {on_black.width}x{on_black.height} at {density} DPI")
    return save_image_to_bytes(fit_contain(_alpha_from_backgrounds(on_black, on_white), size))
