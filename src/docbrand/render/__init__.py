"""Rendering modules for PDF composition, redaction and image processing.

DocumentComposer and RedactionEngine live in docbrand.render.pdf and
docbrand.render.redaction; element renderers import this package, so it
only re-exports the asset layer.
"""

from docbrand.render.assets import AssetCache, AssetManager, LogoAsset
from docbrand.render.image import (
    detect_image_type,
    get_image_dimensions,
    load_image_from_bytes,
    rasterize_svg,
    save_image_to_bytes,
)
from docbrand.render.placeholders import DocumentFormat, PlaceholderLibrary, detect_format

__all__ = [
    "AssetCache",
    "AssetManager",
    "DocumentFormat",
    "LogoAsset",
    "PlaceholderLibrary",
    "detect_format",
    "detect_image_type",
    "get_image_dimensions",
    "load_image_from_bytes",
    "rasterize_svg",
    "save_image_to_bytes",
]
