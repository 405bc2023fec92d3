"""Utility modules."""

from docbrand.utils.colors import hex_to_rgb, opacity_to_alpha
from docbrand.utils.geometry import (
    PAGE_FORMATS,
    ROTATION_EPSILON,
    CoordinateConverter,
    EditorTransform,
    centered_origin,
    create_converter,
    line_endpoints,
    native_to_percentage,
    normalize_rotation,
    percentage_to_native,
    rotate_offset,
)
from docbrand.utils.text import contains_hebrew, detect_script, reverse_emails_for_rtl, wrap_text
from docbrand.utils.variables import build_variables, page_variables, substitute_variables

__all__ = [
    "PAGE_FORMATS",
    "ROTATION_EPSILON",
    "CoordinateConverter",
    "EditorTransform",
    "build_variables",
    "centered_origin",
    "contains_hebrew",
    "create_converter",
    "detect_script",
    "hex_to_rgb",
    "line_endpoints",
    "native_to_percentage",
    "normalize_rotation",
    "opacity_to_alpha",
    "page_variables",
    "percentage_to_native",
    "reverse_emails_for_rtl",
    "rotate_offset",
    "substitute_variables",
    "wrap_text",
]
