"""Template model and element renderers."""

from docbrand.design.base import ElementRenderer, PageContext, Paint
from docbrand.design.elements import RENDERERS, get_renderer
from docbrand.design.template import Element, ElementKind, ElementStyle, Template, load_template

__all__ = [
    "RENDERERS",
    "Element",
    "ElementKind",
    "ElementRenderer",
    "ElementStyle",
    "PageContext",
    "Paint",
    "Template",
    "get_renderer",
    "load_template",
]
