"""Element renderers keyed by kind."""

from docbrand.design.base import ElementRenderer
from docbrand.design.elements.logo import LogoRenderer
from docbrand.design.elements.shapes import BoxRenderer, CircleRenderer, DottedLineRenderer, LineRenderer
from docbrand.design.elements.text import TextRenderer, UrlRenderer
from docbrand.design.template import ElementKind

RENDERERS: dict[ElementKind, ElementRenderer] = {
    renderer.kind: renderer
    for renderer in (
        LogoRenderer(),
        TextRenderer(),
        UrlRenderer(),
        BoxRenderer(),
        CircleRenderer(),
        LineRenderer(),
        DottedLineRenderer(),
    )
}

_missing = set(ElementKind) - set(RENDERERS)
if _missing:
    raise RuntimeError(f"No renderer for element kind(s): {', '.join(sorted(k.value for k in _missing))}")


def get_renderer(kind: ElementKind) -> ElementRenderer:
    return RENDERERS[kind]


__all__ = [
    "RENDERERS",
    "BoxRenderer",
    "CircleRenderer",
    "DottedLineRenderer",
    "LineRenderer",
    "LogoRenderer",
    "TextRenderer",
    "UrlRenderer",
    "get_renderer",
]
