"""Template payload models and validation.

A template groups positioned elements by kind:

    {"elements": {"text": [{"position": {"x": 50, "y": 50}, "content": "..."}]}}

Everything structural is checked here, before any page is touched.
"""

import logging
import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from docbrand.errors import TemplateStructureError

logger = logging.getLogger(__name__)


class ElementKind(str, Enum):
    """Closed set of drawable element kinds."""

    LOGO = "logo"
    TEXT = "text"
    URL = "url"
    BOX = "box"
    CIRCLE = "circle"
    LINE = "line"
    DOTTED_LINE = "dotted-line"


# Group keys written by older editors, mapped onto the kinds they render as
KIND_ALIASES: dict[str, ElementKind] = {
    "watermark-logo": ElementKind.LOGO,
    "copyright-text": ElementKind.TEXT,
    "free-text": ElementKind.TEXT,
    "user-info": ElementKind.TEXT,
    "watermark-text": ElementKind.TEXT,
}

# Top-level keys of the flat layout that predates grouped elements
LEGACY_KEYS = {"logo", "text", "url", "customElements", "watermark", "branding"}

# Style values used when an element leaves them unset
KIND_DEFAULTS: dict[ElementKind, dict[str, Any]] = {
    ElementKind.LOGO: {"size": 80},
    ElementKind.TEXT: {"font_size": 12, "color": "#000000", "width": 300},
    ElementKind.URL: {"font_size": 12, "color": "#0066cc"},
    ElementKind.BOX: {"width": 100, "height": 100, "color": "#000000", "border_width": 2},
    ElementKind.CIRCLE: {"size": 50, "color": "#000000", "border_width": 2},
    ElementKind.LINE: {"length": 100, "thickness": 2, "color": "#000000"},
    ElementKind.DOTTED_LINE: {"length": 100, "thickness": 2, "color": "#000000"},
}


def resolve_kind(name: str | None) -> ElementKind | None:
    """
    Map a group key or element type onto an ElementKind.

    Args:
        name: Kind name or alias (e.g., "text", "user-info").

    Returns:
        ElementKind, or None if the name is unknown.
    """
    if not name:
        return None
    try:
        return ElementKind(name)
    except ValueError:
        return KIND_ALIASES.get(name)


class Position(BaseModel):
    """Editor position in percent, origin top-left."""

    x: float = 50
    y: float = 50

    @field_validator("x", "y", mode="before")
    @classmethod
    def _default_missing(cls, value: Any) -> Any:
        return 50 if value is None else value

    @field_validator("x", "y")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("position must be a finite number")
        return value


class Shadow(BaseModel):
    """Drop shadow drawn before the element itself."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    enabled: bool = False
    offset_x: float = Field(0, alias="offsetX")
    offset_y: float = Field(0, alias="offsetY")
    blur: float = 0
    color: str = "#000000"
    opacity: float = 50
    """Shadow opacity 0-100."""


class ElementStyle(BaseModel):
    """Visual style of an element. Unset values fall back to KIND_DEFAULTS."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    opacity: float | None = None
    """Opacity 0-100 (unset means fully opaque)."""

    rotation: float | None = None
    """Rotation in degrees, clockwise as seen in the editor."""

    color: str | None = None
    fill_color: str | None = Field(None, alias="fillColor")
    size: float | None = None
    font_size: float | None = Field(None, alias="fontSize")
    width: float | None = None
    height: float | None = None
    length: float | None = None
    thickness: float | None = None
    border_width: float | None = Field(None, alias="borderWidth")
    radius: float | None = None
    bold: bool = False
    italic: bool = False
    dotted: bool = False
    shadow: Shadow | None = None

    @field_validator("bold", "italic", "dotted", mode="before")
    @classmethod
    def _null_flags(cls, value: Any) -> Any:
        return False if value is None else value


class Element(BaseModel):
    """One positioned, styled drawable unit."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | int | None = None
    type: str | None = None
    position: Position = Field(default_factory=Position)
    style: ElementStyle = Field(default_factory=ElementStyle)
    content: str | None = None
    href: str | None = None
    rotation: float | None = None
    """Element-level rotation kept by older templates; style.rotation wins."""

    visible: bool = True
    hidden: bool = False
    source: str | None = None
    """Logo source kind: "file", "url" or "base64"."""

    locator: str | None = None
    """Logo file path, URL or data URI."""

    @field_validator("position", mode="before")
    @classmethod
    def _default_position(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("style", mode="before")
    @classmethod
    def _default_style(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("visible", mode="before")
    @classmethod
    def _null_visible(cls, value: Any) -> Any:
        return True if value is None else value

    @field_validator("hidden", mode="before")
    @classmethod
    def _null_hidden(cls, value: Any) -> Any:
        return False if value is None else value

    @property
    def is_visible(self) -> bool:
        # hidden takes precedence over visible
        return self.visible and not self.hidden

    @property
    def editor_rotation(self) -> float:
        if self.style.rotation is not None:
            return self.style.rotation
        return self.rotation or 0.0

    @property
    def shadow(self) -> Shadow | None:
        shadow = self.style.shadow
        return shadow if shadow is not None and shadow.enabled else None

    def style_value(self, kind: ElementKind, name: str, default: Any = None) -> Any:
        """Style attribute with the kind default applied."""
        value = getattr(self.style, name, None)
        if value is not None:
            return value
        return KIND_DEFAULTS.get(kind, {}).get(name, default)

    def label(self) -> str:
        return str(self.id) if self.id is not None else (self.type or "element")


@dataclass(frozen=True)
class PlacedElement:
    """An element together with the kind it renders as and the key it came from."""

    kind: ElementKind
    variant: str
    element: Element


class Template(BaseModel):
    """Grouped template payload."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    elements: dict[str, list[Element]] = Field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: "Template | Mapping[str, Any]") -> "Template":
        """
        Validate a raw template payload.

        Args:
            payload: Parsed JSON object, or an existing Template.

        Returns:
            Validated Template.

        Raises:
            TemplateStructureError: If the payload uses the legacy flat layout,
                a group is not a list, or an element is malformed.
        """
        if isinstance(payload, Template):
            return payload

        if not isinstance(payload, Mapping):
            raise TemplateStructureError(
                f"Template must be an object, got {type(payload).__name__}"
            )

        elements = payload.get("elements")
        if elements is None:
            legacy = sorted(LEGACY_KEYS.intersection(payload))
            hint = f" (found legacy keys: {', '.join(legacy)})" if legacy else ""
            raise TemplateStructureError(f"Template has no 'elements' mapping{hint}")

        if not isinstance(elements, Mapping):
            raise TemplateStructureError("Template 'elements' must map kinds to lists of elements")

        for group, items in elements.items():
            if not isinstance(items, list):
                raise TemplateStructureError(f"Element group '{group}' must be a list")

        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise TemplateStructureError(f"Invalid template: {e}") from e

    def iter_elements(self) -> Iterator[PlacedElement]:
        """
        Yield every element with its resolved kind, in template order.

        Unknown kinds are logged and skipped, whether they come from a group
        key or from an element's own type. A known element type overrides
        its group key.
        """
        for group, items in self.elements.items():
            group_kind = resolve_kind(group)
            if group_kind is None:
                logger.warning(f"Ignoring unknown element group '{group}' ({len(items)} element(s))")
                continue

            for element in items:
                if not element.type:
                    yield PlacedElement(kind=group_kind, variant=group, element=element)
                    continue

                kind = resolve_kind(element.type)
                if kind is None:
                    logger.warning(f"Ignoring element {element.label()} of unknown type '{element.type}' in '{group}'")
                    continue
                yield PlacedElement(kind=kind, variant=element.type, element=element)

    def visible_elements(self) -> list[PlacedElement]:
        return [placed for placed in self.iter_elements() if placed.element.is_visible]


def load_template(payload: "Template | Mapping[str, Any]") -> Template:
    """Validate a template payload (see Template.from_payload)."""
    return Template.from_payload(payload)
