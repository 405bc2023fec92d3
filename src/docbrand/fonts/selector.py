"""Script-aware font selection."""

import logging
from dataclasses import dataclass, field

from docbrand.errors import NoFontAvailableError
from docbrand.fonts import STANDARD_FONTS, FontSet
from docbrand.utils.text import contains_hebrew

logger = logging.getLogger(__name__)

HEBREW_ITALIC_WARNING = "Italic disabled for Hebrew font compatibility"
HEBREW_STANDARD_WARNING = "May fail to render Hebrew characters with Helvetica"


@dataclass(frozen=True)
class FontStyle:
    """Bold/italic pair actually applied to drawn text."""

    bold: bool = False
    italic: bool = False


@dataclass(frozen=True)
class FontSelection:
    """
    Result of a font selection.

    Attributes:
        font: Registered ReportLab font name to draw with.
        family: Family the font belongs to.
        language: "english" or "hebrew", from the content's script.
        actual_style: Style that will be rendered (may differ from the request).
        used_fallback: True when the standard built-in family was used.
        warning: Non-fatal note about a style or glyph downgrade.
    """

    font: str
    family: str
    language: str
    actual_style: FontStyle
    used_fallback: bool = False
    warning: str | None = None

    @property
    def is_hebrew(self) -> bool:
        return self.language == "hebrew"


@dataclass(frozen=True)
class StyleValidation:
    """Adjusted style and the warnings that explain the adjustments."""

    style: FontStyle
    warnings: list[str] = field(default_factory=list)


class FontSelector:
    """
    Chooses a font for text content.

    Hebrew content never renders italic: no Hebrew face in this system has an
    italic variant, so the request is dropped with a warning instead of failing.
    """

    def __init__(
        self,
        custom_fonts: dict[str, FontSet] | None = None,
        standard_fonts: FontSet | None = STANDARD_FONTS,
    ) -> None:
        """
        Initialize font selector.

        Args:
            custom_fonts: Language → custom FontSet (from AssetManager.load_fonts).
            standard_fonts: Built-in family used when no custom face fits. None
                disables the built-in fallback entirely.
        """
        self.custom_fonts = custom_fonts or {}
        self.standard_fonts = standard_fonts

    def select_font(self, content: str | None, bold: bool = False, italic: bool = False) -> FontSelection:
        """
        Select the best font for content and requested style.

        Args:
            content: Text to draw. Any Hebrew character selects the Hebrew path.
            bold: Bold requested.
            italic: Italic requested.

        Returns:
            FontSelection describing the chosen face.

        Raises:
            NoFontAvailableError: If neither a custom nor a standard face exists.
        """
        if contains_hebrew(content):
            return self._select_hebrew(bold, italic)
        return self._select_english(bold, italic)

    def _select_hebrew(self, bold: bool, italic: bool) -> FontSelection:
        italic_warning = HEBREW_ITALIC_WARNING if italic else None

        custom = self.custom_fonts.get("hebrew")
        if custom is not None and custom.regular:
            resolved = custom.resolve(bold=bold, italic=False)
            if resolved is not None:
                font_name, actual_bold, _ = resolved
                return FontSelection(
                    font=font_name,
                    family=custom.family,
                    language="hebrew",
                    actual_style=FontStyle(bold=actual_bold, italic=False),
                    warning=italic_warning,
                )

        logger.warning("Using Helvetica for Hebrew text, Hebrew glyphs may not render")
        selection = self._select_standard(bold, False, "hebrew")
        warning = "; ".join(w for w in (italic_warning, HEBREW_STANDARD_WARNING) if w)
        return FontSelection(
            font=selection.font,
            family=selection.family,
            language="hebrew",
            actual_style=selection.actual_style,
            used_fallback=True,
            warning=warning,
        )

    def _select_english(self, bold: bool, italic: bool) -> FontSelection:
        custom = self.custom_fonts.get("english")
        if custom is not None and custom.regular:
            resolved = custom.resolve(bold=bold, italic=italic)
            if resolved is not None:
                font_name, actual_bold, actual_italic = resolved
                return FontSelection(
                    font=font_name,
                    family=custom.family,
                    language="english",
                    actual_style=FontStyle(bold=actual_bold, italic=actual_italic),
                )

        return self._select_standard(bold, italic, "english")

    def _select_standard(self, bold: bool, italic: bool, language: str) -> FontSelection:
        if self.standard_fonts is None or not self.standard_fonts.regular:
            raise NoFontAvailableError("No fonts available - cannot render text")

        resolved = self.standard_fonts.resolve(bold=bold, italic=italic)
        if resolved is None:
            raise NoFontAvailableError("No fonts available - cannot render text")
        font_name, actual_bold, actual_italic = resolved
        return FontSelection(
            font=font_name,
            family=self.standard_fonts.family,
            language=language,
            actual_style=FontStyle(bold=actual_bold, italic=actual_italic),
            used_fallback=True,
        )

    def validate_style(self, content: str | None, bold: bool = False, italic: bool = False) -> StyleValidation:
        """
        Check a requested style against the fonts on hand.

        Args:
            content: Text the style applies to.
            bold: Bold requested.
            italic: Italic requested.

        Returns:
            StyleValidation with the style that can be honoured and warnings.
        """
        hebrew = contains_hebrew(content)
        language = "hebrew" if hebrew else "english"
        warnings: list[str] = []

        if hebrew and italic:
            italic = False
            warnings.append("Italic styling disabled for Hebrew text compatibility")

        if bold and not self._has_variant(language, "bold"):
            warnings.append("Bold font variant not available, using regular weight")

        if italic and not self._has_variant(language, "italic"):
            warnings.append("Italic font variant not available, using regular style")

        return StyleValidation(style=FontStyle(bold=bold, italic=italic), warnings=warnings)

    def _has_variant(self, language: str, variant: str) -> bool:
        if language == "hebrew" and variant == "italic":
            return False
        custom = self.custom_fonts.get(language)
        if custom is not None and getattr(custom, variant):
            return True
        return self.standard_fonts is not None and bool(getattr(self.standard_fonts, variant))

    def font_info(self) -> dict[str, object]:
        """Summary of available faces for debugging."""
        def faces(font_set: FontSet | None) -> list[str]:
            if font_set is None:
                return []
            return [
                name
                for name in (font_set.regular, font_set.bold, font_set.italic, font_set.bold_italic)
                if name
            ]

        return {
            "standard": faces(self.standard_fonts),
            "custom": {language: faces(font_set) for language, font_set in self.custom_fonts.items()},
        }
