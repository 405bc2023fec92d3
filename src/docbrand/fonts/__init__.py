"""Font registration and per-language font sets."""

import logging
from dataclasses import dataclass
from pathlib import Path

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from docbrand.errors import AssetLoadError
from docbrand.types import FailurePolicy

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("english", "hebrew")

VARIANTS = ("regular", "bold", "italic", "boldItalic")

# Font path registry: maps registered font names to their file paths
_FONT_PATHS: dict[str, Path] = {}


@dataclass(frozen=True)
class FontSet:
    """
    Registered font names for one family.

    Any variant may be None when its file was missing or failed to register.

    Attributes:
        family: Family name (e.g., "Inter", "Helvetica").
        regular: Registered name of the regular face.
        bold: Registered name of the bold face.
        italic: Registered name of the italic face.
        bold_italic: Registered name of the bold italic face.
        custom: False for the PDF built-in families.
        failures: Messages for variants that were declared but failed to load.
    """

    family: str
    regular: str | None = None
    bold: str | None = None
    italic: str | None = None
    bold_italic: str | None = None
    custom: bool = True
    failures: tuple[str, ...] = ()

    @property
    def available(self) -> bool:
        return any((self.regular, self.bold, self.italic, self.bold_italic))

    def resolve(self, bold: bool = False, italic: bool = False) -> tuple[str, bool, bool] | None:
        """
        Pick the closest available face for a requested style.

        Degrades the style when the exact face is missing, e.g. bold italic
        falls back to bold, then italic, then regular.

        Args:
            bold: Bold requested.
            italic: Italic requested.

        Returns:
            (font_name, actual_bold, actual_italic), or None if no candidate exists.
        """
        candidates: list[tuple[str | None, bool, bool]] = []
        if bold and italic:
            candidates.append((self.bold_italic, True, True))
        if bold:
            candidates.append((self.bold, True, False))
        if italic:
            candidates.append((self.italic, False, True))
        candidates.append((self.regular, False, False))

        for font_name, actual_bold, actual_italic in candidates:
            if font_name:
                return font_name, actual_bold, actual_italic
        return None


# PDF built-in family, always available without any files
STANDARD_FONTS = FontSet(
    family="Helvetica",
    regular="Helvetica",
    bold="Helvetica-Bold",
    italic="Helvetica-Oblique",
    bold_italic="Helvetica-BoldOblique",
    custom=False,
)


def register_font(font_name: str, font_path: Path) -> None:
    """
    Register a TTF file with ReportLab under the given name.

    Registering the same name twice is a no-op.

    Args:
        font_name: Name to register (e.g., "Inter-Bold").
        font_path: Path to the TTF file.

    Raises:
        AssetLoadError: If the file is missing or not a usable TrueType font.
    """
    if font_name in _FONT_PATHS:
        return

    if not font_path.is_file():
        raise AssetLoadError(f"Font file not found: {font_path}", locator=str(font_path))

    try:
        pdfmetrics.registerFont(TTFont(font_name, str(font_path)))
    except Exception as e:
        raise AssetLoadError(
            f"Failed to register font {font_name} from {font_path.name}: {e}",
            locator=str(font_path),
        ) from e

    _FONT_PATHS[font_name] = font_path
    logger.info(f"Registered font: {font_name} from {font_path.name}")


def load_language_fonts(
    language: str,
    files: dict[str, Path],
    on_failure: FailurePolicy = "fallback",
) -> FontSet:
    """
    Register the declared font files for one language.

    Each variant is loaded on its own, so a missing bold file only removes
    the bold face from the returned set.

    Args:
        language: Language key, used for log messages.
        files: Variant name → TTF path (variants: regular, bold, italic, boldItalic).
        on_failure: "fallback" skips broken variants, "raise" propagates the first error.

    Returns:
        FontSet with every variant that registered. Its family is the part of
        the first file name before the first hyphen.

    Raises:
        AssetLoadError: If a variant fails and on_failure is "raise".
    """
    registered: dict[str, str] = {}
    failures: list[str] = []
    family = ""

    for variant in VARIANTS:
        font_path = files.get(variant)
        if font_path is None:
            continue

        font_name = font_path.stem
        family = family or font_name.split("-")[0]
        try:
            register_font(font_name, font_path)
        except AssetLoadError as e:
            if on_failure == "raise":
                raise
            logger.warning(f"{language} {variant} font unavailable: {e}")
            failures.append(f"{variant}: {e}")
            continue
        registered[variant] = font_name

    if not registered:
        logger.warning(f"No custom fonts registered for {language}. Using built-in PDF fonts.")

    return FontSet(
        family=family or language,
        regular=registered.get("regular"),
        bold=registered.get("bold"),
        italic=registered.get("italic"),
        bold_italic=registered.get("boldItalic"),
        failures=tuple(failures),
    )
