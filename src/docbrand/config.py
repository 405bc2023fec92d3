"""Configuration loading and validation."""

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from docbrand.types import FailurePolicy, RGBColor
from docbrand.utils.variables import ANONYMOUS_USER

PACKAGE_ASSETS_DIR = Path(__file__).parent / "assets"

DEFAULT_CONFIG_NAME = "docbrand.toml"


def _default_font_files() -> dict[str, dict[str, str]]:
    return {
        "english": {
            "regular": "Inter-Regular.ttf",
            "bold": "Inter-Bold.ttf",
        },
        "hebrew": {
            "regular": "NotoSansHebrew-Regular.ttf",
            "bold": "NotoSansHebrew-Bold.ttf",
        },
    }


class EngineConfig(BaseModel):
    """
    Deployment settings for composition and redaction.

    All fields have defaults, so an empty TOML file (or none at all) gives a
    working engine that uses the built-in Helvetica family and the packaged
    logo. Override only what you need:

        config = EngineConfig(site_url="https://example.org")
        strict = config.model_copy(update={"logo_failure_policy": "raise"})
    """

    # ========================================================================
    # Site
    # ========================================================================
    site_url: str = "https://ludora.app"
    """Public site URL, exposed to templates as FRONTEND_URL and used as url fallback content."""

    # ========================================================================
    # Fonts
    # ========================================================================
    fonts_dir: Path = Field(default_factory=lambda: Path.cwd() / "fonts")
    """Directory holding the custom TTF files."""

    fonts: dict[str, dict[str, str]] = Field(default_factory=_default_font_files)
    """Per-language variant file names (language → variant → file). Variants: regular, bold, italic, boldItalic."""

    font_failure_policy: FailurePolicy = "fallback"
    """On a broken variant file: "fallback" drops the variant, "raise" fails the load."""

    # ========================================================================
    # Logo
    # ========================================================================
    logo_path: Path = Field(default_factory=lambda: PACKAGE_ASSETS_DIR / "logo.svg")
    """Default logo file used when a logo element names no source."""

    logo_size: float = 80
    """Default logo width in points."""

    logo_fallback_text: str = "LOGO"
    """Label drawn in place of a logo that failed to load."""

    logo_fallback_color: RGBColor = (0.2, 0.4, 0.8)
    """Color of the fallback label as RGB in 0-1 range."""

    logo_failure_policy: FailurePolicy = "fallback"
    """On a failed logo load: "fallback" substitutes the label, "raise" propagates AssetLoadError."""

    svg_density: int = 300
    """Rasterization density for vector logos in DPI."""

    remote_timeout: float = 10.0
    """Timeout in seconds for remote logo downloads."""

    # ========================================================================
    # Placeholders
    # ========================================================================
    placeholder_dir: Path = Field(default_factory=lambda: Path.cwd() / "assets" / "placeholders")
    """Directory with preview-not-available-{portrait,landscape,slide}.pdf."""

    label_placeholders: bool = False
    """Stamp "Page N of M" (and the filename variable) on placeholder pages."""

    # ========================================================================
    # Text
    # ========================================================================
    wrap_threshold: int = 50
    """Content longer than this many characters is word-wrapped as a block."""

    line_height: float = 1.2
    """Baseline distance as a multiple of font size for wrapped text."""

    default_text_width: float = 300
    """Wrap width in points when a text element sets none."""

    default_user_label: str = ANONYMOUS_USER
    """Shown for user.email and user.name when no user is given."""

    user_info_template: str = "קובץ זה נוצר עבור {{user.email}}"
    """Content for user-info elements that carry none."""

    @field_validator("wrap_threshold")
    @classmethod
    def _positive_threshold(cls, value: int) -> int:
        if value < 1:
            raise ValueError("wrap_threshold must be at least 1")
        return value

    @field_validator("svg_density")
    @classmethod
    def _sane_density(cls, value: int) -> int:
        if not 72 <= value <= 1200:
            raise ValueError("svg_density must be between 72 and 1200")
        return value

    def placeholder_path(self, format_name: str) -> Path:
        """Path of the placeholder document for a format name."""
        return self.placeholder_dir / f"preview-not-available-{format_name}.pdf"

    def font_path(self, language: str, variant: str) -> Path | None:
        """Path of a declared font file, or None when the variant is not declared."""
        filename = self.fonts.get(language, {}).get(variant)
        if filename is None:
            return None
        return self.fonts_dir / filename


def load_config(config_path: Path | None = None) -> EngineConfig:
    """
    Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, looks for docbrand.toml in
            the current directory and falls back to defaults when it is absent.

    Returns:
        Validated EngineConfig object.

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist.
        ValueError: If config is invalid.
    """
    if config_path is None:
        config_path = Path.cwd() / DEFAULT_CONFIG_NAME
        if not config_path.exists():
            return EngineConfig()

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "rb") as f:
        config_dict = tomllib.load(f)

    # Relative directories are resolved against the config file location
    base_dir = config_path.parent
    for key in ("fonts_dir", "logo_path", "placeholder_dir"):
        if key in config_dict:
            path = Path(config_dict[key]).expanduser()
            config_dict[key] = path if path.is_absolute() else base_dir / path

    return EngineConfig(**config_dict)
