"""Tests for font sets, font loading and script-aware selection."""

from pathlib import Path

import pytest

from docbrand.errors import AssetLoadError, NoFontAvailableError
from docbrand.fonts import STANDARD_FONTS, FontSet, load_language_fonts
from docbrand.fonts.selector import HEBREW_ITALIC_WARNING, FontSelector


HEBREW_SET = FontSet(family="NotoSansHebrew", regular="Helvetica", bold="Helvetica-Bold")
ENGLISH_SET = FontSet(
    family="Inter",
    regular="Helvetica",
    bold="Helvetica-Bold",
    italic="Helvetica-Oblique",
)


# ============================================================================
# FontSet
# ============================================================================

class TestFontSet:
    def test_resolve_exact(self):
        assert STANDARD_FONTS.resolve(bold=True, italic=True) == ("Helvetica-BoldOblique", True, True)

    def test_resolve_degrades(self):
        font_set = FontSet(family="X", regular="X-Regular", bold="X-Bold")
        assert font_set.resolve(bold=True, italic=True) == ("X-Bold", True, False)
        assert font_set.resolve(italic=True) == ("X-Regular", False, False)

    def test_empty_set(self):
        font_set = FontSet(family="X")
        assert not font_set.available
        assert font_set.resolve() is None


class TestLoadLanguageFonts:
    def test_missing_files_degrade(self, tmp_path: Path):
        files = {"regular": tmp_path / "Missing-Regular.ttf"}
        font_set = load_language_fonts("english", files)
        assert font_set.regular is None
        assert font_set.family == "Missing"
        assert font_set.failures and font_set.failures[0].startswith("regular:")

    def test_missing_files_raise(self, tmp_path: Path):
        files = {"regular": tmp_path / "Missing-Regular.ttf"}
        with pytest.raises(AssetLoadError):
            load_language_fonts("english", files, on_failure="raise")

    def test_broken_file_raise(self, tmp_path: Path):
        broken = tmp_path / "Broken-Regular.ttf"
        broken.write_bytes(b"not a font")
        with pytest.raises(AssetLoadError):
            load_language_fonts("english", {"regular": broken}, on_failure="raise")


# ============================================================================
# Selection
# ============================================================================

class TestFontSelector:
    @pytest.mark.parametrize(
        "custom",
        [{}, {"hebrew": HEBREW_SET}],
        ids=["standard-only", "custom-hebrew"],
    )
    @pytest.mark.parametrize("content", ["שלום", "Hello שלום", "א"])
    def test_hebrew_never_italic(self, custom, content):
        selection = FontSelector(custom).select_font(content, italic=True)
        assert selection.actual_style.italic is False
        assert selection.warning is not None
        assert HEBREW_ITALIC_WARNING in selection.warning
        assert selection.language == "hebrew"

    def test_hebrew_custom_bold(self):
        selection = FontSelector({"hebrew": HEBREW_SET}).select_font("שלום", bold=True)
        assert selection.font == "Helvetica-Bold"
        assert selection.family == "NotoSansHebrew"
        assert selection.actual_style.bold
        assert not selection.used_fallback
        assert selection.warning is None

    def test_hebrew_standard_fallback_warns(self):
        selection = FontSelector().select_font("שלום")
        assert selection.used_fallback
        assert "Helvetica" in selection.warning

    def test_english_custom(self):
        selection = FontSelector({"english": ENGLISH_SET}).select_font("Hello", italic=True)
        assert selection.family == "Inter"
        assert selection.font == "Helvetica-Oblique"
        assert selection.actual_style.italic

    def test_english_standard_variants(self):
        selection = FontSelector().select_font("Hello", bold=True, italic=True)
        assert selection.font == "Helvetica-BoldOblique"
        assert selection.used_fallback
        assert selection.warning is None

    def test_no_fonts_at_all(self):
        with pytest.raises(NoFontAvailableError):
            FontSelector({}, standard_fonts=None).select_font("Hello")

    def test_validate_style_for_hebrew(self):
        validation = FontSelector({"hebrew": HEBREW_SET}).validate_style("שלום", bold=True, italic=True)
        assert validation.style.italic is False
        assert validation.style.bold is True
        assert any("Hebrew" in warning for warning in validation.warnings)

    def test_font_info(self):
        info = FontSelector({"english": ENGLISH_SET}).font_info()
        assert "Helvetica" in info["standard"]
        assert info["custom"]["english"] == ["Helvetica", "Helvetica-Bold", "Helvetica-Oblique"]
