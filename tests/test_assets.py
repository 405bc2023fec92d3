"""Tests for image detection, SVG rasterization and the asset manager."""

import base64
from pathlib import Path
from unittest.mock import patch

import pytest
import requests

from docbrand.errors import (
    AssetLoadError,
    RemoteAssetError,
    SvgConversionError,
    UnsupportedImageFormatError,
)
from docbrand.render.assets import AssetCache, AssetManager
from docbrand.render.image import detect_image_type, get_image_dimensions, load_image_from_bytes, rasterize_svg

from conftest import SIMPLE_SVG, make_png


# ============================================================================
# Image helpers
# ============================================================================

class TestImageDetection:
    def test_png(self):
        assert detect_image_type(make_png()) == "png"

    def test_jpeg(self):
        assert detect_image_type(b"\xff\xd8\xff\xe0" + b"\x00" * 10) == "jpeg"

    def test_svg_with_prolog(self):
        data = b'<?xml version="1.0" encoding="UTF-8"?>\n' + SIMPLE_SVG
        assert detect_image_type(data) == "svg"

    def test_svg_marker_past_sniff_window(self):
        data = b"<!--" + b" " * 300 + b"-->" + SIMPLE_SVG
        with pytest.raises(UnsupportedImageFormatError):
            detect_image_type(data)

    def test_unknown(self):
        with pytest.raises(UnsupportedImageFormatError):
            detect_image_type(b"GIF89a....")


class TestRasterizeSvg:
    def test_fits_transparent_box(self):
        png = rasterize_svg(SIMPLE_SVG, size=120)
        assert detect_image_type(png) == "png"
        assert get_image_dimensions(png) == (120, 120)

    def test_white_shapes_stay_opaque(self):
        svg = (
            b'<svg xmlns="http://www.w3.org/2000/svg" width="200" height="100" viewBox="0 0 200 100">'
            b'<rect x="0" y="0" width="100" height="100" fill="#3366cc"/>'
            b'<circle cx="50" cy="50" r="30" fill="#ffffff"/></svg>'
        )
        img = load_image_from_bytes(rasterize_svg(svg, size=100)).convert("RGBA")

        # Drawing fits as 100x50 centered vertically: left half blue with a white
        # circle, right half empty
        red, green, blue, alpha = img.getpixel((25, 50))
        assert alpha == 255
        assert min(red, green, blue) > 240

        red, green, blue, alpha = img.getpixel((5, 50))
        assert alpha == 255
        assert blue > red

        assert img.getpixel((75, 50))[3] == 0
        assert img.getpixel((50, 5))[3] == 0

    def test_invalid_svg(self):
        with pytest.raises(SvgConversionError):
            rasterize_svg(b"<svg xmlns='http://www.w3.org/2000/svg'></svg>")


# ============================================================================
# Logos
# ============================================================================

class TestLoadLogo:
    def test_svg_is_converted(self, assets: AssetManager, tmp_path: Path):
        path = tmp_path / "brand.svg"
        path.write_bytes(SIMPLE_SVG)

        asset = assets.load_logo("file", path)

        assert asset.type == "png"
        assert asset.original_type == "svg"
        assert asset.converted is True
        assert asset.fallback is False
        assert get_image_dimensions(asset.data) == (400, 400)

    def test_png_file(self, assets: AssetManager, png_logo: Path):
        asset = assets.load_logo("file", png_logo)
        assert asset.type == "png"
        assert asset.converted is False
        assert (asset.width, asset.height) == (40, 20)
        assert asset.aspect_ratio == pytest.approx(0.5)

    def test_default_logo_from_config(self, assets: AssetManager, png_logo: Path):
        asset = assets.load_logo()
        assert asset.locator == str(png_logo)
        assert not asset.fallback

    def test_base64_data_uri(self, assets: AssetManager):
        uri = "data:image/png;base64," + base64.b64encode(make_png(10, 10)).decode()
        asset = assets.load_logo("base64", uri)
        assert asset.type == "png"
        assert asset.width == 10

    def test_base64_without_data_prefix_falls_back(self, assets: AssetManager):
        asset = assets.load_logo("base64", base64.b64encode(make_png()).decode())
        assert asset.fallback

    def test_missing_file_falls_back(self, assets: AssetManager, tmp_path: Path):
        asset = assets.load_logo("file", tmp_path / "nope.png")
        assert asset.fallback
        assert asset.type == "text"
        assert asset.text == "LOGO"
        assert asset.color == (0.2, 0.4, 0.8)
        assert asset.error

    def test_failure_is_cached(self, assets: AssetManager, tmp_path: Path):
        missing = tmp_path / "nope.png"
        first = assets.load_logo("file", missing)
        missing.write_bytes(make_png())
        second = assets.load_logo("file", missing)
        assert second is first
        assert second.fallback

    def test_raise_policy(self, assets: AssetManager, tmp_path: Path):
        with pytest.raises(AssetLoadError):
            assets.load_logo("file", tmp_path / "nope.png", on_failure="raise")

    def test_raise_policy_keeps_error_type(self, assets: AssetManager, tmp_path: Path):
        path = tmp_path / "logo.gif"
        path.write_bytes(b"GIF89a....")
        with pytest.raises(UnsupportedImageFormatError):
            assets.load_logo("file", path, on_failure="raise")

    def test_raise_policy_from_config(self, config, tmp_path: Path):
        strict = AssetManager(config.model_copy(update={"logo_failure_policy": "raise"}))
        with pytest.raises(AssetLoadError):
            strict.load_logo("file", tmp_path / "nope.png")

    def test_remote_failure(self, assets: AssetManager):
        with patch("docbrand.render.assets.requests.get", side_effect=requests.ConnectionError("down")):
            asset = assets.load_logo("url", "https://cdn.example.com/logo.png")
            assert asset.fallback
            with pytest.raises(RemoteAssetError):
                assets.load_logo("url", "https://cdn.example.com/logo.png", on_failure="raise")

    def test_remote_success(self, assets: AssetManager):
        with patch("docbrand.render.assets.requests.get") as get:
            get.return_value.content = make_png(8, 8)
            asset = assets.load_logo("url", "https://cdn.example.com/logo.png")
        assert asset.type == "png"
        get.assert_called_once_with("https://cdn.example.com/logo.png", timeout=10.0)

    def test_unknown_source(self, assets: AssetManager):
        assert assets.load_logo("ftp", "ftp://x/logo.png").fallback


# ============================================================================
# Cache
# ============================================================================

class TestAssetCache:
    def test_hits_and_misses(self, assets: AssetManager, png_logo: Path):
        assets.load_logo("file", png_logo)
        assets.load_logo("file", png_logo)
        stats = assets.cache_stats()
        assert stats["logos"] == 1
        assert stats["misses"] == 1
        assert stats["hits"] == 1

    def test_size_hint_is_part_of_key(self, assets: AssetManager, png_logo: Path):
        assets.load_logo("file", png_logo, size_hint=100)
        assets.load_logo("file", png_logo, size_hint=200)
        assert assets.cache_stats()["logos"] == 2

    def test_shared_cache(self, config, png_logo: Path):
        cache = AssetCache()
        AssetManager(config, cache).load_logo("file", png_logo)
        AssetManager(config, cache).load_logo("file", png_logo)
        assert cache.hits == 1
        assert len(cache) == 1

    def test_clear(self, assets: AssetManager, png_logo: Path):
        assets.load_logo("file", png_logo)
        assets.clear_cache()
        assert assets.cache_stats()["entries"] == 0

    def test_loader_errors_not_cached(self):
        cache = AssetCache()

        def failing():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            cache.get_or_load("k", failing)
        assert "k" not in cache
        assert cache.get_or_load("k", lambda: 42) == 42


# ============================================================================
# Fonts
# ============================================================================

class TestLoadFonts:
    def test_missing_font_files_degrade(self, assets: AssetManager):
        fonts = assets.load_fonts()
        assert set(fonts) == {"english", "hebrew"}
        assert not fonts["english"].available
        assert assets.cache_stats()["fonts"] == 2

    def test_raise_policy(self, assets: AssetManager):
        with pytest.raises(AssetLoadError):
            assets.load_fonts(["english"], on_failure="raise")

    def test_raise_policy_after_cached_fallback(self, assets: AssetManager):
        fonts = assets.load_fonts(["english"], on_failure="fallback")
        assert fonts["english"].failures

        with pytest.raises(AssetLoadError, match="english fonts failed to load"):
            assets.load_fonts(["english"], on_failure="raise")
        assert assets.cache_stats()["fonts"] == 1

    def test_unknown_language(self, assets: AssetManager):
        with pytest.raises(ValueError):
            assets.load_fonts(["klingon"])
