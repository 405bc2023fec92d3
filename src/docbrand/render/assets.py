"""Logo and font loading with an injectable, process-lifetime cache."""

import base64
import binascii
import logging
import threading
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import requests
from PIL import Image

from docbrand.config import EngineConfig
from docbrand.errors import AssetLoadError, RemoteAssetError
from docbrand.fonts import SUPPORTED_LANGUAGES, FontSet, load_language_fonts
from docbrand.render.image import detect_image_type, get_image_dimensions, rasterize_svg
from docbrand.types import FailurePolicy, LogoSource, RGBColor

logger = logging.getLogger(__name__)

# Pixel box for rasterized vector logos when the caller gives no size
DEFAULT_SIZE_HINT = 400


@dataclass(frozen=True)
class LogoAsset:
    """
    A loaded logo, or the fallback that stands in for one.

    Attributes:
        data: Raster image bytes (None for fallback assets).
        type: "png", "jpeg", or "text" for fallback assets.
        original_type: Format of the source data ("svg" when converted).
        converted: True when the source was rasterized.
        source: Source kind the asset was requested from.
        locator: Path, URL or data URI it was requested with.
        width: Pixel width of data.
        height: Pixel height of data.
        fallback: True when loading failed and text/color replace the image.
        text: Fallback label.
        color: Fallback label color as RGB in 0-1 range.
        error: Message of the failure that produced a fallback asset.
        error_type: Exception class of that failure.
    """

    data: bytes | None
    type: str
    original_type: str | None = None
    converted: bool = False
    source: str = "file"
    locator: str | None = None
    width: int = 0
    height: int = 0
    fallback: bool = False
    text: str | None = None
    color: RGBColor | None = None
    error: str | None = None
    error_type: type[AssetLoadError] | None = field(default=None, repr=False)

    @property
    def aspect_ratio(self) -> float:
        """Height divided by width (1.0 when unknown)."""
        if not self.width or not self.height:
            return 1.0
        return self.height / self.width


class AssetCache:
    """
    Thread-safe key/value store for loaded assets.

    Population is single-flight: concurrent first requests for the same key
    run the loader once and the others wait for its result. Loader exceptions
    are not cached.
    """

    def __init__(self) -> None:
        self._entries: dict[Hashable, Any] = {}
        self._locks: dict[Hashable, threading.Lock] = {}
        self._guard = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get_or_load(self, key: Hashable, loader: Callable[[], Any]) -> Any:
        with self._guard:
            if key in self._entries:
                self.hits += 1
                return self._entries[key]
            key_lock = self._locks.setdefault(key, threading.Lock())

        with key_lock:
            with self._guard:
                if key in self._entries:
                    self.hits += 1
                    return self._entries[key]

            value = loader()

            with self._guard:
                self._entries[key] = value
                self.misses += 1
            return value

    def get(self, key: Hashable) -> Any | None:
        with self._guard:
            return self._entries.get(key)

    def clear(self) -> None:
        with self._guard:
            self._entries.clear()
            self._locks.clear()
            self.hits = 0
            self.misses = 0

    def keys(self) -> list[Hashable]:
        with self._guard:
            return list(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        with self._guard:
            return key in self._entries

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)


class AssetManager:
    """Loads logos and fonts for rendering, caching every result."""

    def __init__(self, config: EngineConfig | None = None, cache: AssetCache | None = None) -> None:
        """
        Initialize asset manager.

        Args:
            config: Engine configuration (default logo, fonts, failure policies).
            cache: Cache to use. Pass a shared instance to reuse loads across
                managers, or a fresh one to isolate them.
        """
        self.config = config or EngineConfig()
        self.cache = cache if cache is not None else AssetCache()

    # ========================================================================
    # Logos
    # ========================================================================

    def load_logo(
        self,
        source_kind: LogoSource | str = "file",
        locator: str | Path | None = None,
        size_hint: int | None = None,
        on_failure: FailurePolicy | None = None,
    ) -> LogoAsset:
        """
        Load a logo image.

        Vector logos are rasterized into a transparent size_hint x size_hint
        pixel box. A failed load is cached as a fallback asset and never
        retried while the cache lives.

        Args:
            source_kind: "file", "url" or "base64".
            locator: File path, URL or data URI. Defaults to the configured logo for files.
            size_hint: Pixel box for vector rasterization (default 400).
            on_failure: "fallback" returns the fallback asset, "raise" raises
                AssetLoadError. Defaults to config.logo_failure_policy.

        Returns:
            LogoAsset with raster data, or a fallback asset.

        Raises:
            AssetLoadError: If loading failed and the policy is "raise".
        """
        policy = on_failure or self.config.logo_failure_policy
        if locator is None and source_kind == "file":
            locator = self.config.logo_path
        locator_str = str(locator) if locator is not None else None
        size = size_hint or DEFAULT_SIZE_HINT

        key = ("logo", source_kind, locator_str, size)
        asset = self.cache.get_or_load(key, lambda: self._load_logo_uncached(source_kind, locator_str, size))

        if asset.fallback and policy == "raise":
            error_type = asset.error_type or AssetLoadError
            raise error_type(asset.error or "Logo load failed", locator=locator_str)
        return asset

    def _load_logo_uncached(self, source_kind: str, locator: str | None, size: int) -> LogoAsset:
        try:
            data = self._read_logo_bytes(source_kind, locator)
            return self._decode_logo(data, source_kind, locator, size)
        except AssetLoadError as e:
            logger.warning(f"Logo load failed ({source_kind}: {_short(locator)}): {e}")
            return self.fallback_logo(source_kind, locator, str(e), type(e))

    def _read_logo_bytes(self, source_kind: str, locator: str | None) -> bytes:
        if not locator:
            raise AssetLoadError(f"No locator given for {source_kind} logo")

        if source_kind == "file":
            path = Path(locator)
            try:
                return path.read_bytes()
            except OSError as e:
                raise AssetLoadError(f"Cannot read logo file {path}: {e}", locator=locator) from e

        if source_kind == "url":
            try:
                response = requests.get(locator, timeout=self.config.remote_timeout)
                response.raise_for_status()
            except requests.RequestException as e:
                raise RemoteAssetError(f"Cannot fetch logo from {locator}: {e}", locator=locator) from e
            return response.content

        if source_kind == "base64":
            if not locator.startswith("data:") or "," not in locator:
                raise AssetLoadError("Inline logo must be a data: URI", locator=_short(locator))
            header, payload = locator.split(",", 1)
            if ";base64" not in header:
                raise AssetLoadError("Inline logo must be base64 encoded", locator=_short(locator))
            try:
                return base64.b64decode(payload, validate=True)
            except (binascii.Error, ValueError) as e:
                raise AssetLoadError(f"Invalid base64 logo data: {e}", locator=_short(locator)) from e

        raise AssetLoadError(f"Unknown logo source '{source_kind}'", locator=locator)

    def _decode_logo(self, data: bytes, source_kind: str, locator: str | None, size: int) -> LogoAsset:
        image_type = detect_image_type(data)

        if image_type == "svg":
            png_data = rasterize_svg(data, size=size, density=self.config.svg_density)
            logger.info(f"Converted SVG logo to PNG ({size}x{size})")
            return LogoAsset(
                data=png_data,
                type="png",
                original_type="svg",
                converted=True,
                source=source_kind,
                locator=locator,
                width=size,
                height=size,
            )

        try:
            width, height = get_image_dimensions(data)
        except (OSError, Image.UnidentifiedImageError) as e:
            raise AssetLoadError(f"Corrupt {image_type} logo: {e}", locator=locator) from e

        return LogoAsset(
            data=data,
            type=image_type,
            original_type=image_type,
            source=source_kind,
            locator=locator,
            width=width,
            height=height,
        )

    def fallback_logo(
        self,
        source_kind: str = "file",
        locator: str | None = None,
        error: str | None = None,
        error_type: type[AssetLoadError] | None = None,
    ) -> LogoAsset:
        """Build the text-and-color asset drawn in place of a failed logo."""
        return LogoAsset(
            data=None,
            type="text",
            source=source_kind,
            locator=locator,
            fallback=True,
            text=self.config.logo_fallback_text,
            color=self.config.logo_fallback_color,
            error=error,
            error_type=error_type,
        )

    # ========================================================================
    # Fonts
    # ========================================================================

    def load_fonts(
        self,
        languages: list[str] | tuple[str, ...] = SUPPORTED_LANGUAGES,
        on_failure: FailurePolicy | None = None,
    ) -> dict[str, FontSet]:
        """
        Load the declared custom fonts for each language.

        Args:
            languages: Language keys ("english", "hebrew").
            on_failure: "fallback" drops broken variants, "raise" raises
                AssetLoadError. Defaults to config.font_failure_policy.

        Returns:
            Language → FontSet. Sets may be partial or empty.

        Raises:
            ValueError: If a language is not supported.
            AssetLoadError: If a variant fails and the policy is "raise".
        """
        policy = on_failure or self.config.font_failure_policy
        fonts: dict[str, FontSet] = {}

        for language in languages:
            if language not in SUPPORTED_LANGUAGES:
                raise ValueError(
                    f"Unsupported language: {language}. Expected one of: {', '.join(SUPPORTED_LANGUAGES)}"
                )
            font_set = self.cache.get_or_load(("fonts", language), lambda lang=language: self._load_language(lang))
            if font_set.failures and policy == "raise":
                raise AssetLoadError(f"{language} fonts failed to load: {'; '.join(font_set.failures)}")
            fonts[language] = font_set

        return fonts

    def _load_language(self, language: str) -> FontSet:
        files = {
            variant: path
            for variant in self.config.fonts.get(language, {})
            if (path := self.config.font_path(language, variant)) is not None
        }
        # Failures are kept on the set so each call can apply its own policy
        return load_language_fonts(language, files, on_failure="fallback")

    # ========================================================================
    # Cache
    # ========================================================================

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Asset cache cleared")

    def cache_stats(self) -> dict[str, Any]:
        keys = self.cache.keys()
        return {
            "entries": len(keys),
            "logos": sum(1 for key in keys if key[0] == "logo"),
            "fonts": sum(1 for key in keys if key[0] == "fonts"),
            "hits": self.cache.hits,
            "misses": self.cache.misses,
        }


def _short(locator: str | None, limit: int = 60) -> str:
    """Trim long locators (data URIs) for messages."""
    if locator is None:
        return "<none>"
    return locator if len(locator) <= limit else f"{locator[:limit]}..."
