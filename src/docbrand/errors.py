"""Exception hierarchy for document composition and redaction."""


class DocbrandError(Exception):
    """Base class for all docbrand errors."""


class TemplateStructureError(DocbrandError, ValueError):
    """Template payload is malformed (legacy layout, unknown kind, bad position)."""


class SourceDocumentError(DocbrandError):
    """Source PDF could not be read."""


class AssetLoadError(DocbrandError):
    """A logo or font could not be loaded."""

    def __init__(self, message: str, locator: str | None = None) -> None:
        super().__init__(message)
        self.locator = locator


class UnsupportedImageFormatError(AssetLoadError):
    """Image bytes match none of the known signatures."""


class SvgConversionError(AssetLoadError):
    """SVG data could not be rasterized."""


class RemoteAssetError(AssetLoadError):
    """Remote asset could not be fetched."""


class NoFontAvailableError(DocbrandError):
    """Neither a custom nor a standard font family can render the text."""


class PlaceholderMissingError(DocbrandError):
    """Placeholder document for a format is absent or unreadable."""

    def __init__(self, message: str, format_name: str | None = None) -> None:
        super().__init__(message)
        self.format_name = format_name


class CompositionCancelled(DocbrandError):
    """Caller asked to stop between pages."""
