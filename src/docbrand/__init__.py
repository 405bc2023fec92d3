"""Template-based PDF composition and page-level access redaction."""

__version__ = "0.1.0"

# High-level Python API
from docbrand.api import compose_pdf, generate_placeholders, inspect_pdf, redact_pdf
from docbrand.config import EngineConfig, load_config
from docbrand.design.template import ElementKind, Template
from docbrand.errors import (
    AssetLoadError,
    CompositionCancelled,
    DocbrandError,
    NoFontAvailableError,
    PlaceholderMissingError,
    SourceDocumentError,
    TemplateStructureError,
)
from docbrand.render.assets import AssetCache, AssetManager
from docbrand.render.pdf import DocumentComposer
from docbrand.render.placeholders import DocumentFormat
from docbrand.render.redaction import PageOutcome, RedactionEngine, RedactionResult

__all__ = [
    "AssetCache",
    "AssetLoadError",
    "AssetManager",
    "CompositionCancelled",
    "DocbrandError",
    "DocumentComposer",
    "DocumentFormat",
    "ElementKind",
    "EngineConfig",
    "NoFontAvailableError",
    "PageOutcome",
    "PlaceholderMissingError",
    "RedactionEngine",
    "RedactionResult",
    "SourceDocumentError",
    "Template",
    "TemplateStructureError",
    "compose_pdf",
    "generate_placeholders",
    "inspect_pdf",
    "load_config",
    "redact_pdf",
]
