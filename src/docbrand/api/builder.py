"""High-level API for programmatic composition and redaction."""

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from docbrand.config import EngineConfig
from docbrand.design.template import Template
from docbrand.render.assets import AssetManager
from docbrand.render.pdf import DocumentComposer, PdfSource, page_size, read_pdf
from docbrand.render.placeholders import DocumentFormat, PlaceholderLibrary, detect_format, write_placeholders
from docbrand.render.redaction import RedactionEngine, RedactionResult

logger = logging.getLogger(__name__)


def compose_pdf(
    source: PdfSource,
    template: Template | Mapping[str, Any],
    variables: Mapping[str, Any] | None = None,
    config: EngineConfig | None = None,
    assets: AssetManager | None = None,
) -> bytes:
    """
    Apply a template to every page of a PDF.

    Args:
        source: PDF bytes or path.
        template: Template payload ({"elements": {...}}) or Template.
        variables: Variables for content substitution (user, filename, ...).
        config: Engine configuration. If None, uses EngineConfig() defaults.
        assets: Asset manager to share a cache between calls.

    Returns:
        Composed PDF bytes.

    Raises:
        TemplateStructureError: If the template is malformed.
        SourceDocumentError: If the source cannot be read.

    Example:
        ```python
        from docbrand import compose_pdf

        template = {
            "elements": {
                "logo": [{"position": {"x": 90, "y": 8}, "style": {"size": 60}}],
                "user-info": [{"position": {"x": 50, "y": 95}, "style": {"fontSize": 9}}],
            }
        }
        data = compose_pdf("lesson.pdf", template, {"user": "dana@example.com"})
        ```
    """
    composer = DocumentComposer(config, assets=assets)
    return composer.compose(source, template, variables)


def redact_pdf(
    source: PdfSource,
    accessible_pages: Iterable[Any] | None,
    template: Template | Mapping[str, Any] | None = None,
    variables: Mapping[str, Any] | None = None,
    format_hint: DocumentFormat | str | None = None,
    config: EngineConfig | None = None,
    assets: AssetManager | None = None,
) -> RedactionResult:
    """
    Build a copy of a PDF where only the accessible pages show their content.

    Restricted pages are replaced by the placeholder document matching the
    source's format (see EngineConfig.placeholder_dir).

    Args:
        source: PDF bytes or path.
        accessible_pages: 1-based page numbers to keep. None keeps every page.
        template: Optional template applied to the kept pages.
        variables: Variables for content substitution.
        format_hint: Placeholder format ("portrait", "landscape", "slide")
            instead of detecting it from the first page.
        config: Engine configuration. If None, uses EngineConfig() defaults.
        assets: Asset manager to share a cache between calls.

    Returns:
        RedactionResult with the PDF bytes and per-page outcomes.

    Raises:
        PlaceholderMissingError: If the placeholder PDF for the format is unusable.

    Example:
        ```python
        from docbrand import redact_pdf

        result = redact_pdf("workbook.pdf", [2, 4])
        Path("preview.pdf").write_bytes(result.data)
        ```
    """
    composer = DocumentComposer(config, assets=assets)
    engine = RedactionEngine(composer, PlaceholderLibrary.from_config(composer.config))
    result = engine.process(source, accessible_pages, template, variables, format_hint)
    logger.info(
        f"Redacted document: {len(result.pages_in_state('accessible'))} accessible, "
        f"{len(result.pages_in_state('placeholder'))} placeholder, "
        f"{len(result.pages_in_state('error'))} error page(s)"
    )
    return result


def inspect_pdf(source: PdfSource) -> dict[str, Any]:
    """
    Describe a PDF's page geometry.

    Returns:
        Dict with page_count, page sizes in points and the detected format.
    """
    reader = read_pdf(source)
    sizes = [page_size(page) for page in reader.pages]
    document_format = detect_format(*sizes[0]) if sizes else None
    return {
        "page_count": len(sizes),
        "page_sizes": sizes,
        "format": document_format.value if document_format else None,
    }


def generate_placeholders(
    output_dir: Path,
    config: EngineConfig | None = None,
    logo_path: Path | None = None,
) -> list[Path]:
    """
    Write the placeholder PDF for every document format.

    Args:
        output_dir: Directory to write into.
        config: Engine configuration (site URL, default logo).
        logo_path: Logo to use instead of the configured one.

    Returns:
        Written file paths.
    """
    config = config or EngineConfig()
    if logo_path is not None:
        config = config.model_copy(update={"logo_path": logo_path})
    return write_placeholders(output_dir, config)
