"""Programmatic entry points."""

from docbrand.api.builder import compose_pdf, generate_placeholders, inspect_pdf, redact_pdf

__all__ = [
    "compose_pdf",
    "generate_placeholders",
    "inspect_pdf",
    "redact_pdf",
]
