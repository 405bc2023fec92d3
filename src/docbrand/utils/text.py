"""Text analysis, wrapping and measurement utilities."""

from __future__ import annotations

import re
from dataclasses import dataclass

from reportlab.pdfbase import pdfmetrics

from docbrand.types import Script

HEBREW_PATTERN = re.compile(r"[\u0590-\u05FF]")

# Loose email matcher, good enough to pick address tokens out of a sentence
EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}")


def contains_hebrew(text: str | None) -> bool:
    """
    Check if text contains any character in the Hebrew block (U+0590-U+05FF).

    Args:
        text: Text to analyze.

    Returns:
        True if at least one Hebrew character is present.
    """
    if not text:
        return False
    return HEBREW_PATTERN.search(text) is not None


def detect_script(text: str | None) -> Script:
    """Classify text by script. Hebrew wins for mixed content."""
    return "hebrew" if contains_hebrew(text) else "latin"


def is_email(value: str | None) -> bool:
    """Check if the whole value looks like an email address."""
    if not value:
        return False
    return EMAIL_PATTERN.fullmatch(value.strip()) is not None


def reverse_emails_for_rtl(text: str) -> str:
    """
    Reverse every email token embedded in right-to-left text.

    The PDF text primitive has no bidirectional algorithm, so a left-to-right
    token inside Hebrew flow has to be emitted back to front for its visual
    order to come out right. Text without Hebrew is returned unchanged.

    Args:
        text: Final, already substituted text.

    Returns:
        Text with each email token reversed when the text contains Hebrew.

    Examples:
        >>> reverse_emails_for_rtl("נוצר עבור a@b.com")
        "נוצר עבור moc.b@a"
        >>> reverse_emails_for_rtl("Created for a@b.com")
        "Created for a@b.com"
    """
    if not contains_hebrew(text):
        return text
    return EMAIL_PATTERN.sub(lambda match: match.group(0)[::-1], text)


# ============================================================================
# Measurement and wrapping
# ============================================================================

@dataclass(frozen=True)
class TextBlock:
    """
    Wrapped lines ready to draw as a centered block.

    Attributes:
        lines: Lines in top-to-bottom order.
        font_name: Registered ReportLab font name.
        font_size: Font size in points.
        line_height: Distance between baselines in points.
        width: Width of the widest line in points.
    """

    lines: tuple[str, ...]
    font_name: str
    font_size: float
    line_height: float
    width: float

    @property
    def height(self) -> float:
        return self.line_height * len(self.lines)


def string_width(text: str, font_name: str, font_size: float) -> float:
    """Measure text width in points with the font's metrics."""
    return pdfmetrics.stringWidth(text, font_name, font_size)


def wrap_paragraph(text: str, max_width: float, font_name: str, font_size: float) -> list[str]:
    """
    Greedy word wrap of a single paragraph.

    A word wider than max_width is kept whole on its own line.

    Args:
        text: Paragraph without line breaks.
        max_width: Maximum line width in points.
        font_name: Font used for measurement.
        font_size: Font size in points.

    Returns:
        Wrapped lines. An empty paragraph yields a single empty line.
    """
    words = text.split()
    if not words:
        return [""]

    lines: list[str] = []
    current_line = ""

    for word in words:
        test_line = f"{current_line} {word}" if current_line else word
        if string_width(test_line, font_name, font_size) <= max_width:
            current_line = test_line
        elif current_line:
            lines.append(current_line)
            current_line = word
        else:
            # Single word doesn't fit, force it on its own line
            lines.append(word)
            current_line = ""

    if current_line:
        lines.append(current_line)

    return lines


def wrap_text(text: str, max_width: float, font_name: str, font_size: float) -> list[str]:
    """
    Word wrap text, starting a new paragraph at each explicit line break.

    Args:
        text: Text to wrap, may contain "\\n".
        max_width: Maximum line width in points.
        font_name: Font used for measurement.
        font_size: Font size in points.

    Returns:
        Wrapped lines in order.
    """
    lines: list[str] = []
    for paragraph in text.split("\n"):
        lines.extend(wrap_paragraph(paragraph, max_width, font_name, font_size))
    return lines


def layout_text_block(
    text: str,
    max_width: float,
    font_name: str,
    font_size: float,
    line_height_ratio: float = 1.2,
) -> TextBlock:
    """
    Wrap text and measure the resulting block.

    Args:
        text: Text to lay out.
        max_width: Maximum line width in points.
        font_name: Registered font name.
        font_size: Font size in points.
        line_height_ratio: Baseline distance as a multiple of font size.

    Returns:
        TextBlock with the wrapped lines and block metrics.
    """
    lines = wrap_text(text, max_width, font_name, font_size)
    widest = max((string_width(line, font_name, font_size) for line in lines), default=0.0)
    return TextBlock(
        lines=tuple(lines),
        font_name=font_name,
        font_size=font_size,
        line_height=font_size * line_height_ratio,
        width=widest,
    )


def needs_wrapping(text: str, threshold: int = 50) -> bool:
    """Text is drawn as a block when longer than threshold or containing line breaks."""
    return len(text) > threshold or "\n" in text
