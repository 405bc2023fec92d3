#!/usr/bin/env python3
"""
Simple Example: Brand Every Page

This is the simplest way to stamp a logo and a license line onto a PDF.
"""

from docbrand import compose_pdf

template = {
    "elements": {
        "logo": [{"position": {"x": 90, "y": 6}, "style": {"size": 50, "opacity": 80}}],
        "user-info": [{"position": {"x": 50, "y": 96}, "style": {"fontSize": 9, "color": "#555555"}}],
        "free-text": [{"content": "Page {{page}} of {{totalPages}}", "position": {"x": 8, "y": 96}, "style": {"fontSize": 9}}],
    }
}

data = compose_pdf(
    "lesson.pdf",  # Replace with your PDF
    template,
    {"user": {"email": "dana@example.com"}, "filename": "lesson.pdf"},
)

with open("lesson-branded.pdf", "wb") as f:
    f.write(data)

print("✓ Saved to: lesson-branded.pdf")
