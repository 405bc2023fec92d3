#!/usr/bin/env python3
"""
Example: Preview With Restricted Pages

Builds a preview where only a few pages keep their content. Every other
page is swapped for the "preview not available" placeholder matching the
document's format.

Requirements:
- Generate placeholders once with `docbrand placeholders ./placeholders`
- Point placeholder_dir in docbrand.toml at that directory
"""

from docbrand import load_config, redact_pdf

config = load_config()

template = {
    "elements": {
        "watermark-text": [
            {
                "content": "PREVIEW",
                "position": {"x": 50, "y": 50},
                "style": {"fontSize": 72, "opacity": 15, "rotation": 45, "color": "#999999"},
            }
        ],
        "url": [{"position": {"x": 50, "y": 97}, "style": {"fontSize": 8}}],
    }
}

result = redact_pdf(
    "workbook.pdf",  # Replace with your PDF
    [1, 2, 5],
    template,
    {"filename": "workbook.pdf"},
    config=config,
)

for outcome in result.pages:
    print(f"  page {outcome.number}: {outcome.state} ({outcome.origin})")

with open("workbook-preview.pdf", "wb") as f:
    f.write(result.data)

print("✓ Saved to: workbook-preview.pdf")
