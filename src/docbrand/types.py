"""Type aliases used across the docbrand package."""

from typing import Literal, Tuple

# Color types
RGBColor = Tuple[float, float, float]  # RGB color in 0-1 range

# Geometry
Point = float
NativePoint = Tuple[Point, Point]  # (x, y) in PDF points, origin bottom-left
PercentPoint = Tuple[float, float]  # (x%, y%) in editor space, origin top-left

# Asset options
LogoSource = Literal["file", "url", "base64"]
FailurePolicy = Literal["fallback", "raise"]

# Font options
Language = Literal["english", "hebrew"]
Script = Literal["latin", "hebrew"]
FontVariant = Literal["regular", "bold", "italic", "boldItalic"]

# Redaction page states
PageState = Literal["accessible", "placeholder", "error"]
