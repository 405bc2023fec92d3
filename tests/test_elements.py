"""Tests for element renderers, checked through recorded canvas calls."""

from dataclasses import replace
from unittest.mock import MagicMock

import pytest
from reportlab.pdfgen.canvas import Canvas

from docbrand.design.elements import RENDERERS, get_renderer
from docbrand.design.elements.logo import raster_size
from docbrand.design.template import ElementKind, Template
from docbrand.render.image import get_image_dimensions
from docbrand.utils.text import string_width

from conftest import SIMPLE_SVG

ANCHOR_X = 297.5  # 50% of 595
ANCHOR_Y = 421.0  # 50% of 842


def placed_element(group: str, element: dict):
    template = Template.from_payload({"elements": {group: [element]}})
    return next(template.iter_elements())


def render(group: str, element: dict, context) -> MagicMock:
    placed = placed_element(group, element)
    get_renderer(placed.kind).render(placed, context)
    return context.canvas


def calls_named(canvas: MagicMock, name: str) -> list:
    return [c for c in canvas.mock_calls if c[0] == name]


def fresh(context):
    return replace(context, canvas=MagicMock(spec=Canvas), warnings=[])


# ============================================================================
# Registry
# ============================================================================

def test_every_kind_has_a_renderer():
    assert set(RENDERERS) == set(ElementKind)


# ============================================================================
# Rotation snap
# ============================================================================

class TestRotationSnap:
    @pytest.mark.parametrize(
        "group,element",
        [
            ("text", {"content": "Hello"}),
            ("box", {"style": {"fillColor": "#eeeeee"}}),
            ("circle", {}),
            ("line", {}),
            ("dotted-line", {"style": {"length": 200}}),
            ("url", {"content": "https://ludora.app"}),
        ],
    )
    def test_tiny_rotation_draws_like_none(self, page_context, group, element):
        context = page_context()
        unrotated = render(group, {**element, "style": {**element.get("style", {}), "rotation": 0}}, fresh(context))
        nearly = render(group, {**element, "style": {**element.get("style", {}), "rotation": 0.001}}, fresh(context))
        assert unrotated.mock_calls == nearly.mock_calls
        assert not calls_named(nearly, "rotate")

    def test_logo_call_sequence(self, page_context):
        context = page_context()
        unrotated = render("logo", {"style": {"rotation": 0}}, fresh(context))
        nearly = render("logo", {"style": {"rotation": -0.005}}, fresh(context))
        assert [c[0] for c in unrotated.mock_calls] == [c[0] for c in nearly.mock_calls]
        assert calls_named(unrotated, "drawImage")[0][1][1:] == calls_named(nearly, "drawImage")[0][1][1:]


# ============================================================================
# Text
# ============================================================================

class TestText:
    def test_user_email_scenario(self, page_context):
        context = page_context({"user": "dana@example.com"})
        canvas = render("text", {"content": "Licensed to {{user.email}}"}, context)

        (_, args, _), = calls_named(canvas, "drawString")
        text = "Licensed to dana@example.com"
        assert args[2] == text
        assert args[0] == pytest.approx(ANCHOR_X - string_width(text, "Helvetica", 12) / 2)
        assert args[1] == pytest.approx(ANCHOR_Y - 6)
        canvas.setFont.assert_called_with("Helvetica", 12.0)

    def test_hebrew_email_reversed(self, page_context):
        context = page_context({"user": "dana@example.com"})
        canvas = render("user-info", {"style": {"italic": True}}, context)

        (_, args, _), = calls_named(canvas, "drawString")
        assert args[2] == "קובץ זה נוצר עבור moc.elpmaxe@anad"
        assert canvas.setFont.call_args[0][0] == "Helvetica"
        assert any("Italic disabled" in warning for warning in context.warnings)

    def test_latin_email_not_reversed(self, page_context):
        context = page_context({"user": {"email": "a@b.co", "name": "A"}})
        canvas = render("free-text", {"content": "For {{user.email}}"}, context)
        assert calls_named(canvas, "drawString")[0][1][2] == "For a@b.co"

    def test_blank_content_draws_nothing(self, page_context):
        canvas = render("text", {"content": "   "}, page_context())
        assert canvas.mock_calls == []

    def test_long_text_wraps_into_centered_lines(self, page_context):
        content = "This sentence is deliberately long enough to need wrapping on the page"
        canvas = render("text", {"content": content, "style": {"width": 150}}, page_context())

        draws = calls_named(canvas, "drawString")
        assert len(draws) > 1
        assert " ".join(c[1][2] for c in draws) == content
        baselines = [c[1][1] for c in draws]
        assert baselines == sorted(baselines, reverse=True)
        for _, args, _ in draws:
            assert args[0] + string_width(args[2], "Helvetica", 12) / 2 == pytest.approx(ANCHOR_X)

    def test_block_is_vertically_centered(self, page_context):
        canvas = render("text", {"content": "one\ntwo"}, page_context())
        first, second = (c[1][1] for c in calls_named(canvas, "drawString"))
        # Two lines of 14.4pt: centers at +7.2 and -7.2, baselines 6pt below
        assert first == pytest.approx(ANCHOR_Y + 7.2 - 6)
        assert second == pytest.approx(ANCHOR_Y - 7.2 - 6)

    def test_rotated_text_uses_local_frame(self, page_context):
        canvas = render("text", {"content": "Hi", "style": {"rotation": 90}}, page_context())
        canvas.rotate.assert_called_once_with(-90.0)
        canvas.drawString.assert_called_once_with(0, 0, "Hi")

    def test_shadow_drawn_first(self, page_context):
        shadow = {"enabled": True, "offsetX": 2, "offsetY": 3, "color": "#ff0000", "opacity": 40}
        canvas = render("text", {"content": "Shadowed", "style": {"shadow": shadow}}, page_context())

        shadow_draw, main_draw = calls_named(canvas, "drawString")
        assert shadow_draw[1][0] == pytest.approx(main_draw[1][0] + 2)
        assert shadow_draw[1][1] == pytest.approx(main_draw[1][1] - 3)
        alphas = [c[1][0] for c in calls_named(canvas, "setFillAlpha")]
        assert alphas == [0.4, 1.0]
        fills = [c[1] for c in calls_named(canvas, "setFillColorRGB")]
        assert fills == [(1.0, 0.0, 0.0), (0.0, 0.0, 0.0)]

    def test_zero_opacity_is_honoured(self, page_context):
        canvas = render("text", {"content": "ghost", "style": {"opacity": 0}}, page_context())
        canvas.setFillAlpha.assert_called_once_with(0.0)

    def test_page_variables(self, page_context):
        canvas = render("text", {"content": "Page {{page}} of {{totalPages}}"}, page_context())
        assert calls_named(canvas, "drawString")[0][1][2] == "Page 1 of 1"


class TestUrl:
    def test_link_annotation(self, page_context):
        canvas = render("url", {"content": "https://ludora.app/course"}, page_context())
        (_, args, kwargs), = calls_named(canvas, "linkURL")
        assert args[0] == "https://ludora.app/course"
        x1, y1, x2, y2 = args[1]
        assert x1 < ANCHOR_X < x2
        assert y1 < ANCHOR_Y < y2

    def test_falls_back_to_href_then_site(self, page_context):
        canvas = render("url", {"href": "https://x.example"}, page_context())
        assert calls_named(canvas, "drawString")[0][1][2] == "https://x.example"

        canvas = render("url", {}, fresh(page_context()))
        assert calls_named(canvas, "drawString")[0][1][2] == "https://ludora.app"

    def test_default_color(self, page_context):
        canvas = render("url", {"content": "https://ludora.app"}, page_context())
        assert canvas.setFillColorRGB.call_args[0] == pytest.approx((0.0, 0.4, 0.8))


# ============================================================================
# Shapes
# ============================================================================

class TestShapes:
    def test_box_unrotated(self, page_context):
        canvas = render("box", {"style": {"width": 80, "height": 40}}, page_context())
        canvas.rect.assert_called_once_with(ANCHOR_X - 40, ANCHOR_Y - 20, 80.0, 40.0, stroke=1, fill=0)
        canvas.setLineWidth.assert_called_with(2.0)

    def test_box_rotated_around_center(self, page_context):
        canvas = render("box", {"style": {"rotation": 30, "fillColor": "#ffffff"}}, page_context())
        canvas.translate.assert_called_once_with(ANCHOR_X, ANCHOR_Y)
        canvas.rotate.assert_called_once_with(-30.0)
        canvas.rect.assert_called_once_with(-50.0, -50.0, 100.0, 100.0, stroke=1, fill=1)

    def test_circle_diameter(self, page_context):
        canvas = render("circle", {"style": {"size": 60}}, page_context())
        canvas.circle.assert_called_once_with(ANCHOR_X, ANCHOR_Y, 30.0, stroke=1, fill=0)

    def test_circle_radius_treated_as_diameter(self, page_context):
        canvas = render("circle", {"style": {"radius": 40}}, page_context())
        assert canvas.circle.call_args[0][2] == 20.0

    def test_line(self, page_context):
        canvas = render("line", {}, page_context())
        canvas.line.assert_called_once_with(ANCHOR_X - 50, ANCHOR_Y, ANCHOR_X + 50, ANCHOR_Y)
        assert not calls_named(canvas, "setDash")

    def test_dotted_line_kind(self, page_context):
        canvas = render("dotted-line", {}, page_context())
        canvas.setDash.assert_called_once_with(3, 3)

    def test_line_with_dotted_style(self, page_context):
        canvas = render("line", {"style": {"dotted": True}}, page_context())
        canvas.setDash.assert_called_once_with(3, 3)

    def test_each_pass_restores_state(self, page_context):
        shadow = {"enabled": True, "offsetX": 1, "offsetY": 1}
        canvas = render("box", {"style": {"shadow": shadow}}, page_context())
        names = [c[0] for c in canvas.mock_calls]
        assert names.count("saveState") == names.count("restoreState") == 2
        assert names[0] == "saveState"
        assert names[-1] == "restoreState"


# ============================================================================
# Logo
# ============================================================================

class TestLogo:
    def test_png_scaled_to_size(self, page_context):
        canvas = render("logo", {"style": {"size": 80}}, page_context())
        (_, args, kwargs), = calls_named(canvas, "drawImage")
        # 40x20 test logo: width 80 keeps the 1:2 aspect
        assert args[1:] == (ANCHOR_X - 40, ANCHOR_Y - 20)
        assert kwargs["width"] == 80
        assert kwargs["height"] == 40
        assert kwargs["mask"] == "auto"

    def test_rotated_logo(self, page_context):
        canvas = render("logo", {"style": {"rotation": 45}}, page_context())
        canvas.rotate.assert_called_once_with(-45.0)
        assert calls_named(canvas, "drawImage")[0][1][1:] == (0.0, 0.0)

    def test_fallback_label(self, page_context, tmp_path):
        element = {"source": "file", "locator": str(tmp_path / "missing.png"), "style": {"size": 80}}
        canvas = render("logo", element, page_context())
        canvas.setFont.assert_called_once_with("Helvetica", 20.0)
        assert canvas.drawString.call_args[0][2] == "LOGO"
        canvas.setFillColorRGB.assert_called_once_with(0.2, 0.4, 0.8)
        assert not calls_named(canvas, "drawImage")

    def test_logo_shadow_uses_shadow_alpha(self, page_context):
        shadow = {"enabled": True, "offsetX": 4, "offsetY": 4, "opacity": 30}
        canvas = render("logo", {"style": {"shadow": shadow}}, page_context())
        assert len(calls_named(canvas, "drawImage")) == 2
        assert [c[1][0] for c in calls_named(canvas, "setFillAlpha")] == [0.3, 1.0]

    def test_svg_logo_rasterized_for_drawn_size(self, page_context, assets, tmp_path):
        path = tmp_path / "brand.svg"
        path.write_bytes(SIMPLE_SVG)

        render("logo", {"source": "file", "locator": str(path), "style": {"size": 120}}, page_context())

        # 120 pt at 300 DPI
        assert raster_size(120, 300) == 500
        asset = assets.load_logo("file", str(path), size_hint=500)
        assert get_image_dimensions(asset.data) == (500, 500)
        assert assets.cache_stats()["misses"] == 1
