from __future__ import annotations

from badgekit import config
from badgekit.engine.geometry import Box
from badgekit.engine.presets import preset
from badgekit.engine.renderer import RenderMode, render_background, render_template, render_zone
from badgekit.engine.schema import Template, Zone


def _zone(zone_type: str, content: dict, style: dict | None = None, zone_id: str = "z") -> Zone:
    return Zone.from_dict(
        {
            "id": zone_id,
            "type": zone_type,
            "name": zone_id,
            "position": {"x": 10, "y": 20, "width": 30, "height": 8},
            "content": content,
            "style": style or {},
        }
    )


def test_text_variable_resolves() -> None:
    resolved = render_zone(_zone("text", {"variable": "fullName"}), {"fullName": "JEAN DUPONT"}, 1.0)
    assert resolved.content == "JEAN DUPONT"
    assert resolved.content_kind == "text"
    assert resolved.is_placeholder is False


def test_text_falls_back_to_placeholder() -> None:
    resolved = render_zone(_zone("text", {"variable": "company", "placeholder": "N/A"}), {}, 1.0)
    assert resolved.content == "N/A"
    assert resolved.is_placeholder is True


def test_literal_text_is_interpolated() -> None:
    zone = _zone("text", {"text": "Hello {{firstName}} {{unknownVar}}"})
    assert render_zone(zone, {"firstName": "Marie"}, 1.0).content == "Hello Marie {{unknownVar}}"


def test_image_without_asset_uses_placeholder_glyph() -> None:
    missing = render_zone(_zone("image", {"image_url": "{{photoUrl}}"}), {}, 1.0)
    assert missing.content == config.IMAGE_PLACEHOLDER
    assert missing.is_placeholder is True
    found = render_zone(_zone("image", {"image_url": "{{photoUrl}}"}), {"photoUrl": "https://x/p.png"}, 1.0)
    assert found.content == "https://x/p.png"
    assert found.content_kind == "asset"


def test_symbol_zones_expose_data_value() -> None:
    qr = render_zone(_zone("qr", {"variable": "qrCode"}), {"qrCode": "https://verify/B-1"}, 1.0)
    assert (qr.content, qr.content_kind, qr.is_placeholder) == ("https://verify/B-1", "symbol", False)
    empty = render_zone(_zone("barcode", {"variable": "barcode"}), {}, 1.0)
    assert (empty.content, empty.is_placeholder) == ("", True)


def test_shape_has_no_content() -> None:
    shape = render_zone(_zone("shape", {"text": "ignored"}), {}, 1.0)
    assert (shape.content, shape.content_kind) == ("", "none")
    assert shape.style.background == "#E5E7EB"


def test_geometry_and_fonts_scale_with_factor() -> None:
    zone = _zone("text", {"text": "x"}, {"font_size": 14, "padding": 1.5, "border_radius": 2})
    resolved = render_zone(zone, {}, 2.0)
    assert resolved.pixel_box == Box(20, 40, 60, 16)
    assert resolved.style.font_size == 28
    assert resolved.style.padding == 3
    assert resolved.style.border_radius == 4


def test_type_defaults_and_style_normalisation() -> None:
    text = render_zone(_zone("text", {"text": "x"}, {"opacity": 3, "text_align": "middle"}), {}, 1.0)
    assert text.style.background == "transparent"
    assert text.style.text_align == "left"
    assert text.style.opacity == 1.0
    qr = render_zone(_zone("qr", {"text": "x"}), {}, 1.0)
    assert qr.style.background == "#FFFFFF"


def test_edit_mode_carries_interaction_flags() -> None:
    zone = _zone("text", {"text": "x"})
    edit = render_zone(zone, {}, 1.0, RenderMode.EDIT, selected_id="z", hovered_id="other")
    assert edit.selected is True
    assert edit.hovered is False
    preview = render_zone(zone, {}, 1.0, RenderMode.PREVIEW, selected_id="z")
    assert preview.selected is None
    assert "selected" not in preview.to_dict()
    assert edit.to_dict()["selected"] is True


def test_render_template_keeps_paint_order_and_is_pure() -> None:
    template = preset("corporate")
    context = {"fullName": "JEAN DUPONT"}
    first = render_template(template, context, 2.5)
    assert [zone.zone_id for zone in first] == [zone.id for zone in template.zones]
    assert first == render_template(template, context, 2.5)


def test_background_resolution() -> None:
    plain = Template(id="t", name="T", width=50, height=20)
    background = render_background(plain, 2.0)
    assert (background.kind, background.color, background.pixel_size) == ("solid", "#FFFFFF", (100.0, 40.0))
    gradient = render_background(preset("vip"), 1.0)
    assert gradient.kind == "gradient"
    assert gradient.direction == "diagonal"
