from __future__ import annotations

import tempfile
from pathlib import Path

import fitz  # PyMuPDF
from reportlab.pdfgen import canvas

from badgekit.engine.context import sample_context
from badgekit.engine.pagination import PageFormat, PrintOptions, build_print_job
from badgekit.engine.presets import preset
from badgekit.engine.schema import SolidBackground, Template, Zone
from badgekit.pipeline.render_pdf import _fit_font, _font_name, _grey, _hex, render_sheets


def _render(template: Template, options: PrintOptions, out_dir: str, context=None) -> tuple[Path, int]:
    context = context if context is not None else sample_context()
    plan, groups = build_print_job(template, context, options)
    path = render_sheets(template, plan, groups, Path(out_dir) / "sheets.pdf", context=context)
    return path, plan.page_count


def test_sheets_have_one_pdf_page_per_planned_page() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        path, page_count = _render(preset("corporate"), PrintOptions(format=PageFormat.A4, copies=10), temp_dir)
        with fitz.open(path) as doc:
            assert doc.page_count == page_count == 2
            text = doc.load_page(0).get_text()
        assert "JEAN DUPONT" in text


def test_card_format_page_size() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        path, page_count = _render(preset("concert"), PrintOptions(format=PageFormat.CARD, copies=3), temp_dir)
        with fitz.open(path) as doc:
            assert doc.page_count == page_count == 3
            rect = doc.load_page(0).rect
        assert round(rect.width / 72 * 25.4) == 86
        assert round(rect.height / 72 * 25.4) == 54


def test_bad_symbols_and_images_do_not_fail_the_sheet() -> None:
    zones = [
        {
            "id": "photo",
            "type": "image",
            "name": "Photo",
            "position": {"x": 2, "y": 2, "width": 20, "height": 20},
            "content": {"image_url": "/nonexistent/photo.png"},
        },
        {
            "id": "code",
            "type": "barcode",
            "name": "Code",
            "position": {"x": 2, "y": 30, "width": 40, "height": 10},
            "content": {"text": "naïve ✓ not code128"},
        },
        {
            "id": "title",
            "type": "text",
            "name": "Title",
            "position": {"x": 2, "y": 45, "width": 40, "height": 8},
            "content": {"text": "Rotated"},
            "style": {"rotation": 90, "opacity": 0.5, "text_align": "right"},
        },
    ]
    template = Template(
        id="odd",
        name="Odd",
        width=50,
        height=60,
        zones=tuple(Zone.from_dict(zone) for zone in zones),
    )
    with tempfile.TemporaryDirectory() as temp_dir:
        path, _ = _render(template, PrintOptions(format=PageFormat.LETTER, copies=1), temp_dir, context={})
        with fitz.open(path) as doc:
            assert doc.page_count == 1


def test_colour_and_font_helpers() -> None:
    assert _hex("transparent") is None
    assert _hex("not-a-colour") is None
    assert _hex("#FF0000").red == 1
    assert _font_name("Arial", True) == "Helvetica-Bold"
    assert _font_name("Unknown Sans", False) == "Helvetica"


def test_fit_font_shrinks_to_width() -> None:
    with tempfile.TemporaryDirectory() as temp_dir:
        canv = canvas.Canvas(str(Path(temp_dir) / "fit.pdf"))
        assert _fit_font(canv, "Jo", "Helvetica", 40, 200) == 40
        size = _fit_font(canv, "JEAN DUPONT", "Helvetica-Bold", 40, 150)
        assert size < 40
        assert canv.stringWidth("JEAN DUPONT", "Helvetica-Bold", size) <= 150
        # Text that never fits stops at the floor size.
        assert _fit_font(canv, "x" * 200, "Helvetica", 40, 60) == 16


def test_black_and_white_print_greys_the_background() -> None:
    assert _grey("#FF0000") == "#4C4C4C"
    assert _grey("transparent") == "transparent"
    template = Template(id="red", name="Red", width=80, height=50, background=SolidBackground("#FF0000"))
    with tempfile.TemporaryDirectory() as temp_dir:
        options = PrintOptions(format=PageFormat.CARD, copies=1, color=False)
        path, _ = _render(template, options, temp_dir, context={})
        with fitz.open(path) as doc:
            page = doc.load_page(0)
            pix = page.get_pixmap()
            red, green, blue = pix.pixel(pix.width // 2, pix.height // 2)[:3]
        assert red == green == blue
        assert red < 200
