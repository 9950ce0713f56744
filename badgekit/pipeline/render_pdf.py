from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from reportlab.graphics import renderPDF
from reportlab.graphics.barcode import code128
from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing
from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ..engine.geometry import Box
from ..engine.pagination import PrintPlan
from ..engine.renderer import ResolvedBackground, ResolvedZone, render_background
from ..engine.schema import Template, ZoneType

logger = logging.getLogger(__name__)

# Zones are resolved in millimetres; reportlab draws in points.
PT = mm

FONT_FAMILIES: Dict[str, Tuple[str, str]] = {
    "arial": ("Helvetica", "Helvetica-Bold"),
    "helvetica": ("Helvetica", "Helvetica-Bold"),
    "arial black": ("Helvetica-Bold", "Helvetica-Bold"),
    "times": ("Times-Roman", "Times-Bold"),
    "times new roman": ("Times-Roman", "Times-Bold"),
    "georgia": ("Times-Roman", "Times-Bold"),
    "courier": ("Courier", "Courier-Bold"),
    "courier new": ("Courier", "Courier-Bold"),
}


def _hex(value: Optional[str], default=None):
    if not value or str(value).strip().lower() == "transparent":
        return default
    try:
        return colors.HexColor("#" + str(value).strip().lstrip("#"))
    except Exception:
        return default


def _grey(value: Optional[str]) -> Optional[str]:
    colour = _hex(value)
    if colour is None:
        return value
    level = round((0.299 * colour.red + 0.587 * colour.green + 0.114 * colour.blue) * 255)
    return "#{0:02X}{0:02X}{0:02X}".format(level)


def _greyscale_zone(zone: ResolvedZone) -> ResolvedZone:
    style = replace(
        zone.style,
        background=_grey(zone.style.background),
        color=_grey(zone.style.color),
        border_color=_grey(zone.style.border_color),
    )
    return replace(zone, style=style)


def _greyscale_background(background: ResolvedBackground) -> ResolvedBackground:
    return replace(
        background,
        color=_grey(background.color),
        start=_grey(background.start),
        end=_grey(background.end),
    )


def _font_name(family: str, bold: bool) -> str:
    regular, heavy = FONT_FAMILIES.get(str(family or "").strip().lower(), ("Helvetica", "Helvetica-Bold"))
    return heavy if bold else regular


def _fit_font(canv: canvas.Canvas, text: str, font_name: str, base_size: float, max_width: float) -> float:
    """Shrink the font until the text fits the zone width."""
    size = float(base_size)
    floor = max(2.0, base_size * 0.4)
    while size > floor:
        if canv.stringWidth(text, font_name, size) <= max_width:
            return size
        size -= 0.5
    return floor


def _placeholder_box(canv: canvas.Canvas, w: float, h: float) -> None:
    canv.setStrokeColor(colors.Color(0.82, 0.84, 0.86))
    canv.setFillColor(colors.Color(0.95, 0.96, 0.97))
    canv.setLineWidth(0.5)
    canv.rect(0, 0, w, h, stroke=1, fill=1)


def _draw_box(canv: canvas.Canvas, zone: ResolvedZone, w: float, h: float) -> None:
    style = zone.style
    fill = _hex(style.background)
    stroke = _hex(style.border_color) if style.border_width > 0 else None
    if fill is None and stroke is None:
        return
    if fill is not None:
        canv.setFillColor(fill)
    if stroke is not None:
        canv.setStrokeColor(stroke)
        canv.setLineWidth(style.border_width * PT)
    radius = min(style.border_radius * PT, w / 2, h / 2)
    canv.roundRect(0, 0, w, h, radius=radius, stroke=1 if stroke else 0, fill=1 if fill else 0)


def _draw_text(canv: canvas.Canvas, zone: ResolvedZone, w: float, h: float) -> None:
    style = zone.style
    text = " ".join(str(zone.content or "").split())
    if not text:
        return
    pad = style.padding * PT
    font = _font_name(style.font_family, style.is_bold)
    size = _fit_font(canv, text, font, style.font_size * PT, max(1.0, w - 2 * pad))
    canv.setFont(font, size)
    canv.setFillColor(_hex(style.color, colors.black))
    baseline = (h - size) / 2 + size * 0.22
    if style.text_align == "center":
        canv.drawCentredString(w / 2, baseline, text)
    elif style.text_align == "right":
        canv.drawRightString(w - pad, baseline, text)
    else:
        canv.drawString(pad, baseline, text)


def _draw_image(canv: canvas.Canvas, zone: ResolvedZone, w: float, h: float) -> None:
    if zone.is_placeholder:
        _placeholder_box(canv, w, h)
        return
    try:
        reader = ImageReader(zone.content)
        keep_ratio = zone.style.object_fit in {"contain", "scale-down"}
        canv.drawImage(reader, 0, 0, w, h, preserveAspectRatio=keep_ratio, anchor="c", mask="auto")
    except Exception as exc:
        logger.warning("Image for zone %s could not be loaded: %s", zone.zone_id, exc)
        _placeholder_box(canv, w, h)


def _draw_symbol(canv: canvas.Canvas, zone: ResolvedZone, w: float, h: float) -> None:
    if zone.is_placeholder:
        _placeholder_box(canv, w, h)
        return
    fg = _hex(zone.style.color, colors.black)
    try:
        if zone.type is ZoneType.QR:
            widget = QrCodeWidget(zone.content, barFillColor=fg)
            x0, y0, x1, y1 = widget.getBounds()
            side = min(w, h)
            drawing = Drawing(side, side, transform=[side / (x1 - x0), 0, 0, side / (y1 - y0), 0, 0])
            drawing.add(widget)
            renderPDF.draw(drawing, canv, (w - side) / 2, (h - side) / 2)
        else:
            barcode = code128.Code128(zone.content, barHeight=h * 0.8, humanReadable=False)
            bar_width = w / max(1.0, barcode.width) * barcode.barWidth
            barcode = code128.Code128(zone.content, barHeight=h * 0.8, barWidth=bar_width, humanReadable=False)
            canv.setFillColor(fg)
            barcode.drawOn(canv, (w - barcode.width) / 2, h * 0.1)
    except Exception as exc:
        logger.warning("Symbol for zone %s could not be encoded: %s", zone.zone_id, exc)
        _placeholder_box(canv, w, h)


def _draw_zone(canv: canvas.Canvas, zone: ResolvedZone, origin: Tuple[float, float], tile_h: float) -> None:
    box: Box = zone.pixel_box
    w, h = box.width * PT, box.height * PT
    # Template y runs downwards from the tile's top edge.
    x = origin[0] + box.x * PT
    y = origin[1] + tile_h - (box.y + box.height) * PT

    canv.saveState()
    canv.translate(x, y)
    if zone.style.rotation:
        canv.translate(w / 2, h / 2)
        canv.rotate(-zone.style.rotation)
        canv.translate(-w / 2, -h / 2)
    canv.setFillAlpha(zone.style.opacity)
    canv.setStrokeAlpha(zone.style.opacity)

    _draw_box(canv, zone, w, h)
    if zone.type is ZoneType.TEXT:
        _draw_text(canv, zone, w, h)
    elif zone.type is ZoneType.IMAGE:
        _draw_image(canv, zone, w, h)
    elif zone.type in (ZoneType.QR, ZoneType.BARCODE):
        _draw_symbol(canv, zone, w, h)
    canv.restoreState()


def _draw_background(canv: canvas.Canvas, background: ResolvedBackground, x: float, y: float, w: float, h: float) -> None:
    canv.saveState()
    clip = canv.beginPath()
    clip.rect(x, y, w, h)
    canv.clipPath(clip, stroke=0, fill=0)
    if background.kind == "gradient":
        start = _hex(background.start, colors.white)
        end = _hex(background.end, colors.white)
        if background.direction == "horizontal":
            canv.linearGradient(x, y, x + w, y, (start, end), extend=True)
        elif background.direction == "diagonal":
            canv.linearGradient(x, y + h, x + w, y, (start, end), extend=True)
        else:
            canv.linearGradient(x, y + h, x, y, (start, end), extend=True)
    elif background.kind == "image":
        canv.setFillColor(colors.white)
        canv.rect(x, y, w, h, stroke=0, fill=1)
        try:
            canv.setFillAlpha(background.opacity)
            canv.drawImage(ImageReader(background.uri), x, y, w, h, mask="auto")
        except Exception as exc:
            logger.warning("Background image could not be loaded: %s", exc)
    else:
        canv.setFillColor(_hex(background.color, colors.white))
        canv.rect(x, y, w, h, stroke=0, fill=1)
    canv.restoreState()


def _draw_cut_marks(canv: canvas.Canvas, x: float, y: float, w: float, h: float) -> None:
    canv.setStrokeColor(colors.Color(0.75, 0.75, 0.75))
    canv.setLineWidth(0.3)
    canv.rect(x, y, w, h, stroke=1, fill=0)


def render_sheets(
    template: Template,
    plan: PrintPlan,
    groups: List[Tuple[int, List[ResolvedZone]]],
    output_path: Path,
    context=None,
) -> Path:
    """Draw every copy of the print plan onto PDF sheets.

    ``groups`` must be resolved in millimetres at the plan's tile scale, which
    is what ``build_print_job`` produces with its default unit factor.
    """
    page_w, page_h = plan.page_size[0] * PT, plan.page_size[1] * PT
    tile_w, tile_h = plan.tile_size[0] * PT, plan.tile_size[1] * PT
    zones_by_copy = dict(groups)
    background = render_background(template, plan.tile_scale, context)
    if not plan.color:
        # Black and white print: colours become greys, images are left as they are.
        background = _greyscale_background(background)
        zones_by_copy = {
            copy_index: [_greyscale_zone(zone) for zone in zones]
            for copy_index, zones in zones_by_copy.items()
        }

    output_path.parent.mkdir(parents=True, exist_ok=True)
    canv = canvas.Canvas(str(output_path), pagesize=(page_w, page_h))
    canv.setTitle(template.name or template.id)

    for placements in plan.pages():
        for placement in placements:
            x = placement.x * PT
            y = page_h - placement.y * PT - tile_h
            _draw_background(canv, background, x, y, tile_w, tile_h)
            for zone in zones_by_copy.get(placement.copy_index, []):
                _draw_zone(canv, zone, (x, y), tile_h)
            if plan.format.is_sheet:
                _draw_cut_marks(canv, x, y, tile_w, tile_h)
        canv.showPage()

    canv.save()
    return output_path
