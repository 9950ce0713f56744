from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple

from .. import config
from .geometry import Box, to_pixels
from .resolver import interpolate, resolve
from .schema import (
    AssetContent,
    GradientBackground,
    ImageBackground,
    LiteralContent,
    SolidBackground,
    Template,
    VariableContent,
    Zone,
    ZoneType,
)
from .style import ResolvedStyle, resolve_style


class RenderMode(str, Enum):
    EDIT = "edit"
    PREVIEW = "preview"


@dataclass(frozen=True)
class ResolvedZone:
    zone_id: str
    type: ZoneType
    name: str
    pixel_box: Box
    content: str
    content_kind: str
    is_placeholder: bool
    style: ResolvedStyle
    locked: bool = False
    required: bool = False
    selected: Optional[bool] = None
    hovered: Optional[bool] = None

    def to_dict(self) -> dict:
        out = {
            "zone_id": self.zone_id,
            "type": self.type.value,
            "name": self.name,
            "pixel_box": self.pixel_box.to_dict(),
            "content": self.content,
            "content_kind": self.content_kind,
            "is_placeholder": self.is_placeholder,
            "style": self.style.to_dict(),
            "locked": self.locked,
            "required": self.required,
        }
        if self.selected is not None:
            out["selected"] = self.selected
            out["hovered"] = bool(self.hovered)
        return out


@dataclass(frozen=True)
class ResolvedBackground:
    kind: str
    color: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    direction: Optional[str] = None
    uri: Optional[str] = None
    opacity: float = 1.0
    pixel_size: Tuple[float, float] = (0.0, 0.0)

    def to_dict(self) -> dict:
        return {key: value for key, value in self.__dict__.items() if value is not None}


def _zone_value(zone: Zone, context: Any) -> str:
    content = zone.content
    if isinstance(content, VariableContent):
        return resolve(content.path, context)
    if isinstance(content, AssetContent):
        return interpolate(content.uri, context)
    if isinstance(content, LiteralContent):
        return interpolate(content.text, context)
    raise ValueError(f"Unsupported content for zone {zone.id}: {content!r}")


def _resolve_content(zone: Zone, context: Any) -> Tuple[str, str, bool]:
    """Return (content, content_kind, is_placeholder)."""
    if zone.type is ZoneType.SHAPE:
        return "", "none", False

    value = _zone_value(zone, context)

    if zone.type is ZoneType.TEXT:
        if not value and zone.placeholder:
            return zone.placeholder, "text", True
        return value, "text", False

    if zone.type is ZoneType.IMAGE:
        # Unresolved tokens mean the asset is not available.
        if not value or "{{" in value:
            return config.IMAGE_PLACEHOLDER, "asset", True
        return value, "asset", False

    # QR and barcode zones expose the data value; encoding is left to the backend.
    if not value or "{{" in value:
        return "", "symbol", True
    return value, "symbol", False


def render_zone(
    zone: Zone,
    context: Any,
    factor: float,
    mode: RenderMode = RenderMode.PREVIEW,
    selected_id: Optional[str] = None,
    hovered_id: Optional[str] = None,
) -> ResolvedZone:
    mode = RenderMode(mode)
    content, kind, is_placeholder = _resolve_content(zone, context)
    selected = hovered = None
    if mode is RenderMode.EDIT:
        selected = zone.id == selected_id
        hovered = zone.id == hovered_id
    return ResolvedZone(
        zone_id=zone.id,
        type=zone.type,
        name=zone.name,
        pixel_box=to_pixels(zone.position, factor),
        content=content,
        content_kind=kind,
        is_placeholder=is_placeholder,
        style=resolve_style(zone, factor),
        locked=zone.locked,
        required=zone.required,
        selected=selected,
        hovered=hovered,
    )


def render_template(
    template: Template,
    context: Any,
    factor: float,
    mode: RenderMode = RenderMode.PREVIEW,
    selected_id: Optional[str] = None,
    hovered_id: Optional[str] = None,
) -> List[ResolvedZone]:
    # List order is paint order.
    return [
        render_zone(zone, context, factor, mode, selected_id=selected_id, hovered_id=hovered_id)
        for zone in template.zones
    ]


def render_background(template: Template, factor: float, context: Any = None) -> ResolvedBackground:
    size = (template.width * factor, template.height * factor)
    background = template.background
    if isinstance(background, SolidBackground):
        return ResolvedBackground(kind="solid", color=background.color, pixel_size=size)
    if isinstance(background, GradientBackground):
        return ResolvedBackground(
            kind="gradient",
            start=background.start,
            end=background.end,
            direction=background.direction,
            pixel_size=size,
        )
    if isinstance(background, ImageBackground):
        uri = interpolate(background.uri, context or {})
        return ResolvedBackground(kind="image", uri=uri, opacity=background.opacity, pixel_size=size)
    return ResolvedBackground(kind="solid", color="#FFFFFF", pixel_size=size)
