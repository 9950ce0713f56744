from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Union

from .geometry import scale_length
from .schema import Zone, ZoneType


COMMON_DEFAULTS: Dict[str, Any] = {
    "background": "transparent",
    "color": "#000000",
    "border_color": "#D1D5DB",
    "border_width": 0.0,
    "font_family": "Arial",
    "font_size": 12.0,
    "font_weight": "normal",
    "text_align": "left",
    "border_radius": 0.0,
    "padding": 0.0,
    "opacity": 1.0,
    "rotation": 0.0,
    "object_fit": "cover",
}

TYPE_DEFAULTS: Dict[ZoneType, Dict[str, Any]] = {
    ZoneType.TEXT: {"background": "transparent", "text_align": "left"},
    ZoneType.IMAGE: {"object_fit": "cover"},
    ZoneType.QR: {"background": "#FFFFFF", "color": "#000000", "object_fit": "contain"},
    ZoneType.BARCODE: {"background": "#FFFFFF", "color": "#000000", "object_fit": "fill"},
    ZoneType.SHAPE: {"background": "#E5E7EB"},
}

SCALED_FIELDS = ("font_size", "padding", "border_radius", "border_width")
TEXT_ALIGNS = {"left", "center", "right", "justify"}


@dataclass(frozen=True)
class ResolvedStyle:
    background: str
    color: str
    border_color: str
    border_width: float
    font_family: str
    font_size: float
    font_weight: Union[str, int]
    text_align: str
    border_radius: float
    padding: float
    opacity: float
    rotation: float
    object_fit: str

    @property
    def is_bold(self) -> bool:
        weight = self.font_weight
        if isinstance(weight, (int, float)):
            return weight >= 600
        return str(weight).lower() in {"bold", "bolder"}

    def to_dict(self) -> dict:
        return dict(self.__dict__)


def _number(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def resolve_style(zone: Zone, factor: float = 1.0) -> ResolvedStyle:
    values = dict(COMMON_DEFAULTS)
    values.update(TYPE_DEFAULTS.get(zone.type, {}))
    for key, value in zone.style.to_dict().items():
        if key in values and value not in (None, ""):
            values[key] = value

    for key in SCALED_FIELDS:
        values[key] = scale_length(_number(values[key], COMMON_DEFAULTS[key]), factor)
    values["opacity"] = min(1.0, max(0.0, _number(values["opacity"], 1.0)))
    values["rotation"] = _number(values["rotation"], 0.0)
    if values["text_align"] not in TEXT_ALIGNS:
        values["text_align"] = "left"
    return ResolvedStyle(**values)
