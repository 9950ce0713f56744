"""
Template units (millimetres) <-> viewport pixels.

Pointer drags are clamped to the canvas. Positions typed into the editor are
taken as given and may leave a zone partly off-canvas until it is dragged.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple, Union

from .. import config
from .schema import Position, Template, Zone


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_position(cls, position: Position) -> "Box":
        return cls(position.x, position.y, position.width, position.height)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    def offset(self, dx: float, dy: float) -> "Box":
        return replace(self, x=self.x + dx, y=self.y + dy)


@dataclass(frozen=True)
class Delta:
    dx: float
    dy: float


def clamp(value: float, low: float, high: float) -> float:
    # Lower bound wins when the zone is larger than the canvas.
    return max(low, min(value, high))


def clamp_zoom(zoom: float) -> float:
    return clamp(float(zoom), config.ZOOM_MIN, config.ZOOM_MAX)


def scale_factor(
    template: Template,
    viewport: Tuple[float, float] = config.VIEWPORT_BUDGET,
    zoom: float = 1.0,
) -> float:
    budget_w, budget_h = viewport
    return min(budget_w / template.width, budget_h / template.height) * clamp_zoom(zoom)


def _check_factor(factor: float) -> None:
    if not factor > 0:
        raise ValueError(f"Scale factor must be positive, got {factor}")


def scale_length(value: float, factor: float) -> float:
    return float(value) * factor


def to_pixels(box: Union[Box, Position], factor: float) -> Box:
    _check_factor(factor)
    return Box(box.x * factor, box.y * factor, box.width * factor, box.height * factor)


def to_units(value: Union[Box, Delta], factor: float) -> Union[Box, Delta]:
    _check_factor(factor)
    if isinstance(value, Delta):
        return Delta(value.dx / factor, value.dy / factor)
    return Box(value.x / factor, value.y / factor, value.width / factor, value.height / factor)


def drag_position(template: Template, zone: Zone, pointer_delta: Delta, factor: float) -> Position:
    delta = to_units(pointer_delta, factor)
    pos = zone.position
    x = clamp(pos.x + delta.dx, 0.0, template.width - pos.width)
    y = clamp(pos.y + delta.dy, 0.0, template.height - pos.height)
    return replace(pos, x=x, y=y)


def set_position(zone: Zone, **fields: float) -> Zone:
    unknown = set(fields) - {"x", "y", "width", "height"}
    if unknown:
        raise ValueError(f"Unknown position fields: {', '.join(sorted(unknown))}")
    values = {key: float(value) for key, value in fields.items() if value is not None}
    return replace(zone, position=replace(zone.position, **values))


def is_out_of_bounds(template: Template, zone: Zone) -> bool:
    pos = zone.position
    return (
        pos.x < 0
        or pos.y < 0
        or pos.x + pos.width > template.width
        or pos.y + pos.height > template.height
    )
