"""
Template schema: a printable document described as a canvas plus an ordered
list of positioned zones.

Everything here is an immutable dataclass. Editing produces new values through
``dataclasses.replace``, which keeps rendering a pure function of its inputs and
makes editor snapshots free. ``from_dict``/``to_dict`` keep the stored JSON field
names and nesting, so ``Template.from_dict(t.to_dict()) == t``.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple, Union


class ZoneType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    QR = "qr"
    BARCODE = "barcode"
    SHAPE = "shape"

    @classmethod
    def parse(cls, value: str) -> "ZoneType":
        raw = str(value or "").strip().lower()
        raw = TYPE_ALIASES.get(raw, raw)
        try:
            return cls(raw)
        except ValueError:
            raise ValueError(f"Unsupported zone type: {value!r}") from None


# Older ticket/badge editors used these names.
TYPE_ALIASES: Dict[str, str] = {
    "qrcode": "qr",
    "rectangle": "shape",
    "circle": "shape",
    "line": "shape",
}


@dataclass(frozen=True)
class Position:
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_dict(cls, data: Any) -> "Position":
        if not isinstance(data, dict):
            raise ValueError("Zone position must be an object with x, y, width, height")
        try:
            return cls(
                x=float(data["x"]),
                y=float(data["y"]),
                width=float(data["width"]),
                height=float(data["height"]),
            )
        except KeyError as exc:
            raise ValueError(f"Zone position missing field: {exc.args[0]}") from None

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


# -------------------- Content --------------------

@dataclass(frozen=True)
class LiteralContent:
    text: str

    def to_dict(self) -> dict:
        return {"text": self.text}


@dataclass(frozen=True)
class VariableContent:
    path: str

    def to_dict(self) -> dict:
        return {"variable": self.path}


@dataclass(frozen=True)
class AssetContent:
    uri: str

    def to_dict(self) -> dict:
        return {"image_url": self.uri}


Content = Union[LiteralContent, VariableContent, AssetContent]


def parse_content(data: Any) -> Tuple[Content, Optional[str]]:
    """Return the active content mode and the zone placeholder.

    A stored dict may carry several keys; ``variable`` wins over ``image_url``,
    which wins over ``text``.
    """
    if isinstance(data, str):
        return LiteralContent(data), None
    if not isinstance(data, dict):
        return LiteralContent(""), None
    placeholder = data.get("placeholder")
    if data.get("variable"):
        return VariableContent(str(data["variable"]).strip()), placeholder
    if data.get("image_url"):
        return AssetContent(str(data["image_url"])), placeholder
    return LiteralContent(str(data.get("text") or "")), placeholder


# -------------------- Style --------------------

@dataclass(frozen=True)
class ZoneStyle:
    background: Optional[str] = None
    color: Optional[str] = None
    border_color: Optional[str] = None
    border_width: Optional[float] = None
    font_family: Optional[str] = None
    font_size: Optional[float] = None
    font_weight: Optional[Union[str, int]] = None
    text_align: Optional[str] = None
    border_radius: Optional[float] = None
    padding: Optional[float] = None
    opacity: Optional[float] = None
    rotation: Optional[float] = None
    object_fit: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=True, hash=False)

    @classmethod
    def from_dict(cls, data: Any) -> "ZoneStyle":
        data = dict(data) if isinstance(data, dict) else {}
        known = {f.name for f in fields(cls) if f.name != "extra"}
        values = {key: data.pop(key) for key in list(data) if key in known}
        return cls(**values, extra=data)

    def to_dict(self) -> dict:
        out = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "extra" and getattr(self, f.name) is not None
        }
        out.update(self.extra)
        return out

    def merged(self, changes: dict) -> "ZoneStyle":
        """Apply a partial style update; ``None`` clears a field."""
        current = self.to_dict()
        for key, value in changes.items():
            if value is None:
                current.pop(key, None)
            else:
                current[key] = value
        return ZoneStyle.from_dict(current)


# -------------------- Background --------------------

@dataclass(frozen=True)
class SolidBackground:
    color: str

    def to_dict(self) -> dict:
        return {"color": self.color}


@dataclass(frozen=True)
class GradientBackground:
    start: str
    end: str
    direction: str = "vertical"

    def to_dict(self) -> dict:
        return {"gradient": {"start": self.start, "end": self.end, "direction": self.direction}}


@dataclass(frozen=True)
class ImageBackground:
    uri: str
    opacity: float = 1.0

    def to_dict(self) -> dict:
        return {"image": self.uri, "opacity": self.opacity}


Background = Union[SolidBackground, GradientBackground, ImageBackground]

GRADIENT_DIRECTIONS = {"horizontal", "vertical", "diagonal"}


def parse_background(data: Optional[dict]) -> Optional[Background]:
    if not data:
        return None
    if data.get("color"):
        return SolidBackground(str(data["color"]))
    gradient = data.get("gradient")
    if isinstance(gradient, dict) and gradient.get("start") and gradient.get("end"):
        direction = str(gradient.get("direction") or "vertical")
        if direction not in GRADIENT_DIRECTIONS:
            direction = "vertical"
        return GradientBackground(str(gradient["start"]), str(gradient["end"]), direction)
    if data.get("image"):
        opacity = data.get("opacity")
        return ImageBackground(str(data["image"]), float(1.0 if opacity is None else opacity))
    return None


# -------------------- Zone / Template --------------------

ZONE_KEYS = {"id", "type", "name", "position", "content", "style", "locked", "required"}


@dataclass(frozen=True)
class Zone:
    id: str
    type: ZoneType
    name: str
    position: Position
    content: Content = LiteralContent("")
    placeholder: Optional[str] = None
    style: ZoneStyle = ZoneStyle()
    locked: bool = False
    required: bool = False
    extra: Dict[str, Any] = field(default_factory=dict, compare=True, hash=False)

    @classmethod
    def from_dict(cls, data: dict) -> "Zone":
        if not isinstance(data, dict):
            raise ValueError("Zone must be an object")
        zone_id = str(data.get("id") or "").strip()
        if not zone_id:
            raise ValueError("Zone id is required")
        if "position" not in data:
            raise ValueError(f"Zone {zone_id!r} has no position")
        content, placeholder = parse_content(data.get("content"))
        return cls(
            id=zone_id,
            type=ZoneType.parse(data.get("type", "")),
            name=str(data.get("name") or zone_id),
            position=Position.from_dict(data["position"]),
            content=content,
            placeholder=placeholder,
            style=ZoneStyle.from_dict(data.get("style")),
            locked=bool(data.get("locked", False)),
            required=bool(data.get("required", False)),
            extra={key: value for key, value in data.items() if key not in ZONE_KEYS},
        )

    def to_dict(self) -> dict:
        content = self.content.to_dict()
        if self.placeholder is not None:
            content["placeholder"] = self.placeholder
        out = {
            "id": self.id,
            "type": self.type.value,
            "name": self.name,
            "position": self.position.to_dict(),
            "content": content,
            "style": self.style.to_dict(),
            "locked": self.locked,
            "required": self.required,
        }
        out.update(self.extra)
        return out


TEMPLATE_KEYS = {"id", "name", "kind", "version", "width", "height", "background", "zones"}


@dataclass(frozen=True)
class Template:
    id: str
    name: str
    width: float
    height: float
    zones: Tuple[Zone, ...] = ()
    background: Optional[Background] = None
    kind: str = "badge"
    version: int = 1
    extra: Dict[str, Any] = field(default_factory=dict, compare=True, hash=False)

    def __post_init__(self) -> None:
        if not (self.width > 0 and self.height > 0):
            raise ValueError(f"Template size must be positive, got {self.width}x{self.height}")
        seen = set()
        for zone in self.zones:
            if zone.id in seen:
                raise ValueError(f"Duplicate zone id: {zone.id}")
            seen.add(zone.id)

    @classmethod
    def from_dict(cls, data: dict) -> "Template":
        if not isinstance(data, dict):
            raise ValueError("Template must be an object")
        # Badge templates from the console nest size under schema.layout.
        schema = data.get("schema") if isinstance(data.get("schema"), dict) else {}
        layout = schema.get("layout") if isinstance(schema.get("layout"), dict) else {}
        width = data.get("width", layout.get("width"))
        height = data.get("height", layout.get("height"))
        if width is None or height is None:
            raise ValueError("Template width and height are required")
        zones = data.get("zones", schema.get("zones", []))
        background = data.get("background", schema.get("background"))
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            width=float(width),
            height=float(height),
            zones=tuple(Zone.from_dict(zone) for zone in zones or []),
            background=parse_background(background),
            kind=str(data.get("kind") or "badge"),
            version=int(data.get("version") or 1),
            extra={key: value for key, value in data.items() if key not in TEMPLATE_KEYS | {"schema"}},
        )

    def to_dict(self) -> dict:
        out = {
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "version": self.version,
            "width": self.width,
            "height": self.height,
            "background": self.background.to_dict() if self.background else None,
            "zones": [zone.to_dict() for zone in self.zones],
        }
        out.update(self.extra)
        return out

    def zone(self, zone_id: str) -> Zone:
        for zone in self.zones:
            if zone.id == zone_id:
                return zone
        raise LookupError(f"Zone not found: {zone_id}")

    def index_of(self, zone_id: str) -> int:
        for index, zone in enumerate(self.zones):
            if zone.id == zone_id:
                return index
        raise LookupError(f"Zone not found: {zone_id}")

    def replace_zone(self, zone: Zone) -> "Template":
        index = self.index_of(zone.id)
        zones = list(self.zones)
        zones[index] = zone
        return replace(self, zones=tuple(zones))

    def with_zones(self, zones: Iterable[Zone]) -> "Template":
        return replace(self, zones=tuple(zones))
