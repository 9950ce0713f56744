"""
Interactive editing of a single template.

An ``EditorSession`` owns one ``Template`` value. Every change goes through
``apply(mutation)``, which swaps in a new immutable template and pushes the old
one on the undo stack. Saving is explicit.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, List, Optional, Tuple, Union

from .. import config
from .geometry import Delta, clamp_zoom, drag_position, scale_factor, set_position
from .renderer import RenderMode, ResolvedZone, render_template
from .schema import Background, Content, Template, Zone

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100


@dataclass(frozen=True)
class AddZone:
    zone: Zone
    index: Optional[int] = None


@dataclass(frozen=True)
class RemoveZone:
    zone_id: str


@dataclass(frozen=True)
class DragZone:
    zone_id: str
    dx_px: float
    dy_px: float


@dataclass(frozen=True)
class SetPosition:
    zone_id: str
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None


@dataclass(frozen=True)
class RestyleZone:
    zone_id: str
    changes: dict = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class SetContent:
    zone_id: str
    content: Content
    placeholder: Optional[str] = None


@dataclass(frozen=True)
class RenameZone:
    zone_id: str
    name: str


@dataclass(frozen=True)
class SetBackground:
    background: Optional[Background]


Mutation = Union[AddZone, RemoveZone, DragZone, SetPosition, RestyleZone, SetContent, RenameZone, SetBackground]


class EditorSession:
    def __init__(
        self,
        template: Template,
        viewport: Tuple[float, float] = config.VIEWPORT_BUDGET,
        zoom: float = 1.0,
    ) -> None:
        self.template = template
        self.viewport = viewport
        self.zoom = clamp_zoom(zoom)
        self.selected_id: Optional[str] = None
        self.hovered_id: Optional[str] = None
        self.dirty = False
        self._undo: List[Template] = []
        self._redo: List[Template] = []

    # -------------------- view --------------------

    @property
    def factor(self) -> float:
        return scale_factor(self.template, self.viewport, self.zoom)

    def zoom_in(self) -> float:
        self.zoom = clamp_zoom(round(self.zoom + config.ZOOM_STEP, 2))
        return self.zoom

    def zoom_out(self) -> float:
        self.zoom = clamp_zoom(round(self.zoom - config.ZOOM_STEP, 2))
        return self.zoom

    def select(self, zone_id: Optional[str]) -> None:
        if zone_id is not None:
            self.template.zone(zone_id)
        self.selected_id = zone_id

    def hover(self, zone_id: Optional[str]) -> None:
        self.hovered_id = zone_id

    def render(self, context: Any) -> List[ResolvedZone]:
        return render_template(
            self.template,
            context,
            self.factor,
            RenderMode.EDIT,
            selected_id=self.selected_id,
            hovered_id=self.hovered_id,
        )

    def preview(self, context: Any) -> List[ResolvedZone]:
        return render_template(self.template, context, self.factor, RenderMode.PREVIEW)

    # -------------------- mutation --------------------

    def apply(self, mutation: Mutation) -> Template:
        updated = self._reduce(self.template, mutation)
        if updated == self.template:
            return self.template
        self._undo.append(self.template)
        del self._undo[:-HISTORY_LIMIT]
        self._redo.clear()
        self.template = updated
        self.dirty = True
        if self.selected_id is not None and not any(z.id == self.selected_id for z in updated.zones):
            self.selected_id = None
        return updated

    def _reduce(self, template: Template, mutation: Mutation) -> Template:
        if isinstance(mutation, AddZone):
            zones = list(template.zones)
            index = len(zones) if mutation.index is None else mutation.index
            zones.insert(index, mutation.zone)
            return template.with_zones(zones)

        if isinstance(mutation, RemoveZone):
            template.zone(mutation.zone_id)
            return template.with_zones(z for z in template.zones if z.id != mutation.zone_id)

        if isinstance(mutation, DragZone):
            zone = template.zone(mutation.zone_id)
            if zone.locked:
                logger.info("Zone %s is locked, drag ignored", zone.id)
                return template
            position = drag_position(template, zone, Delta(mutation.dx_px, mutation.dy_px), self.factor)
            if position == zone.position:
                return template
            return template.replace_zone(replace(zone, position=position))

        if isinstance(mutation, SetPosition):
            zone = template.zone(mutation.zone_id)
            moved = set_position(
                zone, x=mutation.x, y=mutation.y, width=mutation.width, height=mutation.height
            )
            return template.replace_zone(moved)

        if isinstance(mutation, RestyleZone):
            zone = template.zone(mutation.zone_id)
            return template.replace_zone(replace(zone, style=zone.style.merged(mutation.changes)))

        if isinstance(mutation, SetContent):
            zone = template.zone(mutation.zone_id)
            return template.replace_zone(
                replace(zone, content=mutation.content, placeholder=mutation.placeholder)
            )

        if isinstance(mutation, RenameZone):
            zone = template.zone(mutation.zone_id)
            return template.replace_zone(replace(zone, name=mutation.name))

        if isinstance(mutation, SetBackground):
            return replace(template, background=mutation.background)

        raise TypeError(f"Unknown mutation: {mutation!r}")

    # -------------------- history --------------------

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def undo(self) -> Template:
        if self._undo:
            self._redo.append(self.template)
            self.template = self._undo.pop()
            self.dirty = True
        return self.template

    def redo(self) -> Template:
        if self._redo:
            self._undo.append(self.template)
            self.template = self._redo.pop()
            self.dirty = True
        return self.template

    def save(self, save_fn: Callable[[Template], Template]) -> Template:
        saved = save_fn(self.template)
        self.template = saved
        self.dirty = False
        return saved
