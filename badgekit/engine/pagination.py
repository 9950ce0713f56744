"""
Print pagination: how many copies of one template go on a sheet, how many
sheets a job needs, and where each copy lands.

``badges_per_page`` comes from the format table unless the caller sets it, and
``page_count = ceil(copies / badges_per_page)``. Template and sheet sizes only
decide the row/column arrangement and a shrink factor for tiles that would not
fit; they never change the page count.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, List, Optional, Tuple

from .. import config
from .renderer import RenderMode, ResolvedZone, render_template
from .schema import Template

logger = logging.getLogger(__name__)


class PageFormat(str, Enum):
    A4 = "A4"
    LETTER = "Letter"
    BADGE = "85mm x 55mm"
    CARD = "credit-card"

    @classmethod
    def parse(cls, value: Any) -> "PageFormat":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip()
        for member in cls:
            if raw == member.value or raw.upper() == member.name:
                return member
        aliases = {
            "large-sheet-a": cls.A4,
            "large-sheet-b": cls.LETTER,
            "single-badge": cls.BADGE,
            "card": cls.CARD,
        }
        if raw.lower() in aliases:
            return aliases[raw.lower()]
        raise ValueError(f"Unsupported page format: {value!r}")

    @property
    def is_sheet(self) -> bool:
        return self in (PageFormat.A4, PageFormat.LETTER)


class Quality(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Margins:
    top: float = 10.0
    right: float = 10.0
    bottom: float = 10.0
    left: float = 10.0

    @classmethod
    def for_format(cls, page_format: PageFormat) -> "Margins":
        values = config.DEFAULT_MARGINS_MM if page_format.is_sheet else config.CARD_MARGINS_MM
        return cls(*values)

    def to_dict(self) -> dict:
        return {"top": self.top, "right": self.right, "bottom": self.bottom, "left": self.left}


@dataclass(frozen=True)
class PrintOptions:
    format: PageFormat = PageFormat.A4
    quality: Quality = Quality.HIGH
    copies: int = 1
    color: bool = True
    duplex: bool = False
    margins: Optional[Margins] = None
    badges_per_page: Optional[int] = None
    spacing: float = config.DEFAULT_SPACING_MM

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "PrintOptions":
        data = data or {}
        page_format = PageFormat.parse(data.get("format", PageFormat.A4))
        margins = data.get("margins")
        per_page = data.get("badges_per_page")
        if per_page is None:
            per_page = data.get("badgesPerPage")
        return cls(
            format=page_format,
            quality=Quality(str(data.get("quality", "high")).lower()),
            copies=int(data.get("copies", 1)),
            color=bool(data.get("color", True)),
            duplex=bool(data.get("duplex", False)),
            margins=Margins(**margins) if isinstance(margins, dict) else None,
            badges_per_page=int(per_page) if per_page is not None else None,
            spacing=float(data.get("spacing", config.DEFAULT_SPACING_MM)),
        )

    def to_dict(self) -> dict:
        return {
            "format": self.format.value,
            "quality": self.quality.value,
            "copies": self.copies,
            "color": self.color,
            "duplex": self.duplex,
            "margins": self.margins.to_dict() if self.margins else None,
            "badges_per_page": self.badges_per_page,
            "spacing": self.spacing,
        }


@dataclass(frozen=True)
class Grid:
    rows: int
    columns: int

    @property
    def capacity(self) -> int:
        return self.rows * self.columns


@dataclass(frozen=True)
class Placement:
    copy_index: int
    page_index: int
    slot: int
    x: float
    y: float


@dataclass(frozen=True)
class PrintPlan:
    format: PageFormat
    page_size: Tuple[float, float]
    margins: Margins
    badges_per_page: int
    page_count: int
    copies: int
    grid: Grid
    tile_scale: float
    tile_size: Tuple[float, float]
    per_copy_offsets: List[Placement] = field(default_factory=list)
    color: bool = True

    def placements_on(self, page_index: int) -> List[Placement]:
        return [p for p in self.per_copy_offsets if p.page_index == page_index]

    def pages(self) -> List[List[Placement]]:
        """Placements bucketed by page, one list per page in order."""
        buckets: List[List[Placement]] = [[] for _ in range(self.page_count)]
        for placement in self.per_copy_offsets:
            buckets[placement.page_index].append(placement)
        return buckets

    def to_dict(self) -> dict:
        return {
            "format": self.format.value,
            "page_size": list(self.page_size),
            "margins": self.margins.to_dict(),
            "badges_per_page": self.badges_per_page,
            "page_count": self.page_count,
            "copies": self.copies,
            "grid": {"rows": self.grid.rows, "columns": self.grid.columns},
            "tile_scale": self.tile_scale,
            "tile_size": list(self.tile_size),
            "per_copy_offsets": [p.__dict__ for p in self.per_copy_offsets],
            "color": self.color,
        }


def default_badges_per_page(page_format: PageFormat) -> int:
    return config.FORMAT_BADGES_PER_PAGE[PageFormat.parse(page_format).value]


def normalize_options(options: PrintOptions) -> PrintOptions:
    copies = options.copies
    if copies < 1:
        logger.warning("copies=%s is invalid, using 1", copies)
        copies = 1
    per_page = options.badges_per_page
    if per_page is None:
        per_page = default_badges_per_page(options.format)
    elif per_page < 1:
        logger.warning("badges_per_page=%s is invalid, using 1", per_page)
        per_page = 1
    margins = options.margins or Margins.for_format(options.format)
    return replace(options, copies=copies, badges_per_page=per_page, margins=margins)


def _fit_scale(grid: Grid, tile: Tuple[float, float], area: Tuple[float, float], spacing: float) -> float:
    # Spacing between tiles is fixed; only the tiles shrink.
    tile_w, tile_h = tile
    free_w = area[0] - (grid.columns - 1) * spacing
    free_h = area[1] - (grid.rows - 1) * spacing
    if free_w <= 0 or free_h <= 0:
        return 0.0
    return min(1.0, free_w / (grid.columns * tile_w), free_h / (grid.rows * tile_h))


def grid_for(
    badges_per_page: int,
    tile: Tuple[float, float],
    area: Tuple[float, float],
    spacing: float = 0.0,
) -> Tuple[Grid, float]:
    """Pick the rows x columns arrangement that shrinks tiles the least.

    Ties go to the arrangement with fewer empty slots, then fewer columns.
    """
    best: Optional[Tuple[float, int, int, Grid]] = None
    for columns in range(1, badges_per_page + 1):
        rows = math.ceil(badges_per_page / columns)
        grid = Grid(rows=rows, columns=columns)
        scale = _fit_scale(grid, tile, area, spacing)
        key = (scale, -(grid.capacity - badges_per_page), -columns, grid)
        if best is None or key[:3] > best[:3]:
            best = key
    return best[3], best[0]


def plan(template: Template, options: PrintOptions) -> PrintPlan:
    opts = normalize_options(options)
    per_page = int(opts.badges_per_page)
    margins = opts.margins
    page_w, page_h = config.PAGE_SIZES_MM[opts.format.value]
    area = (page_w - margins.left - margins.right, page_h - margins.top - margins.bottom)
    if area[0] <= 0 or area[1] <= 0:
        raise ValueError(f"Margins leave no printable area on {opts.format.value}")
    spacing = opts.spacing
    grid, scale = grid_for(per_page, (template.width, template.height), area, spacing)
    if scale <= 0:
        logger.warning("Spacing %.1fmm does not fit %s tiles per page, using 0", spacing, per_page)
        spacing = 0.0
        grid, scale = grid_for(per_page, (template.width, template.height), area, spacing)
    tile_w, tile_h = template.width * scale, template.height * scale

    placements: List[Placement] = []
    for copy_index in range(opts.copies):
        page_index, slot = divmod(copy_index, per_page)
        row, column = divmod(slot, grid.columns)
        placements.append(
            Placement(
                copy_index=copy_index,
                page_index=page_index,
                slot=slot,
                x=margins.left + column * (tile_w + spacing),
                y=margins.top + row * (tile_h + spacing),
            )
        )

    page_count = math.ceil(opts.copies / per_page)
    logger.info(
        "Planned %s copies of %s on %s %s page(s), %s per page",
        opts.copies,
        template.id or template.name,
        page_count,
        opts.format.value,
        per_page,
    )
    return PrintPlan(
        format=opts.format,
        page_size=(page_w, page_h),
        margins=margins,
        badges_per_page=per_page,
        page_count=page_count,
        copies=opts.copies,
        grid=grid,
        tile_scale=scale,
        tile_size=(tile_w, tile_h),
        per_copy_offsets=placements,
        color=opts.color,
    )


def build_print_job(
    template: Template,
    context: Any,
    options: PrintOptions,
    unit_factor: float = 1.0,
) -> Tuple[PrintPlan, List[Tuple[int, List[ResolvedZone]]]]:
    """Plan the job and resolve every copy for the export backend.

    Zones are resolved at ``tile_scale * unit_factor``; with the default
    ``unit_factor`` pixel boxes are in millimetres relative to the tile origin.
    """
    print_plan = plan(template, options)
    factor = print_plan.tile_scale * unit_factor
    zones = render_template(template, context, factor, RenderMode.PREVIEW)
    groups = [(placement.copy_index, list(zones)) for placement in print_plan.per_copy_offsets]
    return print_plan, groups
