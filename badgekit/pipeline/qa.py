from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Any, List, Mapping, Optional, Union

from ..engine.geometry import is_out_of_bounds
from ..engine.renderer import RenderMode, render_template
from ..engine.resolver import find_tokens, is_resolvable
from ..engine.schema import (
    AssetContent,
    GradientBackground,
    LiteralContent,
    SolidBackground,
    Template,
)

logger = logging.getLogger(__name__)

COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
COLOR_FIELDS = ("background", "color", "border_color")


def _is_color(value: Optional[str]) -> bool:
    if value is None:
        return True
    raw = str(value).strip()
    return raw.lower() == "transparent" or bool(COLOR_PATTERN.match(raw))


def duplicate_zone_ids(data: Mapping[str, Any]) -> List[str]:
    """Duplicate ids in raw template JSON, which ``Template`` itself refuses to load."""
    zones = data.get("zones")
    if zones is None and isinstance(data.get("schema"), Mapping):
        zones = data["schema"].get("zones")
    counts = Counter(str(zone.get("id")) for zone in zones or [] if isinstance(zone, Mapping))
    return sorted(zone_id for zone_id, count in counts.items() if count > 1)


def _background_errors(template: Template) -> List[str]:
    background = template.background
    colors: List[str] = []
    if isinstance(background, SolidBackground):
        colors = [background.color]
    elif isinstance(background, GradientBackground):
        colors = [background.start, background.end]
    return [f"Unsupported background colour: {value}" for value in colors if not _is_color(value)]


def check_template(template: Union[Template, Mapping[str, Any]], context: Any = None) -> List[str]:
    """Advisory checks; the caller decides whether any of them matter."""
    errors: List[str] = []
    if isinstance(template, Mapping):
        duplicates = duplicate_zone_ids(template)
        if duplicates:
            return [f"Duplicate zone id: {zone_id}" for zone_id in duplicates]
        template = Template.from_dict(dict(template))

    errors.extend(_background_errors(template))

    for zone in template.zones:
        if is_out_of_bounds(template, zone):
            errors.append(f"Zone {zone.id} extends past the canvas")
        for key in COLOR_FIELDS:
            value = getattr(zone.style, key)
            if not _is_color(value):
                errors.append(f"Zone {zone.id} has unsupported {key}: {value}")

    if context is not None:
        resolved = {rz.zone_id: rz for rz in render_template(template, context, 1.0, RenderMode.PREVIEW)}
        for zone in template.zones:
            rz = resolved[zone.id]
            if zone.required and (rz.is_placeholder or not rz.content):
                errors.append(f"Required zone {zone.id} has no value")
            if isinstance(zone.content, LiteralContent):
                text = zone.content.text
            elif isinstance(zone.content, AssetContent):
                text = zone.content.uri
            else:
                continue
            for token in find_tokens(text):
                if not is_resolvable(token, context):
                    errors.append(f"Zone {zone.id} references unknown variable {token}")

    if errors:
        logger.info("Template %s: %d advisory issue(s)", template.id or template.name, len(errors))
    return errors
