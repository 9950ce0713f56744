from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import replace
from functools import lru_cache
from typing import Dict, List

from slugify import slugify

from .. import config
from .schema import Template

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _raw_presets() -> Dict[str, dict]:
    presets = config.load_presets()
    logger.info("Loaded %d template presets from %s", len(presets), config.PRESET_PATH)
    return presets


def list_presets() -> List[str]:
    return sorted(_raw_presets())


def preset_dict(key: str) -> dict:
    presets = _raw_presets()
    if key not in presets:
        raise LookupError(f"Unknown preset: {key} (available: {', '.join(sorted(presets))})")
    return copy.deepcopy(presets[key])


def preset(key: str) -> Template:
    return Template.from_dict(preset_dict(key))


def _new_id(name: str) -> str:
    base = slugify(name) or "template"
    return f"{base}-{uuid.uuid4().hex[:6]}"


def blank_template(name: str, width: float = 105.0, height: float = 148.0, kind: str = "badge") -> Template:
    return Template(
        id=_new_id(name),
        name=name,
        width=float(width),
        height=float(height),
        kind=kind,
    )


def from_preset(key: str, name: str | None = None) -> Template:
    base = preset(key)
    title = name or base.name
    return replace(base, id=_new_id(title), name=title, version=1)


def duplicate_template(template: Template, name: str | None = None) -> Template:
    # Zone ids are kept so zone lists of the copy compare equal to the source.
    title = name or f"{template.name} (copy)"
    return replace(template, id=_new_id(title), name=title, version=1)
