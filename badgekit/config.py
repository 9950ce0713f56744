from __future__ import annotations

from pathlib import Path
from typing import Dict, Tuple
import json


BASE_DIR = Path(__file__).resolve().parents[1]
OUT_DIR = BASE_DIR / "out"
DB_PATH = OUT_DIR / "badgekit.db"
PRESET_PATH = BASE_DIR / "assets" / "presets" / "templates.json"

# Editor viewport budget in pixels (width, height) and zoom bounds.
VIEWPORT_BUDGET: Tuple[float, float] = (500.0, 800.0)
ZOOM_MIN = 0.5
ZOOM_MAX = 2.0
ZOOM_STEP = 0.1

# Print formats: value -> default badges per sheet.
FORMAT_BADGES_PER_PAGE: Dict[str, int] = {
    "A4": 8,
    "Letter": 6,
    "85mm x 55mm": 1,
    "credit-card": 1,
}

# Sheet sizes in millimetres (width, height).
PAGE_SIZES_MM: Dict[str, Tuple[float, float]] = {
    "A4": (210.0, 297.0),
    "Letter": (215.9, 279.4),
    "85mm x 55mm": (85.0, 55.0),
    "credit-card": (86.0, 54.0),
}

DEFAULT_MARGINS_MM = (10.0, 10.0, 10.0, 10.0)
CARD_MARGINS_MM = (2.0, 2.0, 2.0, 2.0)
DEFAULT_SPACING_MM = 5.0

VERIFY_BASE_URL = "https://events.example.org/verify"

IMAGE_PLACEHOLDER = "placeholder:image"


def load_presets() -> dict:
    with PRESET_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def set_out_dir(path: Path) -> None:
    global OUT_DIR, DB_PATH
    OUT_DIR = path
    DB_PATH = OUT_DIR / "badgekit.db"
