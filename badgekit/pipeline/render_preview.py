from __future__ import annotations

from pathlib import Path

import fitz  # PyMuPDF


def _render_page_to_png(doc: fitz.Document, page_index: int, out_path: Path, min_px: int = 1200) -> None:
    page = doc.load_page(page_index)

    # Card-sized pages are tiny at 72dpi; zoom until the short side reaches min_px.
    rect = page.rect
    short_side = min(rect.width, rect.height)
    zoom = max(2.0, min_px / float(short_side))
    mat = fitz.Matrix(zoom, zoom)

    pix = page.get_pixmap(matrix=mat, alpha=False)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    pix.save(str(out_path))


def render_preview(pdf_path: Path, out_path: Path) -> Path:
    """Rasterise the first sheet of an export as the job's preview image."""
    with fitz.open(pdf_path) as doc:
        _render_page_to_png(doc, 0, out_path)
    return out_path
