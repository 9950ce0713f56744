from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from badgekit.pipeline.render_preview import render_preview


class DummyRect:
    width = 595.0
    height = 842.0


class DummyPixmap:
    def save(self, path: str) -> None:
        Path(path).write_text("preview", encoding="utf-8")


class DummyPage:
    rect = DummyRect()

    def __init__(self) -> None:
        self.matrix = None

    def get_pixmap(self, matrix=None, alpha=True) -> DummyPixmap:  # noqa: ARG002 - signature matches fitz
        self.matrix = matrix
        return DummyPixmap()


class DummyDoc:
    def __init__(self) -> None:
        self.page_count = 2
        self.closed = False
        self.loaded: list[int] = []
        self.page = DummyPage()

    def __enter__(self) -> "DummyDoc":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001 - test helper
        self.closed = True

    def load_page(self, index: int) -> DummyPage:
        self.loaded.append(index)
        return self.page


def test_render_preview_uses_first_page_and_closes_document(monkeypatch) -> None:
    doc = DummyDoc()

    def fake_open(path: str) -> DummyDoc:  # noqa: ARG001 - test helper
        return doc

    with tempfile.TemporaryDirectory() as temp_dir:
        monkeypatch.setattr("badgekit.pipeline.render_preview.fitz.open", fake_open)
        out_path = Path(temp_dir) / "job-1" / "preview.png"
        preview = render_preview(Path("sheets.pdf"), out_path)
        assert doc.closed is True
        assert doc.loaded == [0]
        assert preview == out_path
        assert preview.exists()
        # The short side is scaled up to 1200px.
        assert doc.page.matrix.a == pytest.approx(1200 / 595)
