from __future__ import annotations

import pytest

from badgekit.engine.repository import slug_from_name


def test_slug_sanitization() -> None:
    slug = slug_from_name("Badge / VIP: 2025!")
    assert slug == "badge-vip-2025"


def test_slug_never_escapes_out_dir() -> None:
    for name in ("../../etc/passwd", "..\\..\\boot.ini", "a/b/c"):
        slug = slug_from_name(name)
        assert "/" not in slug and "\\" not in slug and ".." not in slug


@pytest.mark.parametrize("name", ["", "!!!", "%%%"])
def test_slug_falls_back_to_hash(name: str) -> None:
    slug = slug_from_name(name)
    assert len(slug) == 12
