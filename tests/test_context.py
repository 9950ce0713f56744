from __future__ import annotations

import pytest

from badgekit.engine.context import build_context, context_from_dict, sample_context
from badgekit.engine.resolver import resolve


def test_build_context_maps_upstream_records() -> None:
    context = build_context(
        event={"name": "Tech Summit", "venue": {"name": "Hall 1"}, "organizer": {"name": "Org"}},
        attendee={"first_name": "Marie", "last_name": "Curie", "company": "ESPCI"},
        security={"badge_number": "B-1"},
    )
    assert resolve("eventName", context) == "Tech Summit"
    assert resolve("venue.name", context) == "Hall 1"
    assert resolve("fullName", context) == "Marie Curie"
    assert resolve("attendee.company", context) == "ESPCI"
    assert resolve("qrCode", context).endswith("/B-1")
    assert resolve("barcodeFormat", context) == "code128"


def test_badge_id_feeds_security_codes() -> None:
    context = build_context(event={"name": "E"}, attendee={"badge_id": "B-42"})
    assert resolve("badgeNumber", context) == "B-42"
    assert resolve("barcode", context) == "B-42"


def test_context_is_read_only() -> None:
    context = sample_context()
    with pytest.raises(TypeError):
        context["fullName"] = "SOMEONE ELSE"  # type: ignore[index]
    with pytest.raises(TypeError):
        context["venue"]["name"] = "Elsewhere"  # type: ignore[index]


def test_empty_groups_are_dropped() -> None:
    context = build_context(event={"name": "E"})
    assert "venue" not in context
    assert resolve("venue", context, placeholder="VENUE") == "VENUE"


def test_context_from_dict_accepts_flat_records() -> None:
    context = context_from_dict({"fullName": "JEAN DUPONT", "seating": {"row": 4}})
    assert resolve("fullName", context) == "JEAN DUPONT"
    assert resolve("seating.row", context) == "4"


def test_context_from_dict_keeps_top_level_keys_next_to_groups() -> None:
    context = context_from_dict({"event": {"name": "Summit"}, "fullName": "Jean", "eventName": ""})
    assert resolve("eventName", context) == "Summit"
    assert resolve("fullName", context) == "Jean"


def test_sample_context_values() -> None:
    context = sample_context()
    assert resolve("fullName", context) == "JEAN DUPONT"
    assert resolve("eventName", context) == "Tech Summit 2025"
    assert resolve("seating.section", context) == "A"
