from __future__ import annotations

from badgekit.engine.context import freeze
from badgekit.engine.resolver import find_tokens, interpolate, is_resolvable, lookup, resolve, stringify


def test_resolve_top_level_variable() -> None:
    assert resolve("fullName", {"fullName": "JEAN DUPONT"}) == "JEAN DUPONT"


def test_resolve_missing_uses_placeholder() -> None:
    assert resolve("company", {}, placeholder="N/A") == "N/A"
    assert resolve("company", {}) == ""


def test_resolve_never_raises_on_odd_contexts() -> None:
    for context in ({}, None, [], "text", {"does": "string"}, {"does": {"not": None}}):
        assert resolve("does.not.exist", context) == ""


def test_resolve_nested_path_and_record_fallback() -> None:
    context = {"venue": {"name": "Palais", "city": "Paris"}, "seating": {"row": 3}}
    assert resolve("venue.city", context) == "Paris"
    assert resolve("venue", context) == "Palais"
    assert resolve("seating", context) == ""


def test_resolve_empty_string_counts_as_missing() -> None:
    assert resolve("company", {"company": ""}, placeholder="N/A") == "N/A"


def test_resolve_is_idempotent() -> None:
    context = freeze({"event": {"name": "Tech Summit"}})
    first = resolve("event.name", context)
    assert first == resolve("event.name", context) == "Tech Summit"


def test_stringify_values() -> None:
    assert stringify(True) == "true"
    assert stringify(12.0) == "12"
    assert stringify(12.5) == "12.5"
    assert stringify(["VIP", "", "Lounge"]) == "VIP, Lounge"
    assert stringify({"city": "Paris"}) == ""


def test_interpolate_leaves_unknown_tokens() -> None:
    text = interpolate("Hello {{firstName}} {{unknownVar}}", {"firstName": "Marie"})
    assert text == "Hello Marie {{unknownVar}}"


def test_interpolate_dotted_tokens_with_spaces() -> None:
    context = {"seating": {"section": "A", "row": 3, "seat": 12}}
    assert interpolate("{{ seating.section }}-{{seating.row}}-{{seating.seat}}", context) == "A-3-12"


def test_find_tokens_and_resolvable() -> None:
    assert find_tokens("{{a}} and {{b.c}} but not {{ }}") == ["a", "b.c"]
    assert is_resolvable("b.c", {"b": {"c": 0}})
    assert not is_resolvable("b.d", {"b": {"c": 0}})
    assert not is_resolvable("b", {"b": None})
    assert lookup("b.c", {"b": {"c": 0}}) == 0
