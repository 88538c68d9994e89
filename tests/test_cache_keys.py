"""Tests for cache key construction (poketerminal/cache/keys.py)."""

from __future__ import annotations

from poketerminal.cache.keys import (
    CARDS_PREFIX,
    SETS_PREFIX,
    build_key,
    card_key,
    key_prefix,
    set_key,
    sets_key,
)


class TestBuildKey:
    """Deterministic key construction."""

    def test_params_sorted_by_name(self) -> None:
        key = build_key("ppt:sets", {"pageSize": 100, "page": 1})
        assert key == "ppt:sets:page=1&pageSize=100"

    def test_insertion_order_is_irrelevant(self) -> None:
        a = build_key(CARDS_PREFIX, {"set": "sv04-paradox-rift", "limit": "24", "offset": "0"})
        b = build_key(CARDS_PREFIX, {"offset": "0", "set": "sv04-paradox-rift", "limit": "24"})
        assert a == b

    def test_none_values_are_dropped(self) -> None:
        key = build_key(CARDS_PREFIX, {"search": None, "limit": "24"})
        assert key == "ppt:cards:limit=24"

    def test_empty_params_give_bare_prefix(self) -> None:
        assert build_key("ppt:types") == "ppt:types"
        assert build_key("ppt:types", {}) == "ppt:types"
        assert build_key("ppt:types", {"q": None}) == "ppt:types"

    def test_code_point_ordering(self) -> None:
        """Upper-case names sort before lower-case ones."""
        key = build_key("p", {"b": 1, "A": 2, "a": 3})
        assert key == "p:A=2&a=3&b=1"

    def test_values_are_not_encoded(self) -> None:
        key = build_key(CARDS_PREFIX, {"search": "Pikachu VMAX"})
        assert key == "ppt:cards:search=Pikachu VMAX"

    def test_separator_in_value_collides(self) -> None:
        """Callers must keep "&" and "=" out of values; the key cannot tell them apart."""
        smuggled = build_key("p", {"a": "1&b=2"})
        assert smuggled == build_key("p", {"a": "1", "b": "2"})
        assert smuggled == "p:a=1&b=2"

    def test_colon_in_value_kept_verbatim(self) -> None:
        assert build_key("p", {"a": "x:y"}) == "p:a=x:y"
        assert key_prefix(build_key("p", {"a": "x:y"})) == "p"


class TestResourceKeys:

    def test_card_key(self) -> None:
        assert card_key("246723") == "ppt:card:246723"

    def test_set_key(self) -> None:
        assert set_key("sv04-paradox-rift") == "ppt:set:sv04-paradox-rift"

    def test_sets_key_matches_build_key(self) -> None:
        assert sets_key(1, 100) == build_key(SETS_PREFIX, {"page": 1, "pageSize": 100})

    def test_key_prefix(self) -> None:
        assert key_prefix("ppt:cards:limit=24") == "ppt"
        assert key_prefix("standalone") == "standalone"


def test_documented_example_in_either_order() -> None:
    expected = "cards:orderBy=-releaseDate&pageSize=10"
    assert build_key("cards", {"pageSize": 10, "orderBy": "-releaseDate"}) == expected
    assert build_key("cards", {"orderBy": "-releaseDate", "pageSize": 10}) == expected
