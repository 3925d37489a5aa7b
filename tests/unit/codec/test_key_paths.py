"""Unit tests for storage key construction."""

from __future__ import annotations

from codec.abbreviations import AbbreviationTable
from codec.key_paths import (
    child_key,
    join_keys_list,
    keys_list_key,
    map_key_key,
    map_value_key,
    set_item_key,
    split_keys_list,
    type_tag_key,
)


def test_child_key_concatenates_abbreviated_segment() -> None:
    """Field segments should be abbreviated and appended without separator."""
    table = AbbreviationTable({"inventory": "inv"})

    assert child_key("player1", "inventory", table) == "player1inv"
    assert child_key("player1", "name", table) == "player1name"


def test_child_key_accepts_sequence_indices() -> None:
    assert child_key("list", 3, AbbreviationTable()) == "list3"


def test_reserved_suffix_helpers() -> None:
    assert keys_list_key("r") == "rkeys"
    assert type_tag_key("r") == "rt"
    assert set_item_key("r", 2) == "ritem2"
    assert (map_key_key("r", 0), map_value_key("r", 0)) == ("rkey0", "rvalue0")


def test_keys_list_roundtrip_and_empty_list() -> None:
    """An empty keys list parses as a record without fields."""
    assert split_keys_list(join_keys_list(["t", "inv", "name"])) == ["t", "inv", "name"]
    assert split_keys_list("") == []
