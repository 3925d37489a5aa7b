"""Storage key construction.

Keys are plain concatenations of a root key and abbreviated field
segments. No separator is inserted, so abbreviation tables must keep
concatenated paths unambiguous.
"""

from __future__ import annotations

from typing import Iterable

from core.constants import (
    KEYS_LIST_SEPARATOR,
    KEYS_LIST_SUFFIX,
    MAP_KEY_PREFIX,
    MAP_VALUE_PREFIX,
    SET_ITEM_PREFIX,
    TYPE_TAG_CODE,
)
from codec.abbreviations import AbbreviationTable


def child_key(parent_key: str, field_name: str | int, abbreviations: AbbreviationTable) -> str:
    """Build the key of one field below a parent key.

    Args:
        parent_key: Key of the owning record or sequence.
        field_name: Field name, or sequence index.
        abbreviations: Table used to shorten the field segment.

    Returns:
        Concatenated storage key.
    """
    return f"{parent_key}{abbreviations.abbreviate(str(field_name))}"


def keys_list_key(root_key: str) -> str:
    return f"{root_key}{KEYS_LIST_SUFFIX}"


def type_tag_key(root_key: str) -> str:
    return f"{root_key}{TYPE_TAG_CODE}"


def set_item_key(root_key: str, index: int) -> str:
    return f"{root_key}{SET_ITEM_PREFIX}{index}"


def map_key_key(root_key: str, index: int) -> str:
    return f"{root_key}{MAP_KEY_PREFIX}{index}"


def map_value_key(root_key: str, index: int) -> str:
    return f"{root_key}{MAP_VALUE_PREFIX}{index}"


def join_keys_list(codes: Iterable[str]) -> str:
    """Serialize abbreviated field codes into one keys-list entry."""
    return KEYS_LIST_SEPARATOR.join(codes)


def split_keys_list(raw_keys_list: str) -> list[str]:
    """Parse a keys-list entry; an empty entry means a record without fields."""
    if not raw_keys_list:
        return []
    return raw_keys_list.split(KEYS_LIST_SEPARATOR)
