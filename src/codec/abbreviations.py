"""Bidirectional field-name abbreviation table."""

from __future__ import annotations

from typing import Mapping

from core.constants import KEYS_LIST_SEPARATOR, KEYS_LIST_SUFFIX, TYPE_FIELD_NAME, TYPE_TAG_CODE
from core.errors import PropGraphProfileError
from core.storage_profile import StorageProfile


class AbbreviationTable:
    """Static full-name to short-code mapping applied on save and load.

    The reserved ``type`` field always abbreviates to ``t`` so the type
    tag of every record lives at ``root + "t"``. Names without an entry
    pass through unchanged in both directions; ``t`` and ``keys`` are
    reserved codes, so record fields spelled that way need an entry.
    """

    def __init__(self, pairs: Mapping[str, str] | None = None) -> None:
        merged = {TYPE_FIELD_NAME: TYPE_TAG_CODE}
        for full_name, short_code in (pairs or {}).items():
            if full_name == TYPE_FIELD_NAME and short_code != TYPE_TAG_CODE:
                raise PropGraphProfileError(
                    f"Field '{TYPE_FIELD_NAME}' is reserved and always abbreviates to "
                    f"'{TYPE_TAG_CODE}'. Remove it from the abbreviation table."
                )
            merged[full_name] = short_code
        self._abbreviations = merged
        self._expansions = _invert(merged)

    @classmethod
    def from_profile(cls, profile: StorageProfile) -> "AbbreviationTable":
        return cls(profile.abbreviations)

    def abbreviate(self, name: str) -> str:
        return self._abbreviations.get(name, name)

    def expand(self, code: str) -> str:
        return self._expansions.get(code, code)

    def __len__(self) -> int:
        return len(self._abbreviations)


def _invert(abbreviations: Mapping[str, str]) -> dict[str, str]:
    """Build the expansion map, rejecting ambiguous tables.

    Raises:
        PropGraphProfileError: If two names share a code, a code contains
            the keys-list separator, or a code is the keys-list suffix.
    """
    expansions: dict[str, str] = {}
    for full_name, short_code in abbreviations.items():
        if not short_code or KEYS_LIST_SEPARATOR in short_code:
            raise PropGraphProfileError(
                f"Invalid abbreviation '{short_code}' for '{full_name}': codes must be "
                f"non-empty and must not contain '{KEYS_LIST_SEPARATOR}'."
            )
        if short_code in expansions:
            raise PropGraphProfileError(
                f"Abbreviation '{short_code}' is used for both '{expansions[short_code]}' "
                f"and '{full_name}'. Give each field a unique code."
            )
        if short_code == KEYS_LIST_SUFFIX:
            raise PropGraphProfileError(
                f"Abbreviation '{short_code}' for '{full_name}' is reserved for keys lists. "
                "Pick another code."
            )
        expansions[short_code] = full_name
    return expansions
