"""In-memory property store.

This module backs the codec with a plain dictionary. It enforces the
same entry rules as a real size-constrained medium.
"""

from __future__ import annotations

from typing import Iterator

from core.config import PropGraphConfig
from core.constants import DEFAULT_MAX_ENTRY_BYTES
from core.types import EntryValue
from store.property_store import validate_entry


class MemoryPropertyStore:
    """Dictionary-backed property store for development and testing."""

    def __init__(self, max_entry_bytes: int = DEFAULT_MAX_ENTRY_BYTES) -> None:
        self._max_entry_bytes = max_entry_bytes
        self._entries: dict[str, EntryValue] = {}

    @classmethod
    def from_config(cls, config: PropGraphConfig) -> MemoryPropertyStore:
        """Create a store using the configured entry ceiling."""
        return cls(max_entry_bytes=config.max_entry_bytes)

    def set_property(self, key: str, value: EntryValue) -> None:
        """Write one validated entry."""
        self._entries[key] = validate_entry(key, value, self._max_entry_bytes)

    def get_property(self, key: str) -> EntryValue | None:
        """Read one entry or None."""
        return self._entries.get(key)

    def keys(self) -> Iterator[str]:
        """Iterate stored keys in write order."""
        return iter(list(self._entries))

    def snapshot(self) -> dict[str, EntryValue]:
        """Return a shallow copy of all entries."""
        return dict(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
