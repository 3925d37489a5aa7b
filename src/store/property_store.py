"""Property store contract and entry validation.

This module defines the flat key/value medium the codec writes into.
Stores accept only primitives and Vector3 values, each under a hard
per-entry size ceiling.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.constants import NUMERIC_ENTRY_BYTES, VECTOR_ENTRY_BYTES
from core.errors import PropGraphStoreWriteError
from core.types import EntryValue, Vector3


@runtime_checkable
class PropertyStore(Protocol):
    """Flat key/value medium addressed by string keys.

    Rejected writes should raise PropGraphStoreWriteError. The save engine
    also treats OSError and ValueError from set_property as a failure of
    that one entry; any other exception aborts the save.
    """

    def set_property(self, key: str, value: EntryValue) -> None:
        """Write one entry, raising PropGraphStoreWriteError on rejection."""
        ...

    def get_property(self, key: str) -> EntryValue | None:
        """Read one entry, returning None when the key was never written."""
        ...


def measure_entry_size(value: EntryValue) -> int:
    """Return the stored size of one entry value in bytes.

    Args:
        value: Entry value.

    Returns:
        UTF-8 length for strings, a fixed width for other values.
    """
    if isinstance(value, str):
        return len(value.encode("utf-8"))
    if isinstance(value, Vector3):
        return VECTOR_ENTRY_BYTES
    return NUMERIC_ENTRY_BYTES


def validate_entry(key: str, value: object, max_entry_bytes: int) -> EntryValue:
    """Check that one entry is storable.

    Args:
        key: Target storage key.
        value: Candidate entry value.
        max_entry_bytes: Per-entry size ceiling.

    Returns:
        The value, narrowed to an entry value.

    Raises:
        PropGraphStoreWriteError: If the key, value type or size is rejected.
    """
    if not isinstance(key, str) or not key:
        raise PropGraphStoreWriteError(f"Invalid storage key {key!r}: expected non-empty string.")
    if not isinstance(value, (bool, int, float, str, Vector3)):
        raise PropGraphStoreWriteError(
            f"Cannot store {type(value).__name__} at '{key}': "
            "entries must be primitives or Vector3."
        )
    entry_size = measure_entry_size(value)
    if entry_size > max_entry_bytes:
        raise PropGraphStoreWriteError(
            f"Entry at '{key}' is {entry_size} bytes, above the {max_entry_bytes} byte ceiling. "
            "Split the value into smaller fields."
        )
    return value
