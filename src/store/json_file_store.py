"""JSON file backed property store.

This module keeps the flat entry table in memory and persists it as
one JSON document on flush. Vector3 entries are written as x/y/z objects.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from core.config import PropGraphConfig
from core.constants import DEFAULT_MAX_ENTRY_BYTES, STORE_FILE_ENTRIES_KEY
from core.errors import PropGraphStoreError
from core.logging_config import get_logger
from core.types import EntryValue, Vector3
from store.property_store import validate_entry

_LOGGER = get_logger(__name__)
_VECTOR_FIELDS = ("x", "y", "z")


class JsonFilePropertyStore:
    """Property store persisted to a single JSON file."""

    def __init__(self, store_path: Path, max_entry_bytes: int = DEFAULT_MAX_ENTRY_BYTES) -> None:
        """Open a store, reading existing entries when the file exists.

        Args:
            store_path: JSON file location.
            max_entry_bytes: Per-entry size ceiling.

        Raises:
            PropGraphStoreError: If an existing file cannot be parsed.
        """
        self._store_path = store_path.expanduser().resolve()
        self._max_entry_bytes = max_entry_bytes
        self._entries: dict[str, EntryValue] = _read_entries(self._store_path)
        self._dirty = False

    @classmethod
    def from_config(cls, store_path: Path, config: PropGraphConfig) -> JsonFilePropertyStore:
        """Open a store at a path using the configured entry ceiling."""
        return cls(store_path, max_entry_bytes=config.max_entry_bytes)

    @property
    def path(self) -> Path:
        return self._store_path

    @property
    def dirty(self) -> bool:
        """Return whether entries changed since the last flush."""
        return self._dirty

    def set_property(self, key: str, value: EntryValue) -> None:
        """Write one validated entry to the in-memory table."""
        self._entries[key] = validate_entry(key, value, self._max_entry_bytes)
        self._dirty = True

    def get_property(self, key: str) -> EntryValue | None:
        """Read one entry or None."""
        return self._entries.get(key)

    def flush(self) -> None:
        """Persist all entries to the JSON file.

        Raises:
            PropGraphStoreError: If the file cannot be written.
        """
        payload = {
            STORE_FILE_ENTRIES_KEY: {
                key: _encode_entry(value) for key, value in self._entries.items()
            }
        }
        try:
            self._store_path.parent.mkdir(parents=True, exist_ok=True)
            self._store_path.write_text(
                json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8"
            )
        except OSError as error:
            raise PropGraphStoreError(
                f"Failed to write property store {self._store_path}: {error}."
            ) from error
        self._dirty = False
        _LOGGER.debug("store_flushed", path=str(self._store_path), entries=len(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


def _read_entries(store_path: Path) -> dict[str, EntryValue]:
    """Read entries from disk, returning an empty table for a new file."""
    if not store_path.exists():
        return {}
    try:
        payload = json.loads(store_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise PropGraphStoreError(
            f"Failed to parse property store at {store_path}: {error.msg}. "
            "Restore the file from backup or delete it to start empty."
        ) from error
    except OSError as error:
        raise PropGraphStoreError(
            f"Failed to read property store {store_path}: {error}."
        ) from error
    if not isinstance(payload, dict) or not isinstance(payload.get(STORE_FILE_ENTRIES_KEY), dict):
        raise PropGraphStoreError(
            f"Invalid property store at {store_path}: expected an object with "
            f"'{STORE_FILE_ENTRIES_KEY}' mapping."
        )
    return {
        str(key): _decode_entry(store_path, str(key), value)
        for key, value in payload[STORE_FILE_ENTRIES_KEY].items()
    }


def _encode_entry(value: EntryValue) -> Any:
    if isinstance(value, Vector3):
        return {"x": value.x, "y": value.y, "z": value.z}
    return value


def _decode_entry(store_path: Path, key: str, value: Any) -> EntryValue:
    if isinstance(value, dict):
        if sorted(value) != sorted(_VECTOR_FIELDS):
            raise PropGraphStoreError(
                f"Invalid structured entry '{key}' in {store_path}: expected x/y/z object."
            )
        return Vector3(x=value["x"], y=value["y"], z=value["z"])
    if isinstance(value, (bool, int, float, str)):
        return value
    raise PropGraphStoreError(
        f"Invalid entry '{key}' in {store_path}: unsupported {type(value).__name__} value."
    )
