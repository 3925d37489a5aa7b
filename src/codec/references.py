"""Reference tables for shared and cyclic instances.

Both tables live exactly as long as one save or load session, so
unrelated top-level calls never observe each other's identities.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
import random
from typing import Iterator

from core.constants import DEFAULT_POINTER_SUFFIX_LENGTH, POINTER_SUFFIX_ALPHABET
from core.errors import PropGraphCodecError, PropGraphCyclicGraphError


class PointerMinter:
    """Builds pointer keys from a save-site key plus a random suffix."""

    def __init__(
        self,
        rng: random.Random | None = None,
        suffix_length: int = DEFAULT_POINTER_SUFFIX_LENGTH,
    ) -> None:
        self._rng = rng or random.SystemRandom()
        self._suffix_length = suffix_length

    def mint(self, save_key: str) -> str:
        suffix = "".join(
            self._rng.choice(POINTER_SUFFIX_ALPHABET) for _ in range(self._suffix_length)
        )
        return f"{save_key}{suffix}"


class SaveReferenceTable:
    """Identity arena mapping saved instances to their pointers.

    Each instance gets a stable integer id on first encounter. Instances
    are pinned for the table lifetime so ``id()`` values are never reused.
    """

    def __init__(self, minter: PointerMinter | None = None) -> None:
        self._minter = minter if minter is not None else PointerMinter()
        self._arena_ids: dict[int, int] = {}
        self._pinned: list[object] = []
        self._pointers: dict[int, str] = {}
        self._minted: set[str] = set()
        self._active: set[int] = set()

    def arena_id(self, instance: object) -> int:
        """Return the stable arena id of an instance, assigning one if new."""
        object_id = id(instance)
        arena_id = self._arena_ids.get(object_id)
        if arena_id is None:
            arena_id = len(self._pinned)
            self._arena_ids[object_id] = arena_id
            self._pinned.append(instance)
        return arena_id

    def pointer_for(self, instance: object) -> str | None:
        return self._pointers.get(self.arena_id(instance))

    def mint(self, instance: object, save_key: str) -> str:
        """Mint and record a fresh pointer for an instance."""
        pointer = self._minter.mint(save_key)
        while pointer in self._minted:
            pointer = self._minter.mint(save_key)
        self._minted.add(pointer)
        self._pointers[self.arena_id(instance)] = pointer
        return pointer

    @property
    def pointer_count(self) -> int:
        return len(self._pointers)

    @contextmanager
    def visiting(self, instance: object, save_key: str) -> Iterator[None]:
        """Guard against inline cycles through instances not stored by reference.

        Raises:
            PropGraphCyclicGraphError: If the instance is already being saved.
        """
        arena_id = self.arena_id(instance)
        if arena_id in self._active:
            raise PropGraphCyclicGraphError(
                f"Cycle through {type(instance).__name__} at '{save_key}'. "
                "Store this type by reference to persist cyclic graphs."
            )
        self._active.add(arena_id)
        try:
            yield
        finally:
            self._active.discard(arena_id)


@dataclass
class LoadReferenceEntry:
    """Resolution state of one pointer."""

    resolved: bool = False
    value: object = None


class LoadReferenceTable:
    """Pointer to resolution-state table for one load session."""

    def __init__(self) -> None:
        self._entries: dict[str, LoadReferenceEntry] = {}

    def entry(self, pointer: str) -> LoadReferenceEntry | None:
        return self._entries.get(pointer)

    def begin(self, pointer: str) -> None:
        """Mark a pointer as being loaded."""
        if pointer in self._entries:
            raise PropGraphCodecError(f"Pointer '{pointer}' is already being loaded.")
        self._entries[pointer] = LoadReferenceEntry()

    def resolve(self, pointer: str, value: object) -> None:
        """Transition a pointer to resolved, exactly once.

        Raises:
            PropGraphCodecError: If the pointer was never begun or is resolved.
        """
        entry = self._entries.get(pointer)
        if entry is None or entry.resolved:
            raise PropGraphCodecError(
                f"Pointer '{pointer}' cannot be resolved: it is unknown or already resolved."
            )
        entry.resolved = True
        entry.value = value

    def is_resolved(self, pointer: str) -> bool:
        entry = self._entries.get(pointer)
        return entry is not None and entry.resolved

    def value_of(self, pointer: str) -> object:
        entry = self._entries.get(pointer)
        return entry.value if entry is not None else None

    def __len__(self) -> int:
        return len(self._entries)
