"""Load engine.

This module reconstructs object graphs from property store entries. It
never writes to the store. Pointers reached again while their target is
still loading yield placeholders, which the completion sweep replaces
once the target resolves.
"""

from __future__ import annotations

from typing import AbstractSet, Callable

from core.constants import (
    LENGTH_FIELD_NAME,
    POINTER_FIELD_NAME,
    SIZE_FIELD_NAME,
    TYPE_FIELD_NAME,
)
from core.errors import PropGraphMalformedStateError
from core.logging_config import get_logger
from core.types import ContainerKind, ReferencePlaceholder, UntypedRecord, Vector3
from codec.abbreviations import AbbreviationTable
from codec.completion import complete_placeholders
from codec.field_access import assign_field
from codec.key_paths import (
    child_key,
    keys_list_key,
    map_key_key,
    map_value_key,
    set_item_key,
    split_keys_list,
    type_tag_key,
)
from codec.references import LoadReferenceTable
from codec.type_registry import TypeRegistry
from store.property_store import PropertyStore

_LOGGER = get_logger(__name__)

Decoder = Callable[[str], object]


class LoadSession:
    """One load pass with its own pointer resolution table."""

    def __init__(
        self,
        store: PropertyStore,
        registry: TypeRegistry,
        abbreviations: AbbreviationTable,
        ignore_fields: AbstractSet[str] = frozenset(),
        references: LoadReferenceTable | None = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._abbreviations = abbreviations
        self._ignore_fields = frozenset(ignore_fields)
        self._references = references if references is not None else LoadReferenceTable()
        self._decoders: dict[ContainerKind, Decoder] = {
            ContainerKind.SEQUENCE: self._decode_sequence,
            ContainerKind.SET: self._decode_set,
            ContainerKind.MAP: self._decode_map,
            ContainerKind.REFERENCE: self._decode_reference,
            ContainerKind.VECTOR: self._decode_vector,
        }

    def load_root(self, root_key: str) -> object:
        """Load one top-level value.

        Args:
            root_key: Key the value was saved under.

        Returns:
            The reconstructed value, or None when nothing was saved.

        Raises:
            PropGraphMalformedStateError: If stored entries are inconsistent.
        """
        value = self.load(root_key)
        _LOGGER.info(
            "load_completed",
            root_key=root_key,
            value_type=type(value).__name__,
            pointers_resolved=len(self._references),
        )
        return value

    def load(self, root_key: str, *, allow_custom: bool = True) -> object:
        """Recursively reconstruct the value stored under a root key.

        Args:
            root_key: Key the value was saved under.
            allow_custom: Route built-in tags to their dedicated decoders.

        Returns:
            Reconstructed value; a primitive, container or record.
        """
        tag = self._store.get_property(type_tag_key(root_key))
        discriminator = tag if isinstance(tag, str) and tag else None
        if discriminator is not None and allow_custom:
            kind = ContainerKind.from_discriminator(discriminator)
            if kind is not None:
                return self._decoders[kind](root_key)
        raw_keys_list = self._store.get_property(keys_list_key(root_key))
        if raw_keys_list is None:
            return self._store.get_property(root_key)
        if not isinstance(raw_keys_list, str):
            raise PropGraphMalformedStateError(
                f"Keys list at '{keys_list_key(root_key)}' is {type(raw_keys_list).__name__}, "
                "expected a comma-joined string."
            )
        instance = self._registry.create(discriminator) if discriminator is not None else None
        typed = instance is not None
        record = instance if typed else UntypedRecord()
        for code in split_keys_list(raw_keys_list):
            field_name = self._abbreviations.expand(code)
            if field_name in self._ignore_fields:
                continue
            if typed and field_name == TYPE_FIELD_NAME:
                continue
            assign_field(record, field_name, self.load(f"{root_key}{code}"))
        return record

    def _decode_sequence(self, root_key: str) -> list[object]:
        length = self._read_count(child_key(root_key, LENGTH_FIELD_NAME, self._abbreviations))
        elements: list[object] = [None] * length
        for index in range(length):
            elements[index] = self.load(child_key(root_key, index, self._abbreviations))
        return elements

    def _decode_set(self, root_key: str) -> set[object]:
        size = self._read_count(child_key(root_key, SIZE_FIELD_NAME, self._abbreviations))
        elements: set[object] = set()
        for index in range(size):
            element = self.load(set_item_key(root_key, index))
            if element is None:
                continue
            try:
                elements.add(element)
            except TypeError as error:
                raise PropGraphMalformedStateError(
                    f"Set element at '{set_item_key(root_key, index)}' is unhashable: {error}."
                ) from error
        return elements

    def _decode_map(self, root_key: str) -> dict[object, object]:
        size = self._read_count(child_key(root_key, SIZE_FIELD_NAME, self._abbreviations))
        entries: dict[object, object] = {}
        for index in range(size):
            key = self.load(map_key_key(root_key, index))
            if key is None:
                continue
            value = self.load(map_value_key(root_key, index))
            try:
                entries[key] = value
            except TypeError as error:
                raise PropGraphMalformedStateError(
                    f"Map key at '{map_key_key(root_key, index)}' is unhashable: {error}."
                ) from error
        return entries

    def _decode_reference(self, root_key: str) -> object:
        pointer_key = child_key(root_key, POINTER_FIELD_NAME, self._abbreviations)
        pointer = self._store.get_property(pointer_key)
        if not isinstance(pointer, str) or not pointer:
            raise PropGraphMalformedStateError(
                f"Reference at '{root_key}' has no pointer entry at '{pointer_key}'."
            )
        entry = self._references.entry(pointer)
        if entry is not None:
            return entry.value if entry.resolved else ReferencePlaceholder(pointer=pointer)
        self._references.begin(pointer)
        value = self.load(pointer)
        self._references.resolve(pointer, value)
        complete_placeholders(value, self._references)
        _LOGGER.debug("reference_resolved", pointer=pointer, value_type=type(value).__name__)
        return value

    def _decode_vector(self, root_key: str) -> Vector3:
        value = self._store.get_property(root_key)
        if not isinstance(value, Vector3):
            raise PropGraphMalformedStateError(
                f"Vector entry at '{root_key}' is {type(value).__name__}, expected Vector3."
            )
        return value

    def _read_count(self, count_key: str) -> int:
        count = self._store.get_property(count_key)
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise PropGraphMalformedStateError(
                f"Count entry at '{count_key}' is {count!r}, expected a non-negative integer."
            )
        return count
