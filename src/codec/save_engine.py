"""Save engine.

This module walks an object graph and writes it into a property store as
many small entries. Records are written field by field, built-in kinds go
through dedicated encoders, and shared instances of reference types are
stored once behind a pointer.
"""

from __future__ import annotations

from typing import AbstractSet, Callable

from core.constants import (
    KEYS_LIST_SUFFIX,
    LENGTH_FIELD_NAME,
    REFERENCE_DISCRIMINATOR,
    SIZE_FIELD_NAME,
    TYPE_FIELD_NAME,
    TYPE_TAG_CODE,
)
from core.errors import PropGraphCodecError, PropGraphError, PropGraphStoreError
from core.logging_config import get_logger
from core.types import ContainerKind, EntryValue, ReferencePlaceholder, SaveReport, Vector3
from codec.abbreviations import AbbreviationTable
from codec.field_access import field_value, record_fields
from codec.key_paths import (
    child_key,
    join_keys_list,
    keys_list_key,
    map_key_key,
    map_value_key,
    set_item_key,
    type_tag_key,
)
from codec.references import SaveReferenceTable
from codec.type_registry import TypeRegistry
from store.property_store import PropertyStore

_LOGGER = get_logger(__name__)
_PRIMITIVE_TYPES = (bool, int, float, str)
_RESERVED_FIELD_CODES = frozenset({TYPE_TAG_CODE, KEYS_LIST_SUFFIX})

Encoder = Callable[[object, str], None]


class SaveSession:
    """One save pass with its own reference table.

    Every instance reached through several paths during the session is
    written once when its discriminator is stored by reference. Sessions
    are not reentrant and must not be shared between threads.
    """

    def __init__(
        self,
        store: PropertyStore,
        registry: TypeRegistry,
        abbreviations: AbbreviationTable,
        ignore_fields: AbstractSet[str] = frozenset(),
        reference_types: AbstractSet[str] = frozenset(),
        references: SaveReferenceTable | None = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._abbreviations = abbreviations
        self._ignore_fields = frozenset(ignore_fields)
        self._reference_types = (
            frozenset(reference_types) | registry.reference_types()
        ) - {REFERENCE_DISCRIMINATOR}
        self._references = references if references is not None else SaveReferenceTable()
        self._entries_written = 0
        self._failed_keys: list[str] = []
        self._claimed_keys: set[str] = set()
        self._encoders: dict[ContainerKind, Encoder] = {
            ContainerKind.SEQUENCE: self._encode_sequence,
            ContainerKind.SET: self._encode_set,
            ContainerKind.MAP: self._encode_map,
            ContainerKind.VECTOR: self._encode_vector,
        }

    def save_root(self, instance: object, root_key: str) -> SaveReport:
        """Save one top-level instance and report what was written.

        Args:
            instance: Value to persist.
            root_key: Key the value is stored under.

        Returns:
            Summary of writes made by this call.
        """
        entries_before = self._entries_written
        failures_before = len(self._failed_keys)
        pointers_before = self._references.pointer_count
        self._save_child(instance, root_key)
        report = SaveReport(
            root_key=root_key,
            entries_written=self._entries_written - entries_before,
            failed_keys=tuple(self._failed_keys[failures_before:]),
            pointers_minted=self._references.pointer_count - pointers_before,
        )
        _LOGGER.info(
            "save_completed",
            root_key=root_key,
            entries_written=report.entries_written,
            failed_keys=len(report.failed_keys),
            pointers_minted=report.pointers_minted,
        )
        return report

    def save(
        self,
        instance: object,
        root_key: str,
        *,
        allow_custom: bool = True,
        allow_reference: bool = True,
    ) -> None:
        """Recursively save an instance under a root key.

        Args:
            instance: Value to persist; None writes nothing.
            root_key: Key the value is stored under.
            allow_custom: Route built-in kinds to their dedicated encoders.
            allow_reference: Permit pointer substitution at this call site.

        Raises:
            PropGraphCodecError: If the value cannot be encoded or its keys
                overlap keys already written by this session.
            PropGraphCyclicGraphError: If a non-reference instance contains itself.
        """
        if instance is None:
            return
        if isinstance(instance, _PRIMITIVE_TYPES):
            self._claim_root(root_key)
            self._write_entry(root_key, instance)
            return
        kind = _container_kind(instance)
        discriminator = kind.value if kind is not None else self._record_discriminator(instance)
        if allow_reference and discriminator in self._reference_types:
            self._save_by_reference(instance, root_key)
            return
        self._claim_root(root_key)
        with self._references.visiting(instance, root_key):
            encoder = self._encoders.get(kind) if allow_custom and kind is not None else None
            if encoder is not None:
                encoder(instance, root_key)
            else:
                self._encode_fields(instance, root_key, discriminator)

    def _save_by_reference(self, instance: object, root_key: str) -> None:
        pointer = self._references.pointer_for(instance)
        if pointer is None:
            pointer = self._references.mint(instance, root_key)
            _LOGGER.debug("pointer_minted", save_key=root_key, pointer=pointer)
            self.save(instance, pointer, allow_reference=False)
        self.save(ReferencePlaceholder(pointer=pointer), root_key)

    def _record_discriminator(self, instance: object) -> str | None:
        registered = self._registry.discriminator_for_class(type(instance))
        if registered is not None:
            return registered
        declared = getattr(instance, TYPE_FIELD_NAME, None)
        if not isinstance(declared, str) or not declared:
            return None
        if ContainerKind.from_discriminator(declared) is not None:
            raise PropGraphCodecError(
                f"{type(instance).__name__} declares reserved type '{declared}'. "
                "Rename the record's type field."
            )
        return declared

    def _encode_fields(self, instance: object, root_key: str, discriminator: str | None) -> None:
        schema = self._registry.fields_for(discriminator) if discriminator else None
        fields: list[str] = []
        for field_name in record_fields(instance, discriminator, schema, self._ignore_fields):
            code = self._abbreviations.abbreviate(field_name)
            if field_name != TYPE_FIELD_NAME and code in _RESERVED_FIELD_CODES:
                self._record_failure(
                    f"{root_key}{code}",
                    type(instance).__name__,
                    PropGraphCodecError(
                        f"Field '{field_name}' maps to reserved code '{code}'. "
                        "Rename the field or give it an abbreviation."
                    ),
                )
                continue
            fields.append(field_name)
        codes = [self._abbreviations.abbreviate(name) for name in fields]
        self._write_entry(keys_list_key(root_key), join_keys_list(codes))
        for field_name in fields:
            key = child_key(root_key, field_name, self._abbreviations)
            try:
                value = field_value(instance, field_name, discriminator)
            except PropGraphCodecError as error:
                self._record_failure(key, type(instance).__name__, error)
                continue
            if field_name == TYPE_FIELD_NAME:
                self._save_type_tag(value, root_key)
            else:
                self._save_child(value, key)

    def _save_type_tag(self, value: object, root_key: str) -> None:
        """Write a record's type field into the tag slot claimed with its root."""
        if value is None:
            return
        if not isinstance(value, _PRIMITIVE_TYPES):
            self._record_failure(
                type_tag_key(root_key),
                type(value).__name__,
                PropGraphCodecError(
                    f"Field '{TYPE_FIELD_NAME}' at '{root_key}' holds {type(value).__name__}. "
                    "The type field only stores primitive tags."
                ),
            )
            return
        self._write_entry(type_tag_key(root_key), value)

    def _encode_sequence(self, instance: object, root_key: str) -> None:
        elements = list(instance)  # type: ignore[call-overload]
        length_key = child_key(root_key, LENGTH_FIELD_NAME, self._abbreviations)
        self._claim(length_key)
        codes = (
            self._abbreviations.abbreviate(name) for name in (LENGTH_FIELD_NAME, TYPE_FIELD_NAME)
        )
        self._write_entry(keys_list_key(root_key), join_keys_list(codes))
        self._write_entry(length_key, len(elements))
        self._write_entry(type_tag_key(root_key), ContainerKind.SEQUENCE.value)
        for index, element in enumerate(elements):
            self._save_child(element, child_key(root_key, index, self._abbreviations))

    def _encode_set(self, instance: object, root_key: str) -> None:
        elements = list(instance)  # type: ignore[call-overload]
        size_key = child_key(root_key, SIZE_FIELD_NAME, self._abbreviations)
        self._claim(size_key)
        self._write_entry(type_tag_key(root_key), ContainerKind.SET.value)
        self._write_entry(size_key, len(elements))
        for index, element in enumerate(elements):
            self._save_child(element, set_item_key(root_key, index))

    def _encode_map(self, instance: object, root_key: str) -> None:
        entries = list(instance.items())  # type: ignore[attr-defined]
        size_key = child_key(root_key, SIZE_FIELD_NAME, self._abbreviations)
        self._claim(size_key)
        self._write_entry(type_tag_key(root_key), ContainerKind.MAP.value)
        self._write_entry(size_key, len(entries))
        for index, (key, value) in enumerate(entries):
            self._save_child(key, map_key_key(root_key, index))
            self._save_child(value, map_value_key(root_key, index))

    def _encode_vector(self, instance: object, root_key: str) -> None:
        self._write_entry(type_tag_key(root_key), ContainerKind.VECTOR.value)
        self._write_entry(root_key, instance)  # type: ignore[arg-type]

    def _claim_root(self, root_key: str) -> None:
        """Reserve a value key with the tag and keys-list slots a load reads under it."""
        self._claim(root_key, type_tag_key(root_key), keys_list_key(root_key))

    def _claim(self, *keys: str) -> None:
        taken = [key for key in keys if key in self._claimed_keys]
        if taken:
            raise PropGraphCodecError(
                f"Storage key '{taken[0]}' is already used by another value in this save. "
                "Rename the field or root key so concatenated keys stay unique."
            )
        self._claimed_keys.update(keys)

    def _save_child(self, value: object, key: str) -> None:
        """Save one field or element, isolating its failure from siblings."""
        try:
            self.save(value, key)
        except PropGraphError as error:
            self._record_failure(key, type(value).__name__, error)

    def _record_failure(self, key: str, value_type: str, error: Exception) -> None:
        self._failed_keys.append(key)
        _LOGGER.error("save_field_failed", key=key, value_type=value_type, error=str(error))

    def _write_entry(self, key: str, value: EntryValue) -> bool:
        try:
            self._store.set_property(key, value)
        except (PropGraphStoreError, OSError, ValueError) as error:
            self._failed_keys.append(key)
            _LOGGER.error("entry_write_failed", key=key, error=str(error))
            return False
        self._entries_written += 1
        return True


def _container_kind(instance: object) -> ContainerKind | None:
    """Map a runtime value to its built-in kind, if it has one."""
    if isinstance(instance, ReferencePlaceholder):
        return ContainerKind.REFERENCE
    if isinstance(instance, Vector3):
        return ContainerKind.VECTOR
    if isinstance(instance, (list, tuple)):
        return ContainerKind.SEQUENCE
    if isinstance(instance, (set, frozenset)):
        return ContainerKind.SET
    if isinstance(instance, dict):
        return ContainerKind.MAP
    return None
