"""Public SDK surface for propgraph.

This module provides a stable import path for application code.
It wires config, storage profile, type registry and abbreviation
table into save and load sessions over one property store.
"""

from __future__ import annotations

from contextlib import contextmanager
import random
from typing import Iterator

from core.config import PropGraphConfig
from core.storage_profile import StorageProfile, load_storage_profile
from core.types import ReferencePlaceholder, SaveReport, UntypedRecord, Vector3
from codec.abbreviations import AbbreviationTable
from codec.load_engine import LoadSession
from codec.references import LoadReferenceTable, PointerMinter, SaveReferenceTable
from codec.save_engine import SaveSession
from codec.type_registry import DEFAULT_REGISTRY, TypeRegistry, register_record
from store.json_file_store import JsonFilePropertyStore
from store.memory_store import MemoryPropertyStore
from store.property_store import PropertyStore


class GraphCodec:
    """Primary SDK entry point for saving and loading object graphs."""

    def __init__(
        self,
        store: PropertyStore,
        registry: TypeRegistry | None = None,
        profile: StorageProfile | None = None,
        config: PropGraphConfig | None = None,
    ) -> None:
        """Create a codec bound to one property store.

        Args:
            store: Destination medium for save and source for load.
            registry: Type registry; the process-wide default when omitted.
            profile: Storage profile; read from config.profile_path, or an
                empty profile, when omitted.
            config: Optional runtime configuration.

        Raises:
            PropGraphConfigError: If environment configuration is invalid.
            PropGraphProfileError: If the configured profile is invalid.
        """
        self._config = config or PropGraphConfig.from_env()
        self._store = store
        self._registry = registry if registry is not None else DEFAULT_REGISTRY
        self._profile = (
            profile if profile is not None else _profile_from_config(self._config)
        )
        self._abbreviations = AbbreviationTable.from_profile(self._profile)
        self._rng = (
            random.Random(self._config.random_seed)
            if self._config.random_seed is not None
            else random.SystemRandom()
        )

    @property
    def store(self) -> PropertyStore:
        return self._store

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    @property
    def profile(self) -> StorageProfile:
        return self._profile

    def save(self, instance: object, root_key: str) -> SaveReport:
        """Save one graph with a fresh reference table.

        Args:
            instance: Root of the graph to persist.
            root_key: Key the root is stored under.

        Returns:
            Summary of writes; failed fields are listed, never raised.
        """
        return self._new_save_session().save_root(instance, root_key)

    def load(self, root_key: str) -> object:
        """Load one graph with a fresh pointer table.

        Args:
            root_key: Key the root was saved under.

        Returns:
            Reconstructed graph, or None when nothing was saved there.

        Raises:
            PropGraphMalformedStateError: If stored entries are inconsistent.
        """
        return self._new_load_session().load_root(root_key)

    @contextmanager
    def save_session(self) -> Iterator[SaveSession]:
        """Share one reference table across several top-level saves.

        Instances seen by an earlier save in the block are written as
        references by later saves.
        """
        yield self._new_save_session()

    @contextmanager
    def load_session(self) -> Iterator[LoadSession]:
        """Share one pointer table across several top-level loads."""
        yield self._new_load_session()

    def _new_save_session(self) -> SaveSession:
        minter = PointerMinter(self._rng, self._config.pointer_suffix_length)
        return SaveSession(
            self._store,
            self._registry,
            self._abbreviations,
            ignore_fields=self._profile.ignore_fields,
            reference_types=self._profile.reference_types,
            references=SaveReferenceTable(minter),
        )

    def _new_load_session(self) -> LoadSession:
        return LoadSession(
            self._store,
            self._registry,
            self._abbreviations,
            ignore_fields=self._profile.ignore_fields,
            references=LoadReferenceTable(),
        )


def save_instance(
    instance: object,
    root_key: str,
    store: PropertyStore,
    registry: TypeRegistry | None = None,
) -> SaveReport:
    """Save one graph using environment config and the default profile."""
    return GraphCodec(store, registry=registry).save(instance, root_key)


def load_instance(
    root_key: str,
    store: PropertyStore,
    registry: TypeRegistry | None = None,
) -> object:
    """Load one graph using environment config and the default profile."""
    return GraphCodec(store, registry=registry).load(root_key)


def _profile_from_config(config: PropGraphConfig) -> StorageProfile:
    if config.profile_path is None:
        return StorageProfile()
    return load_storage_profile(config.profile_path)


__all__ = [
    "DEFAULT_REGISTRY",
    "GraphCodec",
    "JsonFilePropertyStore",
    "MemoryPropertyStore",
    "PropGraphConfig",
    "PropertyStore",
    "ReferencePlaceholder",
    "SaveReport",
    "StorageProfile",
    "TypeRegistry",
    "UntypedRecord",
    "Vector3",
    "load_instance",
    "load_storage_profile",
    "register_record",
    "save_instance",
]
