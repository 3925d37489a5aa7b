"""Unit tests for the load engine."""

from __future__ import annotations

import pytest

from core.errors import PropGraphMalformedStateError
from core.types import UntypedRecord, Vector3
from codec.load_engine import LoadSession
from codec.references import LoadReferenceTable
from codec.type_registry import TypeRegistry
from store.memory_store import MemoryPropertyStore
from tests.sample_records import Player, build_abbreviations, build_registry


def _store(entries: dict[str, object]) -> MemoryPropertyStore:
    store = MemoryPropertyStore()
    for key, value in entries.items():
        store.set_property(key, value)  # type: ignore[arg-type]
    return store


def _session(
    store: MemoryPropertyStore,
    registry: TypeRegistry | None = None,
    **options: object,
) -> LoadSession:
    return LoadSession(
        store,
        registry if registry is not None else build_registry(),
        build_abbreviations(),
        **options,  # type: ignore[arg-type]
    )


def test_load_never_written_key_returns_none() -> None:
    assert _session(MemoryPropertyStore()).load_root("missing") is None


def test_load_primitive_returns_entry_verbatim() -> None:
    assert _session(_store({"gold": 42})).load_root("gold") == 42


def test_load_registered_record_uses_factory() -> None:
    """Registered tags rebuild instances of the registered class."""
    store = _store({"pkeys": "t,name,level", "pt": "Player", "pname": "Ann", "plevel": 3})

    player = _session(store).load_root("p")

    assert isinstance(player, Player)
    assert (player.name, player.level) == ("Ann", 3)
    assert player.greeting() == "hello Ann"
    assert "type" not in vars(player)


def test_load_unregistered_tag_falls_back_to_untyped_record() -> None:
    store = _store({"dkeys": "t,hp", "dt": "Dragon", "dhp": 90})

    dragon = _session(store).load_root("d")

    assert isinstance(dragon, UntypedRecord)
    assert dragon.as_dict() == {"type": "Dragon", "hp": 90}


def test_load_expands_abbreviated_field_names() -> None:
    store = _store({"rkeys": "inv", "rinv": "torch"})

    record = _session(store).load_root("r")

    assert record.inventory == "torch"  # type: ignore[attr-defined]


def test_load_empty_keys_list_yields_empty_record() -> None:
    record = _session(_store({"rkeys": ""})).load_root("r")

    assert isinstance(record, UntypedRecord)
    assert record.as_dict() == {}


def test_load_skips_ignored_fields() -> None:
    store = _store({"rkeys": "cache,hp", "rcache": "stale", "rhp": 4})

    record = _session(store, ignore_fields=frozenset({"cache"})).load_root("r")

    assert record.as_dict() == {"hp": 4}  # type: ignore[attr-defined]


def test_load_containers_and_vector() -> None:
    """Dedicated decoders rebuild sequences, sets, maps and vectors."""
    store = _store(
        {
            "skeys": "length,t",
            "st": "sequence",
            "slength": 3,
            "s0": "a",
            "s2": 2,
            "bt": "set",
            "bsize": 2,
            "bitem0": "x",
            "bitem1": "y",
            "mt": "map",
            "msize": 1,
            "mkey0": "gold",
            "mvalue0": 10,
            "vt": "V",
            "v": Vector3(0.0, 1.0, 2.0),
        }
    )
    session = _session(store)

    assert session.load_root("s") == ["a", None, 2]
    assert session.load_root("b") == {"x", "y"}
    assert session.load_root("m") == {"gold": 10}
    assert session.load_root("v") == Vector3(0.0, 1.0, 2.0)


def test_load_without_custom_dispatch_reads_plain_fields() -> None:
    store = _store({"skeys": "length,t", "st": "sequence", "slength": 0})

    record = _session(store).load("s", allow_custom=False)

    assert isinstance(record, UntypedRecord)
    assert record.as_dict() == {"length": 0, "type": "sequence"}


def test_load_does_not_mutate_store() -> None:
    store = _store({"skeys": "length,t", "st": "sequence", "slength": 1, "s0": "a"})
    before = store.snapshot()

    _session(store).load_root("s")

    assert store.snapshot() == before


def test_load_malformed_length_raises() -> None:
    store = _store({"st": "sequence", "slength": "three"})

    with pytest.raises(PropGraphMalformedStateError):
        _session(store).load_root("s")


def test_load_reference_without_pointer_raises() -> None:
    store = _store({"rkeys": "pointer,t", "rt": "reference"})

    with pytest.raises(PropGraphMalformedStateError):
        _session(store).load_root("r")


def test_load_vector_tag_without_vector_entry_raises() -> None:
    with pytest.raises(PropGraphMalformedStateError):
        _session(_store({"vt": "V", "v": "not a vector"})).load_root("v")


def test_passed_pointer_table_is_used_even_when_empty() -> None:
    """An empty table handed to the session records the pointers it resolves."""
    table = LoadReferenceTable()
    store = _store(
        {
            "nt": "reference",
            "nkeys": "pointer,t",
            "npointer": "P1",
            "P1t": "Node",
            "P1keys": "t,lb",
            "P1lb": "kept",
        }
    )

    loaded = _session(store, references=table).load_root("n")

    assert table.is_resolved("P1")
    assert table.value_of("P1") is loaded
