"""Unit tests for the type registry."""

from __future__ import annotations

import pytest

from core.errors import PropGraphRegistryError
from codec.type_registry import TypeRegistry
from tests.sample_records import Node, Player, build_registry


def test_create_returns_blank_registered_instance() -> None:
    """Factories should produce fresh instances of the registered type."""
    registry = build_registry()

    created = registry.create("Player")

    assert isinstance(created, Player)
    assert created is not registry.create("Player")


def test_create_returns_none_for_unregistered_discriminator() -> None:
    assert build_registry().create("Dragon") is None


def test_discriminator_for_class_follows_inheritance() -> None:
    class Boss(Player):
        pass

    registry = build_registry()

    assert registry.discriminator_for_class(Boss) == "Player"
    assert registry.discriminator_for_class(dict) is None


def test_reference_types_include_flagged_records_and_marked_kinds() -> None:
    registry = build_registry()
    registry.mark_reference_type("sequence")
    registry.mark_reference_type("Player")

    assert registry.reference_types() == frozenset({"Node", "Slotted", "sequence", "Player"})


def test_register_rejects_reserved_discriminators() -> None:
    with pytest.raises(PropGraphRegistryError):
        TypeRegistry().register("map", dict)


def test_register_rejects_rebinding_class_to_new_discriminator() -> None:
    registry = TypeRegistry()
    registry.register("Node", Node)

    with pytest.raises(PropGraphRegistryError):
        registry.register("Link", Node)


def test_register_record_decorator_registers_class() -> None:
    registry = TypeRegistry()

    @registry.register_record("Chest", fields=("gold",), by_reference=True)
    class Chest:
        def __init__(self) -> None:
            self.gold = 0

    assert isinstance(registry.create("Chest"), Chest)
    assert registry.fields_for("Chest") == ("gold",)
    assert "Chest" in registry.reference_types()
