"""Unit tests for the completion sweep."""

from __future__ import annotations

from core.types import ReferencePlaceholder, UntypedRecord
from codec.completion import complete_placeholders
from codec.references import LoadReferenceTable
from tests.sample_records import Slotted


def _resolved_table(pointer: str, value: object) -> LoadReferenceTable:
    table = LoadReferenceTable()
    table.begin(pointer)
    table.resolve(pointer, value)
    return table


def test_sweep_replaces_placeholders_in_every_container_kind() -> None:
    """Resolved placeholders are swapped in lists, dict keys and values, sets and records."""
    target = UntypedRecord(label="target")
    placeholder = ReferencePlaceholder(pointer="p")
    root = UntypedRecord(
        items=[placeholder, "keep"],
        index={placeholder: placeholder},
        members={placeholder, "other"},
        direct=placeholder,
    )
    table = _resolved_table("p", target)

    complete_placeholders(root, table)

    assert root.items == [target, "keep"]  # type: ignore[attr-defined]
    assert root.index == {target: target}  # type: ignore[attr-defined]
    assert root.members == {target, "other"}  # type: ignore[attr-defined]
    assert root.direct is target  # type: ignore[attr-defined]


def test_sweep_leaves_unresolved_placeholders() -> None:
    table = LoadReferenceTable()
    table.begin("pending")
    placeholder = ReferencePlaceholder(pointer="pending")
    root = UntypedRecord(link=placeholder)

    complete_placeholders(root, table)

    assert root.link is placeholder  # type: ignore[attr-defined]


def test_sweep_terminates_on_cyclic_graphs_and_slots() -> None:
    """Each node is visited once per sweep, including slotted records."""
    slotted = Slotted()
    root = UntypedRecord(child=slotted)
    slotted.left = root
    slotted.right = ReferencePlaceholder(pointer="p")
    table = _resolved_table("p", root)

    complete_placeholders(root, table)

    assert slotted.right is root


def test_sweep_ignores_primitives_and_none() -> None:
    table = LoadReferenceTable()

    complete_placeholders(None, table)
    complete_placeholders("text", table)
    complete_placeholders(3, table)
