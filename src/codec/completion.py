"""Completion sweep for cyclic loads.

A pointer reached again while its target is still loading yields a
placeholder. Once the target resolves, this sweep walks the freshly
loaded subgraph and swaps every placeholder whose pointer is resolved
for the real value, in place.
"""

from __future__ import annotations

from core.types import ReferencePlaceholder, Vector3
from codec.references import LoadReferenceTable

_TERMINAL_TYPES = (bool, int, float, str, Vector3, ReferencePlaceholder)


def complete_placeholders(value: object, references: LoadReferenceTable) -> None:
    """Replace resolved placeholders reachable from a value.

    Traversal is depth first and visits each container once per sweep.

    Args:
        value: Root of the freshly resolved subgraph.
        references: Load-side pointer table of the current session.
    """
    _complete(value, references, set())


def _complete(value: object, references: LoadReferenceTable, visited: set[int]) -> None:
    if value is None or isinstance(value, _TERMINAL_TYPES):
        return
    if id(value) in visited:
        return
    visited.add(id(value))
    if isinstance(value, list):
        _complete_list(value, references, visited)
    elif isinstance(value, dict):
        _complete_dict(value, references, visited)
    elif isinstance(value, set):
        _complete_set(value, references, visited)
    else:
        _complete_record(value, references, visited)


def _complete_list(value: list[object], references: LoadReferenceTable, visited: set[int]) -> None:
    for index, element in enumerate(value):
        healed = _heal(element, references)
        if healed is not element:
            value[index] = healed
        else:
            _complete(element, references, visited)


def _complete_dict(
    value: dict[object, object], references: LoadReferenceTable, visited: set[int]
) -> None:
    healed_items = [
        (_heal(key, references), _heal(item, references)) for key, item in value.items()
    ]
    changed = any(
        healed_key is not key or healed_item is not item
        for (healed_key, healed_item), (key, item) in zip(healed_items, value.items())
    )
    if changed:
        value.clear()
        value.update(healed_items)
    for key, item in healed_items:
        _complete(key, references, visited)
        _complete(item, references, visited)


def _complete_set(value: set[object], references: LoadReferenceTable, visited: set[int]) -> None:
    healed_elements = [_heal(element, references) for element in value]
    if any(healed is not element for healed, element in zip(healed_elements, value)):
        value.clear()
        value.update(healed_elements)
    for element in healed_elements:
        _complete(element, references, visited)


def _complete_record(value: object, references: LoadReferenceTable, visited: set[int]) -> None:
    for name, field in list(_record_items(value)):
        healed = _heal(field, references)
        if healed is not field:
            setattr(value, name, healed)
        else:
            _complete(field, references, visited)


def _record_items(value: object) -> list[tuple[str, object]]:
    """Return a record's attribute pairs, covering both dict and slots layouts."""
    attributes = getattr(value, "__dict__", None)
    if attributes is not None:
        return list(attributes.items())
    items: list[tuple[str, object]] = []
    for owner in type(value).__mro__:
        slots = owner.__dict__.get("__slots__", ())
        for name in (slots,) if isinstance(slots, str) else slots:
            if name in ("__dict__", "__weakref__") or not hasattr(value, name):
                continue
            items.append((name, getattr(value, name)))
    return items


def _heal(value: object, references: LoadReferenceTable) -> object:
    if isinstance(value, ReferencePlaceholder) and references.is_resolved(value.pointer):
        return references.value_of(value.pointer)
    return value
