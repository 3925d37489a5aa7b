"""Shared typed models.

This module defines the value types that cross the store, codec,
and SDK layers so interfaces stay explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from core.constants import (
    MAP_DISCRIMINATOR,
    REFERENCE_DISCRIMINATOR,
    SEQUENCE_DISCRIMINATOR,
    SET_DISCRIMINATOR,
    VECTOR_DISCRIMINATOR,
)


@dataclass(frozen=True)
class Vector3:
    """Fixed-shape three component coordinate stored as one entry.

    Attributes:
        x: First coordinate.
        y: Second coordinate.
        z: Third coordinate.
    """

    x: float
    y: float
    z: float


Primitive = Union[bool, int, float, str]
EntryValue = Union[bool, int, float, str, Vector3]


class ContainerKind(str, Enum):
    """Closed set of built-in kinds handled by dedicated encoders."""

    SEQUENCE = SEQUENCE_DISCRIMINATOR
    SET = SET_DISCRIMINATOR
    MAP = MAP_DISCRIMINATOR
    REFERENCE = REFERENCE_DISCRIMINATOR
    VECTOR = VECTOR_DISCRIMINATOR

    @classmethod
    def from_discriminator(cls, discriminator: object) -> "ContainerKind | None":
        """Return the built-in kind for a discriminator, if any."""
        for kind in cls:
            if kind.value == discriminator:
                return kind
        return None


@dataclass(frozen=True)
class ReferencePlaceholder:
    """Stand-in written for, and loaded in place of, a shared instance.

    Attributes:
        pointer: Root key of the out-of-line stored copy.
        type: Always the reference discriminator.
    """

    pointer: str
    type: str = REFERENCE_DISCRIMINATOR


class UntypedRecord:
    """Plain attribute record for tags without a registered factory.

    Equality and hashing stay identity based so untyped records can be
    set elements and map keys just like the objects they replace.
    """

    def __init__(self, **fields: object) -> None:
        for name, value in fields.items():
            setattr(self, name, value)

    def as_dict(self) -> dict[str, object]:
        """Return a shallow copy of the record fields."""
        return dict(vars(self))

    def __repr__(self) -> str:
        rendered = ", ".join(f"{name}={value!r}" for name, value in vars(self).items())
        return f"UntypedRecord({rendered})"


@dataclass(frozen=True)
class SaveReport:
    """Outcome of one top-level save call.

    Attributes:
        root_key: Key the instance was saved under.
        entries_written: Number of successful store writes.
        failed_keys: Keys whose write or subtree save failed, in order.
        pointers_minted: Number of new reference pointers created.
    """

    root_key: str
    entries_written: int
    failed_keys: tuple[str, ...] = field(default_factory=tuple)
    pointers_minted: int = 0

    @property
    def complete(self) -> bool:
        """Return whether every write in the save succeeded."""
        return not self.failed_keys
