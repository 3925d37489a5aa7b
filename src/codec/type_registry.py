"""Type registry for typed record reconstruction.

The application registers one zero-argument factory per discriminator
before loading. Unregistered discriminators are not errors: the load
engine falls back to an untyped record.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, TypeVar

from core.errors import PropGraphRegistryError
from core.types import ContainerKind

RecordFactory = Callable[[], object]
_RecordClass = TypeVar("_RecordClass", bound=type)


@dataclass(frozen=True)
class TypeRegistration:
    """One registered record type.

    Attributes:
        discriminator: Stored type tag.
        factory: Zero-argument callable returning a blank instance.
        record_class: Class whose instances save under this discriminator.
        fields: Explicit field schema, or None to reflect instance attributes.
        by_reference: Whether instances are deduplicated through pointers.
    """

    discriminator: str
    factory: RecordFactory
    record_class: type | None = None
    fields: tuple[str, ...] | None = None
    by_reference: bool = False


class TypeRegistry:
    """Discriminator to factory table with reference-storage flags."""

    def __init__(self) -> None:
        self._registrations: dict[str, TypeRegistration] = {}
        self._class_discriminators: dict[type, str] = {}
        self._reference_kinds: set[str] = set()

    def register(
        self,
        discriminator: str,
        factory: RecordFactory,
        *,
        record_class: type | None = None,
        fields: Iterable[str] | None = None,
        by_reference: bool = False,
    ) -> TypeRegistration:
        """Register a record type.

        Args:
            discriminator: Stored type tag.
            factory: Zero-argument callable returning a blank instance.
            record_class: Class mapped to this discriminator on save. When the
                factory is itself a class it is used by default.
            fields: Optional explicit field schema.
            by_reference: Store shared instances once behind a pointer.

        Returns:
            The stored registration.

        Raises:
            PropGraphRegistryError: If the discriminator is reserved, empty or
                already bound to a different class.
        """
        if not discriminator:
            raise PropGraphRegistryError("Type discriminator must be a non-empty string.")
        if ContainerKind.from_discriminator(discriminator) is not None:
            raise PropGraphRegistryError(
                f"Discriminator '{discriminator}' is reserved for a built-in kind. "
                "Use mark_reference_type to store built-in kinds by reference."
            )
        if record_class is None and isinstance(factory, type):
            record_class = factory
        registration = TypeRegistration(
            discriminator=discriminator,
            factory=factory,
            record_class=record_class,
            fields=tuple(fields) if fields is not None else None,
            by_reference=by_reference,
        )
        if record_class is not None:
            bound = self._class_discriminators.get(record_class)
            if bound is not None and bound != discriminator:
                raise PropGraphRegistryError(
                    f"Class {record_class.__name__} is already registered as '{bound}'."
                )
            self._class_discriminators[record_class] = discriminator
        self._registrations[discriminator] = registration
        return registration

    def register_record(
        self,
        discriminator: str,
        *,
        fields: Iterable[str] | None = None,
        by_reference: bool = False,
    ) -> Callable[[_RecordClass], _RecordClass]:
        """Class decorator form of register using the class as factory."""

        def decorator(record_class: _RecordClass) -> _RecordClass:
            self.register(
                discriminator,
                record_class,
                record_class=record_class,
                fields=fields,
                by_reference=by_reference,
            )
            return record_class

        return decorator

    def mark_reference_type(self, discriminator: str) -> None:
        """Store every instance of a discriminator by reference, built-in kinds included."""
        registration = self._registrations.get(discriminator)
        if registration is not None:
            self._registrations[discriminator] = TypeRegistration(
                discriminator=registration.discriminator,
                factory=registration.factory,
                record_class=registration.record_class,
                fields=registration.fields,
                by_reference=True,
            )
            return
        self._reference_kinds.add(discriminator)

    def create(self, discriminator: str) -> object | None:
        """Instantiate a blank record, or return None when unregistered."""
        registration = self._registrations.get(discriminator)
        if registration is None:
            return None
        return registration.factory()

    def is_registered(self, discriminator: str) -> bool:
        return discriminator in self._registrations

    def discriminator_for_class(self, record_class: type) -> str | None:
        """Return the discriminator for a class or its nearest registered base."""
        for candidate in record_class.__mro__:
            discriminator = self._class_discriminators.get(candidate)
            if discriminator is not None:
                return discriminator
        return None

    def fields_for(self, discriminator: str) -> tuple[str, ...] | None:
        registration = self._registrations.get(discriminator)
        return registration.fields if registration is not None else None

    def reference_types(self) -> frozenset[str]:
        """Return every discriminator stored by reference."""
        flagged = {
            discriminator
            for discriminator, registration in self._registrations.items()
            if registration.by_reference
        }
        return frozenset(flagged | self._reference_kinds)

    def clear(self) -> None:
        self._registrations.clear()
        self._class_discriminators.clear()
        self._reference_kinds.clear()

    def __contains__(self, discriminator: object) -> bool:
        return discriminator in self._registrations

    def __len__(self) -> int:
        return len(self._registrations)


DEFAULT_REGISTRY = TypeRegistry()


def register_record(
    discriminator: str,
    *,
    fields: Iterable[str] | None = None,
    by_reference: bool = False,
) -> Callable[[_RecordClass], _RecordClass]:
    """Register a class in the process-wide default registry."""
    return DEFAULT_REGISTRY.register_record(
        discriminator, fields=fields, by_reference=by_reference
    )
