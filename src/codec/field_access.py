"""Record field enumeration and assignment.

Registered types may declare an explicit field schema. Other records
are reflected through their instance attributes, skipping callables
and ignored names.
"""

from __future__ import annotations

from typing import AbstractSet

from core.constants import KEYS_LIST_SEPARATOR, TYPE_FIELD_NAME
from core.errors import PropGraphCodecError


def record_fields(
    instance: object,
    discriminator: str | None,
    schema: tuple[str, ...] | None,
    ignore_fields: AbstractSet[str],
) -> list[str]:
    """Return the field names the default encoder writes for a record.

    Args:
        instance: Record instance.
        discriminator: Resolved type tag, or None for untagged records.
        schema: Explicit registered field list, or None to reflect.
        ignore_fields: Names never persisted.

    Returns:
        Ordered field names, led by ``type`` whenever a tag exists.

    Raises:
        PropGraphCodecError: If the instance exposes no attributes.
    """
    if schema is not None:
        candidates = list(schema)
    else:
        try:
            attributes = vars(instance)
        except TypeError as error:
            raise PropGraphCodecError(
                f"Cannot save {type(instance).__name__} value: it has no instance attributes. "
                "Register an explicit field schema or convert it to a supported type."
            ) from error
        candidates = [name for name, value in attributes.items() if not callable(value)]
    fields = [
        name
        for name in candidates
        if name not in ignore_fields and KEYS_LIST_SEPARATOR not in name
    ]
    if discriminator is not None and TYPE_FIELD_NAME not in fields:
        fields.insert(0, TYPE_FIELD_NAME)
    return fields


def field_value(instance: object, field_name: str, discriminator: str | None) -> object:
    """Read one field; the ``type`` field always yields the discriminator.

    Raises:
        PropGraphCodecError: If the attribute getter fails.
    """
    if field_name == TYPE_FIELD_NAME and discriminator is not None:
        return discriminator
    try:
        return getattr(instance, field_name, None)
    except Exception as error:
        raise PropGraphCodecError(
            f"Reading field '{field_name}' on {type(instance).__name__} failed: {error}. "
            "Fix the attribute getter or add the field to ignore_fields."
        ) from error


def assign_field(instance: object, field_name: str, value: object) -> None:
    """Set one loaded field on a reconstructed record.

    Raises:
        PropGraphCodecError: If the record rejects the attribute.
    """
    try:
        setattr(instance, field_name, value)
    except (AttributeError, TypeError) as error:
        raise PropGraphCodecError(
            f"Cannot restore field '{field_name}' on {type(instance).__name__}: {error}. "
            "Registered factories must return instances with writable attributes."
        ) from error
