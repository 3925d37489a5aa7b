"""Typed storage profile parsing.

This module loads and validates YAML storage profiles. A profile holds the
static, application-supplied codec tables: field-name abbreviations, the
ignore-list of fields never persisted, and the discriminators stored by
reference.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Sequence, cast

from core.constants import SUPPORTED_PROFILE_VERSIONS
from core.errors import PropGraphDependencyError, PropGraphProfileError

_ROOT_KEYS = frozenset({"version", "abbreviations", "ignore_fields", "reference_types"})


@dataclass(frozen=True)
class StorageProfile:
    """Validated storage profile root object."""

    version: int = 1
    abbreviations: Mapping[str, str] = field(default_factory=dict)
    ignore_fields: frozenset[str] = frozenset()
    reference_types: frozenset[str] = frozenset()


def load_storage_profile(profile_path: str | Path) -> StorageProfile:
    """Load and validate a YAML storage profile from disk.

    Args:
        profile_path: File path to YAML profile.

    Returns:
        Fully validated storage profile.

    Raises:
        PropGraphDependencyError: If PyYAML is unavailable.
        PropGraphProfileError: If file is invalid or schema checks fail.
    """
    payload = _load_yaml_payload(profile_path)
    return parse_storage_profile(payload)


def parse_storage_profile(payload: object) -> StorageProfile:
    """Validate an already decoded profile payload.

    Raises:
        PropGraphProfileError: If schema checks fail.
    """
    root_mapping = _expect_mapping(payload, "storage profile root")
    _validate_root_keys(root_mapping)
    return StorageProfile(
        version=_parse_version(root_mapping),
        abbreviations=_parse_abbreviations(root_mapping),
        ignore_fields=_parse_name_set(root_mapping, "ignore_fields"),
        reference_types=_parse_name_set(root_mapping, "reference_types"),
    )


def _load_yaml_payload(profile_path: str | Path) -> object:
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise PropGraphDependencyError(
            "Storage profile support requires PyYAML. Install with 'pip install pyyaml'."
        ) from error
    profile_file = Path(profile_path).expanduser().resolve()
    if not profile_file.exists():
        raise PropGraphProfileError(
            f"Storage profile does not exist at {profile_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(profile_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise PropGraphProfileError(
            f"Failed to read storage profile at {profile_file}: {error}. "
            "Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise PropGraphProfileError(
            f"Failed to parse YAML storage profile at {profile_file}: {error}. "
            "Fix YAML syntax and retry."
        ) from error
    if payload is None:
        raise PropGraphProfileError(
            f"Storage profile at {profile_file} is empty. Define at least 'version'."
        )
    return payload


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise PropGraphProfileError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise PropGraphProfileError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def _expect_sequence(value: object, context: str) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise PropGraphProfileError(f"Invalid {context}: expected list, got {type(value).__name__}.")


def _validate_root_keys(root_mapping: Mapping[str, object]) -> None:
    unknown_keys = sorted(root_mapping.keys() - _ROOT_KEYS)
    if unknown_keys:
        supported_rows = ", ".join(sorted(_ROOT_KEYS))
        raise PropGraphProfileError(
            f"Unsupported storage profile fields: {', '.join(unknown_keys)}. "
            f"Use only: {supported_rows}."
        )


def _parse_version(root_mapping: Mapping[str, object]) -> int:
    raw_version = root_mapping.get("version")
    if isinstance(raw_version, bool) or not isinstance(raw_version, int):
        raise PropGraphProfileError(
            "Storage profile field 'version' must be an integer. Set version: 1."
        )
    if raw_version not in SUPPORTED_PROFILE_VERSIONS:
        raise PropGraphProfileError(
            f"Unsupported storage profile version {raw_version}. Use version: 1."
        )
    return raw_version


def _parse_abbreviations(root_mapping: Mapping[str, object]) -> Mapping[str, str]:
    raw_abbreviations = root_mapping.get("abbreviations")
    if raw_abbreviations is None:
        return {}
    abbreviations_mapping = _expect_mapping(raw_abbreviations, "storage profile abbreviations")
    parsed: dict[str, str] = {}
    for full_name, short_code in abbreviations_mapping.items():
        if not isinstance(short_code, str) or not short_code:
            raise PropGraphProfileError(
                f"Abbreviation for field '{full_name}' must be a non-empty string."
            )
        parsed[full_name] = short_code
    return parsed


def _parse_name_set(root_mapping: Mapping[str, object], field_name: str) -> frozenset[str]:
    raw_names = root_mapping.get(field_name)
    if raw_names is None:
        return frozenset()
    names = _expect_sequence(raw_names, f"storage profile {field_name}")
    parsed: set[str] = set()
    for index, name in enumerate(names):
        if not isinstance(name, str) or not name.strip():
            raise PropGraphProfileError(
                f"Invalid storage profile {field_name} entry #{index + 1}: "
                "expected a non-empty string."
            )
        parsed.add(name.strip())
    return frozenset(parsed)
