"""Runtime configuration model for propgraph.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_MAX_ENTRY_BYTES, DEFAULT_POINTER_SUFFIX_LENGTH
from core.errors import PropGraphConfigError


@dataclass(frozen=True)
class PropGraphConfig:
    """Validated runtime configuration.

    Attributes:
        max_entry_bytes: Per-entry size ceiling enforced by bundled stores.
        pointer_suffix_length: Number of random characters in minted pointers.
        random_seed: Optional seed that makes pointer minting deterministic.
        profile_path: Optional YAML storage profile location.
    """

    max_entry_bytes: int = DEFAULT_MAX_ENTRY_BYTES
    pointer_suffix_length: int = DEFAULT_POINTER_SUFFIX_LENGTH
    random_seed: int | None = None
    profile_path: Path | None = None

    @classmethod
    def from_env(cls) -> "PropGraphConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            PropGraphConfigError: If environment values are invalid.
        """
        max_entry_bytes = _parse_positive_int(
            "PROPGRAPH_MAX_ENTRY_BYTES",
            os.getenv("PROPGRAPH_MAX_ENTRY_BYTES", str(DEFAULT_MAX_ENTRY_BYTES)),
        )
        pointer_suffix_length = _parse_positive_int(
            "PROPGRAPH_POINTER_LENGTH",
            os.getenv("PROPGRAPH_POINTER_LENGTH", str(DEFAULT_POINTER_SUFFIX_LENGTH)),
        )
        random_seed_value = os.getenv("PROPGRAPH_RANDOM_SEED")
        random_seed = (
            _parse_random_seed(random_seed_value) if random_seed_value else None
        )
        profile_value = os.getenv("PROPGRAPH_PROFILE")
        profile_path = Path(profile_value).expanduser().resolve() if profile_value else None
        return cls(
            max_entry_bytes=max_entry_bytes,
            pointer_suffix_length=pointer_suffix_length,
            random_seed=random_seed,
            profile_path=profile_path,
        )


def _parse_positive_int(variable_name: str, raw_value: str) -> int:
    """Parse a strictly positive integer environment value.

    Args:
        variable_name: Environment variable name for error messages.
        raw_value: Raw string from environment.

    Returns:
        Parsed integer.

    Raises:
        PropGraphConfigError: If value is not a positive integer.
    """
    try:
        value = int(raw_value)
    except ValueError as error:
        raise PropGraphConfigError(
            f"Invalid {variable_name} value: expected integer, got '{raw_value}'. "
            f"Set {variable_name} to a positive number."
        ) from error
    if value <= 0:
        raise PropGraphConfigError(
            f"Invalid {variable_name} value: expected positive integer, got {value}."
        )
    return value


def _parse_random_seed(raw_value: str) -> int:
    """Parse the random seed environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed integer seed.

    Raises:
        PropGraphConfigError: If value cannot be parsed into int.
    """
    try:
        return int(raw_value)
    except ValueError as error:
        raise PropGraphConfigError(
            "Invalid PROPGRAPH_RANDOM_SEED value: "
            f"expected integer, got '{raw_value}'. "
            "Set PROPGRAPH_RANDOM_SEED to a numeric value or unset it."
        ) from error
