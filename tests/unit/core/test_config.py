"""Unit tests for core config parsing."""

from __future__ import annotations

import os

import pytest

from core.config import PropGraphConfig
from core.constants import DEFAULT_MAX_ENTRY_BYTES, DEFAULT_POINTER_SUFFIX_LENGTH
from core.errors import PropGraphConfigError


def test_from_env_uses_defaults_when_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fall back to documented defaults."""
    for name in (
        "PROPGRAPH_MAX_ENTRY_BYTES",
        "PROPGRAPH_POINTER_LENGTH",
        "PROPGRAPH_RANDOM_SEED",
        "PROPGRAPH_PROFILE",
    ):
        monkeypatch.delenv(name, raising=False)

    config = PropGraphConfig.from_env()

    assert config.max_entry_bytes == DEFAULT_MAX_ENTRY_BYTES
    assert config.pointer_suffix_length == DEFAULT_POINTER_SUFFIX_LENGTH
    assert config.random_seed is None
    assert config.profile_path is None


def test_from_env_reads_profile_path(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve the storage profile path from environment."""
    monkeypatch.setenv("PROPGRAPH_PROFILE", "./profiles/game.yaml")

    config = PropGraphConfig.from_env()

    assert config.profile_path is not None
    assert config.profile_path.name == "game.yaml"


def test_from_env_reads_seed_and_limits(monkeypatch: pytest.MonkeyPatch) -> None:
    """Numeric settings should be parsed as integers."""
    monkeypatch.setenv("PROPGRAPH_RANDOM_SEED", "7")
    monkeypatch.setenv("PROPGRAPH_MAX_ENTRY_BYTES", "128")
    monkeypatch.setenv("PROPGRAPH_POINTER_LENGTH", "12")

    config = PropGraphConfig.from_env()

    assert (config.random_seed, config.max_entry_bytes, config.pointer_suffix_length) == (
        7,
        128,
        12,
    )


def test_from_env_raises_for_invalid_seed(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for non-numeric random seed."""
    monkeypatch.setenv("PROPGRAPH_RANDOM_SEED", "not-a-number")

    with pytest.raises(PropGraphConfigError):
        PropGraphConfig.from_env()

    assert os.getenv("PROPGRAPH_RANDOM_SEED") == "not-a-number"


def test_from_env_raises_for_non_positive_entry_limit(monkeypatch: pytest.MonkeyPatch) -> None:
    """Entry ceiling must be a positive integer."""
    monkeypatch.setenv("PROPGRAPH_MAX_ENTRY_BYTES", "0")

    with pytest.raises(PropGraphConfigError):
        PropGraphConfig.from_env()
