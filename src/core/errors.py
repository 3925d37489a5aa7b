"""propgraph exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class PropGraphError(Exception):
    """Base exception for all propgraph failures."""


class PropGraphConfigError(PropGraphError):
    """Raised for invalid runtime configuration."""


class PropGraphProfileError(PropGraphError):
    """Raised for invalid or unsupported storage profile files."""


class PropGraphDependencyError(PropGraphError):
    """Raised when an optional runtime dependency is missing."""


class PropGraphStoreError(PropGraphError):
    """Raised for property store read and persistence failures."""


class PropGraphStoreWriteError(PropGraphStoreError):
    """Raised when a property store rejects a single entry write."""


class PropGraphRegistryError(PropGraphError):
    """Raised for invalid type registry operations."""


class PropGraphCodecError(PropGraphError):
    """Raised for object graph encoding and decoding failures."""


class PropGraphCyclicGraphError(PropGraphCodecError):
    """Raised when a non-reference instance is reached from itself during save."""


class PropGraphMalformedStateError(PropGraphCodecError):
    """Raised when stored entries do not match what a decoder expects."""
