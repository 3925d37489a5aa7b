"""Core constants used across propgraph modules.

This module centralizes reserved key suffixes and default limits.
Keeping values here avoids magic literals in codec logic.
"""

from __future__ import annotations

import string

KEYS_LIST_SUFFIX = "keys"
KEYS_LIST_SEPARATOR = ","
TYPE_FIELD_NAME = "type"
TYPE_TAG_CODE = "t"
POINTER_FIELD_NAME = "pointer"
LENGTH_FIELD_NAME = "length"
SIZE_FIELD_NAME = "size"
SET_ITEM_PREFIX = "item"
MAP_KEY_PREFIX = "key"
MAP_VALUE_PREFIX = "value"
SEQUENCE_DISCRIMINATOR = "sequence"
SET_DISCRIMINATOR = "set"
MAP_DISCRIMINATOR = "map"
REFERENCE_DISCRIMINATOR = "reference"
VECTOR_DISCRIMINATOR = "V"
DEFAULT_MAX_ENTRY_BYTES = 32767
DEFAULT_POINTER_SUFFIX_LENGTH = 35
POINTER_SUFFIX_ALPHABET = string.ascii_letters + string.digits + "!#$%&()*+-./:;<=>?@[]^_{|}~"
NUMERIC_ENTRY_BYTES = 8
VECTOR_ENTRY_BYTES = 24
DEFAULT_LOG_LEVEL = "INFO"
SUPPORTED_PROFILE_VERSIONS = (1,)
STORE_FILE_ENTRIES_KEY = "entries"
