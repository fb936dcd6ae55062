"""Public SDK surface for Keepsake.

This module provides a stable import path for library users.
It re-exports the store facade, config and error types.
"""

from __future__ import annotations

from core.config import KeepsakeConfig
from core.errors import (
    EntryNotFoundError,
    ErrorKind,
    IllegalPathError,
    InvariantViolationError,
    KeepsakeConfigError,
    KeepsakeError,
    KeepsakeStoreError,
    StorageIOError,
)
from core.types import EntryMetadata
from store.versioned_store import VersionedStore, open_store

__all__ = [
    "EntryMetadata",
    "EntryNotFoundError",
    "ErrorKind",
    "IllegalPathError",
    "InvariantViolationError",
    "KeepsakeConfig",
    "KeepsakeConfigError",
    "KeepsakeError",
    "KeepsakeStoreError",
    "StorageIOError",
    "VersionedStore",
    "open_store",
]
