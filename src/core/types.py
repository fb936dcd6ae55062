"""Shared typed models.

This module defines immutable data models returned by the store
facade and consumed by the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class EntryMetadata:
    """Filesystem metadata for a current or historic entry.

    Attributes:
        path: Logical path the entry belongs to.
        generation: Historic generation, or 0 for the current file.
        size_bytes: Content size in bytes.
        mode: Raw ``st_mode`` bits.
        modified_at: UTC modification timestamp.
    """

    path: str
    generation: int
    size_bytes: int
    mode: int
    modified_at: datetime

    @property
    def is_historic(self) -> bool:
        """Return whether this metadata describes a historic entry."""
        return self.generation != 0
