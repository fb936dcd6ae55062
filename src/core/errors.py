"""Keepsake exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Store errors carry a kind tag, the failing path and the operation name
so callers can branch on ``error.kind`` without parsing messages.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Classification shared by all store errors."""

    ILLEGAL_PATH = "illegal_path"
    NOT_FOUND = "not_found"
    INVARIANT_VIOLATION = "invariant_violation"
    IO_FAILURE = "io_failure"


class KeepsakeError(Exception):
    """Base exception for all Keepsake failures."""


class KeepsakeConfigError(KeepsakeError):
    """Raised for invalid runtime configuration."""


class KeepsakeStoreError(KeepsakeError):
    """Raised for versioned store failures.

    Attributes:
        kind: Error classification.
        path: Logical or physical path the operation failed on.
        operation: Name of the failing store operation.
    """

    kind: ErrorKind = ErrorKind.IO_FAILURE

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.operation = operation

    @property
    def cause(self) -> BaseException | None:
        """Return the underlying exception, if one was chained."""
        return self.__cause__


class IllegalPathError(KeepsakeStoreError):
    """Raised when a caller-supplied logical path fails validation."""

    kind = ErrorKind.ILLEGAL_PATH


class EntryNotFoundError(KeepsakeStoreError):
    """Raised when a current or historic entry does not exist."""

    kind = ErrorKind.NOT_FOUND


class InvariantViolationError(KeepsakeStoreError):
    """Raised when an operation would overwrite an existing historic entry."""

    kind = ErrorKind.INVARIANT_VIOLATION


class StorageIOError(KeepsakeStoreError):
    """Raised when the underlying filesystem fails."""

    kind = ErrorKind.IO_FAILURE
