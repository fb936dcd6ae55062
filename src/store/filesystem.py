"""Filesystem collaborator for the versioned store.

This module wraps the raw file primitives the store composes: opening,
copying, renaming, deleting and enumerating. It is the single place
where ``OSError`` is translated into store errors.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

from core.constants import DIRECTORY_MODE, TEMP_FILE_PREFIX
from core.errors import (
    EntryNotFoundError,
    InvariantViolationError,
    KeepsakeStoreError,
    StorageIOError,
)


@contextmanager
def translate_os_errors(operation: str, path: Path | str) -> Iterator[None]:
    """Re-raise ``OSError`` from the wrapped block as a store error.

    Args:
        operation: Store operation name.
        path: Path the block operates on.

    Raises:
        EntryNotFoundError: For missing files or directories.
        StorageIOError: For every other filesystem failure.
    """
    try:
        yield
    except KeepsakeStoreError:
        raise
    except OSError as error:
        raise _as_store_error(error, operation, path) from error


def _as_store_error(error: OSError, operation: str, path: Path | str) -> KeepsakeStoreError:
    """Map an ``OSError`` onto the store error taxonomy."""
    if isinstance(error, FileNotFoundError):
        return EntryNotFoundError(
            f"{operation} failed: no entry at {path}.",
            path=str(path),
            operation=operation,
        )
    return StorageIOError(
        f"{operation} failed at {path}: {error.strerror or error}. "
        "Check permissions and free space, then retry.",
        path=str(path),
        operation=operation,
    )


def raise_walk_error(error: OSError) -> None:
    """``os.walk`` error hook that surfaces scan failures."""
    raise StorageIOError(
        f"Directory scan failed at {error.filename}: {error.strerror or error}.",
        path=str(error.filename),
        operation="scan",
    ) from error


def ensure_directory(directory: Path, operation: str) -> None:
    """Create ``directory`` and its parents when missing."""
    with translate_os_errors(operation, directory):
        directory.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)


def is_regular_file(path: Path) -> bool:
    """Return whether ``path`` is an existing regular file."""
    return path.is_file()


def open_for_write(path: Path, operation: str) -> BinaryIO:
    """Create or truncate ``path`` for read-write binary access."""
    with translate_os_errors(operation, path):
        return open(path, "w+b")


def open_for_read(path: Path, operation: str) -> BinaryIO:
    """Open an existing file for binary reading."""
    with translate_os_errors(operation, path):
        return open(path, "rb")


def copy_exclusive(source: Path, target: Path, operation: str) -> None:
    """Copy ``source`` into a new file that must not already exist.

    A partially written target is removed before the error propagates.

    Raises:
        InvariantViolationError: If ``target`` already exists.
        StorageIOError: If reading or writing fails.
    """
    ensure_directory(target.parent, operation)
    with translate_os_errors(operation, source):
        source_file = open(source, "rb")
    with source_file:
        try:
            target_file = open(target, "xb")
        except FileExistsError as error:
            raise InvariantViolationError(
                f"Refusing to overwrite existing historic entry {target}. "
                "The generation counter is behind the history tree; reopen the store.",
                path=str(target),
                operation=operation,
            ) from error
        except OSError as error:
            raise _as_store_error(error, operation, target) from error
        try:
            with target_file:
                shutil.copyfileobj(source_file, target_file)
        except OSError as error:
            target.unlink(missing_ok=True)
            raise _as_store_error(error, operation, target) from error


def copy_replace(source: Path, target: Path, operation: str) -> None:
    """Copy ``source`` over ``target`` through a temporary sibling file.

    The target is only replaced once the full copy is on disk.
    """
    ensure_directory(target.parent, operation)
    with translate_os_errors(operation, source):
        source_file = open(source, "rb")
    with source_file:
        with translate_os_errors(operation, target):
            handle, temp_name = tempfile.mkstemp(prefix=TEMP_FILE_PREFIX, dir=target.parent)
        temp_path = Path(temp_name)
        try:
            with os.fdopen(handle, "wb") as temp_file:
                shutil.copyfileobj(source_file, temp_file)
            shutil.copymode(source, temp_path)
            os.replace(temp_path, target)
        except OSError as error:
            temp_path.unlink(missing_ok=True)
            raise _as_store_error(error, operation, target) from error


def rename(source: Path, target: Path, operation: str) -> None:
    """Rename ``source`` to ``target``, creating target parents."""
    ensure_directory(target.parent, operation)
    with translate_os_errors(operation, source):
        os.replace(source, target)


def delete_file(path: Path, operation: str) -> None:
    """Delete a regular file."""
    with translate_os_errors(operation, path):
        path.unlink()


def list_directory(directory: Path, operation: str) -> list[os.DirEntry[str]]:
    """Return directory entries sorted by name."""
    with translate_os_errors(operation, directory):
        with os.scandir(directory) as entries:
            return sorted(entries, key=lambda entry: entry.name)


def stat_entry(path: Path, operation: str) -> os.stat_result:
    """Return ``os.stat`` for an existing regular file."""
    with translate_os_errors(operation, path):
        status = path.stat()
    if not path.is_file():
        raise EntryNotFoundError(
            f"{operation} failed: {path} is not a regular file.",
            path=str(path),
            operation=operation,
        )
    return status
