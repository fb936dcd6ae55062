"""Unit tests for the filesystem collaborator."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import EntryNotFoundError, InvariantViolationError, StorageIOError
from store.filesystem import copy_exclusive, copy_replace, list_directory, translate_os_errors


def test_copy_exclusive_creates_parents_and_copies(tmp_path: Path) -> None:
    """Exclusive copy should create missing parents."""
    (tmp_path / "f1").write_bytes(b"File.")

    copy_exclusive(tmp_path / "f1", tmp_path / "deep" / "f2", "capture")

    assert (tmp_path / "deep" / "f2").read_bytes() == b"File."


def test_copy_exclusive_refuses_to_overwrite(tmp_path: Path) -> None:
    """Exclusive copy should fail and keep the existing target."""
    (tmp_path / "f1").write_bytes(b"Now testing overwriting.")
    (tmp_path / "f2").write_bytes(b"File.")

    with pytest.raises(InvariantViolationError):
        copy_exclusive(tmp_path / "f1", tmp_path / "f2", "capture")

    assert (tmp_path / "f2").read_bytes() == b"File."


def test_copy_replace_overwrites_target(tmp_path: Path) -> None:
    """Replacing copy should overwrite and leave no temporary files."""
    (tmp_path / "f1").write_bytes(b"new")
    (tmp_path / "f2").write_bytes(b"old content")

    copy_replace(tmp_path / "f1", tmp_path / "f2", "copy")

    assert (tmp_path / "f2").read_bytes() == b"new" and sorted(
        entry.name for entry in tmp_path.iterdir()
    ) == ["f1", "f2"]


def test_copy_replace_missing_source_keeps_target(tmp_path: Path) -> None:
    """A failed copy should leave the target untouched."""
    (tmp_path / "f2").write_bytes(b"keep me")

    with pytest.raises(EntryNotFoundError):
        copy_replace(tmp_path / "missing", tmp_path / "f2", "copy")

    assert (tmp_path / "f2").read_bytes() == b"keep me"


def test_translate_os_errors_maps_generic_failures() -> None:
    """Non-missing OS failures should become storage IO errors."""
    with pytest.raises(StorageIOError) as raised:
        with translate_os_errors("write", "some/path"):
            raise PermissionError(13, "Permission denied")

    assert raised.value.operation == "write" and isinstance(raised.value.cause, PermissionError)


def test_list_directory_sorts_by_name(tmp_path: Path) -> None:
    """Directory listings should be name ordered."""
    for name in ("b", "a", "c"):
        (tmp_path / name).write_bytes(b"")

    assert [entry.name for entry in list_directory(tmp_path, "list")] == ["a", "b", "c"]
