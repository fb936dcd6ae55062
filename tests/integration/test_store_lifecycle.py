"""Integration tests for end-to-end store workflows."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import EntryNotFoundError
from store.versioned_store import open_store
from tests.store_fixtures import build_sample_tree


def test_write_write_remove_scenario(tmp_path: Path) -> None:
    """History should hold every replaced or deleted version.

    A version is captured just before the mutation that replaces it and
    only when it differs from the newest capture, and a fresh store
    starts at generation 0. Two writes therefore leave only "Hello!" as
    generation 1; the remove then captures "World!" as generation 2.
    """
    store = open_store(tmp_path / "store")
    store.write_bytes("dir/file", b"Hello!")
    store.write_bytes("dir/file", b"World!")

    after_writes = store.history("dir/file")
    store.remove("dir/file")

    assert after_writes == [1]
    assert store.history("dir/file") == [2, 1]
    assert store.read_bytes("dir/file", 1) == b"Hello!"
    assert store.read_bytes("dir/file", 2) == b"World!"
    with pytest.raises(EntryNotFoundError):
        store.open("dir/file", 0)


def test_generations_survive_reopen(tmp_path: Path) -> None:
    """A reopened store should continue numbering after the old maximum."""
    first = open_store(tmp_path / "store")
    first.write_bytes("a.txt", b"1")
    first.write_bytes("a.txt", b"2")
    first.write_bytes("b.txt", b"x")
    first.write_bytes("b.txt", b"y")
    issued_before = first.get_generation()

    reopened = open_store(tmp_path / "store")
    reopened.write_bytes("a.txt", b"3")

    assert issued_before == 2
    assert reopened.history("a.txt") == [3, 1]
    assert reopened.history("b.txt") == [2]


def test_history_survives_move(tmp_path: Path) -> None:
    """A moved-away file should keep its history under the old name."""
    store = open_store(tmp_path / "store")
    store.write_bytes("a", b"first")
    store.write_bytes("a", b"second")

    store.move("a", "b")

    assert store.read_bytes("b") == b"second"
    assert store.history("a") == [2, 1]
    with pytest.raises(EntryNotFoundError):
        store.open("a")


def test_copy_round_trip(tmp_path: Path) -> None:
    """Copied content should match the source at copy time."""
    store = open_store(tmp_path / "store")
    store.write_bytes("src/data.bin", bytes(range(256)) * 600)

    store.copy("src/data.bin", "dst/data.bin")

    assert store.read_bytes("dst/data.bin") == store.read_bytes("src/data.bin")


def test_recursive_listing_contains_only_current_files(tmp_path: Path) -> None:
    """Recursive listings should never expose history or directories."""
    store = open_store(build_sample_tree(tmp_path / "store"))
    store.write_bytes("dir/file", b"changed")

    listing = store.list("", history=False, recursive=True)

    assert listing == ["dir/dir2/file3", "dir/file", "dir/file2"]
    assert all(not entry.startswith(".history") for entry in listing)


def test_reopen_repairs_illegal_names(tmp_path: Path) -> None:
    """Files created behind the store's back should become reachable."""
    root = tmp_path / "store"
    (root / ".drafts").mkdir(parents=True)
    (root / ".drafts" / "v@2.txt").write_bytes(b"draft")

    store = open_store(root)

    assert store.list("", recursive=True) == ["drafts/v_2.txt"]
    assert store.read_bytes("drafts/v_2.txt") == b"draft"
