"""Unit tests for directory hygiene."""

from __future__ import annotations

from pathlib import Path

from store.hygiene import (
    clean_directory,
    clean_directory_structure,
    fix_illegal_names,
    remove_stale_temp_files,
)


def test_clean_directory_removes_empty_chain(tmp_path: Path) -> None:
    """Empty ancestors should be removed up to the root."""
    (tmp_path / "a" / "b" / "c").mkdir(parents=True)

    removed = clean_directory(tmp_path / "a" / "b" / "c", tmp_path)

    assert removed == [tmp_path / "a" / "b" / "c", tmp_path / "a" / "b", tmp_path / "a"]
    assert tmp_path.is_dir()


def test_clean_directory_stops_at_non_empty_ancestor(tmp_path: Path) -> None:
    """Pruning should stop at the first ancestor holding anything."""
    (tmp_path / "a" / "b").mkdir(parents=True)
    (tmp_path / "a" / "keep.txt").write_bytes(b"")

    clean_directory(tmp_path / "a" / "b", tmp_path)

    assert (tmp_path / "a").is_dir() and not (tmp_path / "a" / "b").exists()


def test_clean_directory_never_removes_history_root(tmp_path: Path) -> None:
    """The reserved history directory should survive even when empty."""
    (tmp_path / ".history").mkdir()

    removed = clean_directory(tmp_path / ".history", tmp_path)

    assert removed == [] and (tmp_path / ".history").is_dir()


def test_clean_directory_structure_prunes_nested_empties(tmp_path: Path) -> None:
    """Only directories with no files anywhere beneath should go."""
    (tmp_path / "empty" / "directory").mkdir(parents=True)
    (tmp_path / "mixed" / "void").mkdir(parents=True)
    (tmp_path / "mixed" / "full").mkdir(parents=True)
    (tmp_path / "mixed" / "full" / "file").write_bytes(b"x")

    removed = clean_directory_structure(tmp_path)

    assert sorted(path.relative_to(tmp_path).as_posix() for path in removed) == [
        "empty",
        "empty/directory",
        "mixed/void",
    ]
    assert (tmp_path / "mixed" / "full" / "file").exists()


def test_clean_directory_structure_deletes_deepest_first(tmp_path: Path) -> None:
    """Deletion order should run from deepest to shallowest."""
    (tmp_path / "a" / "b" / "c").mkdir(parents=True)

    removed = clean_directory_structure(tmp_path)

    assert [len(path.parts) for path in removed] == sorted(
        (len(path.parts) for path in removed), reverse=True
    )


def test_clean_directory_structure_keeps_protected(tmp_path: Path) -> None:
    """Protected directories and the root should never be deleted."""
    (tmp_path / ".history").mkdir()

    removed = clean_directory_structure(tmp_path, protected=(tmp_path / ".history",))

    assert removed == [] and (tmp_path / ".history").is_dir()


def test_fix_illegal_names_renames_children_and_parents(tmp_path: Path) -> None:
    """Illegal names should be fixed at every depth."""
    (tmp_path / ".hidden" / "v@1").mkdir(parents=True)
    (tmp_path / ".hidden" / "v@1" / ".secret").write_bytes(b"s")
    (tmp_path / "ok@2").write_bytes(b"o")

    renamed = fix_illegal_names(tmp_path)

    assert renamed == 4
    assert (tmp_path / "hidden" / "v_1" / "secret").read_bytes() == b"s"
    assert (tmp_path / "ok_2").read_bytes() == b"o"


def test_fix_illegal_names_skips_history_directory(tmp_path: Path) -> None:
    """Historic entries legitimately contain '@' and must stay put."""
    (tmp_path / ".history" / "dir").mkdir(parents=True)
    (tmp_path / ".history" / "dir" / "file@3").write_bytes(b"")

    renamed = fix_illegal_names(tmp_path)

    assert renamed == 0 and (tmp_path / ".history" / "dir" / "file@3").exists()


def test_fix_illegal_names_never_overwrites_existing(tmp_path: Path) -> None:
    """A fixed name that is already taken should get a numeric suffix."""
    (tmp_path / "notes").write_bytes(b"visible")
    (tmp_path / ".notes").write_bytes(b"hidden")

    fix_illegal_names(tmp_path)

    assert (tmp_path / "notes").read_bytes() == b"visible"
    assert (tmp_path / "notes_1").read_bytes() == b"hidden"


def test_remove_stale_temp_files_keeps_user_and_history_files(tmp_path: Path) -> None:
    """Only staging files in the current tree should be deleted."""
    (tmp_path / "dir").mkdir()
    (tmp_path / "dir" / ".keepsake-tmp-abc123").write_bytes(b"half")
    (tmp_path / "dir" / "a").write_bytes(b"a")
    (tmp_path / ".history").mkdir()
    (tmp_path / ".history" / ".keepsake-tmp-keep").write_bytes(b"")

    removed = remove_stale_temp_files(tmp_path)

    assert removed == 1
    assert sorted(path.name for path in (tmp_path / "dir").iterdir()) == ["a"]
    assert (tmp_path / ".history" / ".keepsake-tmp-keep").exists()
