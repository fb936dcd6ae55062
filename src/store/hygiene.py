"""Directory tree hygiene.

This module prunes empty directories after mutations and during the
store-open recovery sweep, and repairs on-disk names that callers
could never have created through the store.
"""

from __future__ import annotations

import os
from pathlib import Path

from core.constants import HISTORY_DIR_NAME, TEMP_FILE_PREFIX
from core.logging_config import get_logger
from store.filesystem import list_directory, raise_walk_error, translate_os_errors
from store.paths import fixup_name, is_legal_name

_LOGGER = get_logger(__name__)


def clean_directory(directory: Path, stop_at: Path) -> list[Path]:
    """Remove ``directory`` and its ancestors while they are empty.

    Stops at ``stop_at`` (never removed), at the history root, or at the
    first non-empty ancestor.

    Args:
        directory: Directory that may have just become empty.
        stop_at: Store root.

    Returns:
        Removed directories, innermost first.

    Raises:
        OSError: If a directory cannot be read or removed.
    """
    removed: list[Path] = []
    protected = {stop_at, stop_at / HISTORY_DIR_NAME}
    current = directory
    while current not in protected and stop_at in current.parents:
        if not current.is_dir():
            break
        with os.scandir(current) as entries:
            if next(entries, None) is not None:
                break
        current.rmdir()
        removed.append(current)
        current = current.parent
    return removed


def clean_directory_structure(root: Path, protected: tuple[Path, ...] = ()) -> list[Path]:
    """Remove every empty directory beneath ``root``.

    Pass one walks the tree bottom-up and marks a directory removable
    when all of its children are removable directories. Pass two deletes
    the marked directories deepest first.

    Args:
        root: Store root; never removed.
        protected: Extra directories that must survive even when empty.

    Returns:
        Removed directories in deletion order.
    """
    removable: set[str] = set()
    for directory, dir_names, file_names in os.walk(
        root, topdown=False, onerror=raise_walk_error
    ):
        if file_names:
            continue
        children = (os.path.join(directory, name) for name in dir_names)
        if all(child in removable for child in children):
            removable.add(directory)
    keep = {str(root), *(str(path) for path in protected)}
    doomed = sorted(
        (Path(directory) for directory in removable if directory not in keep),
        key=lambda path: len(path.parts),
        reverse=True,
    )
    for directory in doomed:
        with translate_os_errors("prune", directory):
            directory.rmdir()
    if doomed:
        _LOGGER.info("empty_directories_pruned", root=str(root), count=len(doomed))
    return doomed


def is_temp_file_name(name: str) -> bool:
    """Return whether ``name`` is a copy staging file."""
    return name.startswith(TEMP_FILE_PREFIX)


def remove_stale_temp_files(root: Path) -> int:
    """Delete staging files left in the current tree by interrupted copies.

    Must run before ``fix_illegal_names``, which would otherwise turn a
    half-written staging file into a visible user file.

    Args:
        root: Store root.

    Returns:
        Number of deleted files.
    """
    removed = 0
    for directory, dir_names, file_names in os.walk(root, onerror=raise_walk_error):
        if Path(directory) == root and HISTORY_DIR_NAME in dir_names:
            dir_names.remove(HISTORY_DIR_NAME)
        for name in file_names:
            if not is_temp_file_name(name):
                continue
            stale = Path(directory) / name
            with translate_os_errors("recover", stale):
                stale.unlink()
            _LOGGER.warning("stale_temp_file_removed", path=str(stale))
            removed += 1
    return removed


def fix_illegal_names(root: Path) -> int:
    """Rename on-disk entries whose names fail the legality predicate.

    Children are fixed before their parent so a parent rename never
    invalidates a path still to be visited. The top-level history
    directory is skipped.

    Args:
        root: Store root.

    Returns:
        Number of renamed entries.
    """
    renamed = 0
    for entry in list_directory(root, "fix_names"):
        if entry.name == HISTORY_DIR_NAME:
            continue
        if entry.is_dir(follow_symlinks=False):
            for directory, dir_names, file_names in os.walk(
                entry.path, topdown=False, onerror=raise_walk_error
            ):
                for name in sorted(dir_names + file_names):
                    renamed += _fix_name(Path(directory), name)
        renamed += _fix_name(root, entry.name)
    return renamed


def _fix_name(directory: Path, name: str) -> int:
    """Rename one entry to its nearest legal free name."""
    if is_legal_name(name):
        return 0
    source = directory / name
    target = _free_name(directory, fixup_name(name))
    with translate_os_errors("fix_names", source):
        source.rename(target)
    _LOGGER.info("illegal_name_fixed", source=str(source), target=str(target))
    return 1


def _free_name(directory: Path, name: str) -> Path:
    """Return ``directory / name`` or the first numbered variant not taken."""
    candidate = directory / name
    counter = 0
    while candidate.exists() or candidate.is_symlink():
        counter += 1
        candidate = directory / f"{name}_{counter}"
    return candidate
