"""Versioned file store facade.

This module exposes the public store operations. Each one validates
its logical paths, captures history for every path whose current
content is about to change, applies the mutation through the
filesystem collaborator, and prunes directories left empty.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO

from core.config import KeepsakeConfig
from core.constants import CURRENT_GENERATION, HISTORY_DIR_NAME
from core.errors import EntryNotFoundError
from core.logging_config import get_logger
from core.types import EntryMetadata
from store import filesystem
from store.generation import GenerationCounter, scan_max_generation
from store.history import capture_history, list_generations
from store.hygiene import (
    clean_directory,
    clean_directory_structure,
    fix_illegal_names,
    is_temp_file_name,
    remove_stale_temp_files,
)
from store.paths import (
    StorePaths,
    check_legality,
    split_historic_name,
)

_LOGGER = get_logger(__name__)


class VersionedStore:
    """Directory tree that keeps every overwritten version of its files.

    Opening a store is idempotent: the root and history directories are
    created when missing, temp files left by interrupted copies are
    deleted, illegal names left by other tools are fixed, empty
    directories are pruned, and the generation counter resumes
    from the largest generation found on disk.
    """

    def __init__(self, config: KeepsakeConfig) -> None:
        """Open or create a store.

        Args:
            config: Runtime configuration naming the store root.

        Raises:
            StorageIOError: If the recovery sweep cannot complete.
        """
        self._config = config
        self._paths = StorePaths(config.store_root)
        filesystem.ensure_directory(self._paths.root, "open")
        renamed = 0
        discarded = 0
        pruned: list[Path] = []
        if config.recover_on_open:
            discarded = remove_stale_temp_files(self._paths.root)
            renamed = fix_illegal_names(self._paths.root)
            pruned = clean_directory_structure(
                self._paths.root, protected=(self._paths.history_root,)
            )
        filesystem.ensure_directory(self._paths.history_root, "open")
        self._counter = GenerationCounter(scan_max_generation(self._paths.history_root))
        _LOGGER.info(
            "store_opened",
            root=str(self._paths.root),
            generation=self._counter.peek(),
            discarded_temp_files=discarded,
            renamed_entries=renamed,
            pruned_directories=len(pruned),
        )

    @property
    def root(self) -> Path:
        """Return the store root directory."""
        return self._paths.root

    def write(self, path: str) -> BinaryIO:
        """Open a logical file for writing, preserving its prior content.

        The returned handle is truncated and open for reading and
        writing; callers close it, usually with ``with``.

        Args:
            path: Logical path.

        Returns:
            Binary read-write file object.

        Raises:
            IllegalPathError: If ``path`` fails validation.
            StorageIOError: If capture or opening fails.
        """
        logical_path = self._capture(path)
        current = self._paths.current(logical_path)
        filesystem.ensure_directory(current.parent, "write")
        return filesystem.open_for_write(current, "write")

    def open(self, path: str, generation: int = CURRENT_GENERATION) -> BinaryIO:
        """Open the current file or one historic generation for reading.

        Args:
            path: Logical path.
            generation: 0 for the current file, otherwise a generation
                listed by ``history``.

        Returns:
            Binary read-only file object.

        Raises:
            IllegalPathError: If ``path`` fails validation.
            EntryNotFoundError: If the requested entry does not exist.
        """
        logical_path = check_legality(path, operation="open")
        physical = self._physical(logical_path, generation)
        if not filesystem.is_regular_file(physical):
            raise EntryNotFoundError(
                f"No {_describe(generation)} of '{logical_path}' exists.",
                path=logical_path,
                operation="open",
            )
        return filesystem.open_for_read(physical, "open")

    def copy(self, source: str, target: str) -> None:
        """Copy the current content of ``source`` over ``target``.

        Args:
            source: Logical path to copy from.
            target: Logical path to copy to; its prior content is captured.

        Raises:
            IllegalPathError: If either path fails validation.
            EntryNotFoundError: If ``source`` has no current file.
        """
        source_path = self._require_current(source, "copy")
        target_path = self._capture(target)
        filesystem.copy_replace(
            self._paths.current(source_path), self._paths.current(target_path), "copy"
        )
        _LOGGER.info("entry_copied", source=source_path, target=target_path)

    def move(self, source: str, target: str) -> None:
        """Rename ``source`` to ``target``, capturing both beforehand.

        Args:
            source: Logical path to move.
            target: Destination logical path.

        Raises:
            IllegalPathError: If either path fails validation.
            EntryNotFoundError: If ``source`` has no current file.
        """
        source_path = self._require_current(source, "move")
        target_path = self._capture(target)
        self._capture(source_path)
        source_file = self._paths.current(source_path)
        filesystem.rename(source_file, self._paths.current(target_path), "move")
        _LOGGER.info("entry_moved", source=source_path, target=target_path)
        self._prune(source_file.parent)

    def remove(self, path: str) -> None:
        """Delete the current file, keeping its history.

        Args:
            path: Logical path.

        Raises:
            IllegalPathError: If ``path`` fails validation.
            EntryNotFoundError: If ``path`` has no current file.
        """
        logical_path = self._require_current(path, "remove")
        self._capture(logical_path)
        current = self._paths.current(logical_path)
        filesystem.delete_file(current, "remove")
        _LOGGER.info("entry_removed", path=logical_path)
        self._prune(current.parent)

    def list(self, path: str = "", history: bool = False, recursive: bool = False) -> list[str]:
        """List files below a logical directory.

        Args:
            path: Logical directory; empty for the store root.
            history: List logical names that have historic entries
                instead of current files.
            recursive: Descend into subdirectories.

        Returns:
            Sorted root-relative paths of files. Directories are never
            included and historic names carry no generation suffix.

        Raises:
            IllegalPathError: If a non-empty ``path`` fails validation,
                including spellings of the root such as ``.`` or ``/``.
            EntryNotFoundError: If the directory does not exist.
        """
        logical_path = ""
        if path:
            logical_path = check_legality(path, operation="list")
        if history:
            directory = self._paths.historic(logical_path)
        else:
            directory = self._paths.current(logical_path)
        listing = self._list_directory(directory, logical_path, history, recursive)
        return sorted(set(listing))

    def history(self, path: str) -> list[int]:
        """Return the captured generations of ``path``, newest first.

        Raises:
            IllegalPathError: If ``path`` fails validation.
        """
        logical_path = check_legality(path, operation="history")
        return list_generations(self._paths, logical_path)

    def stat(
        self,
        path: str,
        history: bool = False,
        generation: int | None = None,
    ) -> EntryMetadata:
        """Describe the current file or a historic entry.

        Args:
            path: Logical path.
            history: Describe a historic entry instead of the current file.
            generation: Historic generation; the newest when omitted.

        Returns:
            Entry metadata.

        Raises:
            IllegalPathError: If ``path`` fails validation.
            EntryNotFoundError: If the entry does not exist.
        """
        logical_path = check_legality(path, operation="stat")
        target_generation = CURRENT_GENERATION
        if history:
            target_generation = generation or self._newest_generation(logical_path)
        physical = self._physical(logical_path, target_generation)
        status = filesystem.stat_entry(physical, "stat")
        return EntryMetadata(
            path=logical_path,
            generation=target_generation,
            size_bytes=status.st_size,
            mode=status.st_mode,
            modified_at=datetime.fromtimestamp(status.st_mtime, tz=timezone.utc),
        )

    def get_generation(self, increment: bool = False) -> int:
        """Return the store generation, advancing it first when asked."""
        if increment:
            return self._counter.next_generation()
        return self._counter.peek()

    def write_bytes(self, path: str, data: bytes) -> None:
        """Replace the content of ``path`` with ``data``."""
        with self.write(path) as handle:
            handle.write(data)

    def read_bytes(self, path: str, generation: int = CURRENT_GENERATION) -> bytes:
        """Return the content of the current file or a generation."""
        with self.open(path, generation) as handle:
            return handle.read()

    def _capture(self, path: str) -> str:
        """Capture history for ``path`` and return its normalized form."""
        logical_path = check_legality(path, operation="capture")
        capture_history(self._paths, self._counter, logical_path, self._config.compare_chunk_size)
        return logical_path

    def _require_current(self, path: str, operation: str) -> str:
        """Validate ``path`` and require that its current file exists."""
        logical_path = check_legality(path, operation=operation)
        if not filesystem.is_regular_file(self._paths.current(logical_path)):
            raise EntryNotFoundError(
                f"Cannot {operation} '{logical_path}': no current file exists. "
                "Use history to find preserved generations.",
                path=logical_path,
                operation=operation,
            )
        return logical_path

    def _physical(self, logical_path: str, generation: int) -> Path:
        if generation == CURRENT_GENERATION:
            return self._paths.current(logical_path)
        return self._paths.historic_entry(logical_path, generation)

    def _newest_generation(self, logical_path: str) -> int:
        generations = list_generations(self._paths, logical_path)
        if not generations:
            raise EntryNotFoundError(
                f"No historic entries exist for '{logical_path}'.",
                path=logical_path,
                operation="stat",
            )
        return generations[0]

    def _prune(self, directory: Path) -> None:
        """Best-effort removal of directories emptied by a mutation."""
        try:
            clean_directory(directory, self._paths.root)
        except OSError as error:
            _LOGGER.warning(
                "directory_prune_failed",
                directory=str(directory),
                error=str(error),
            )

    def _list_directory(
        self,
        directory: Path,
        logical_path: str,
        history: bool,
        recursive: bool,
    ) -> list[str]:
        listing: list[str] = []
        for entry in filesystem.list_directory(directory, "list"):
            if not logical_path and entry.name == HISTORY_DIR_NAME:
                continue
            entry_path = f"{logical_path}/{entry.name}" if logical_path else entry.name
            if entry.is_dir():
                if recursive:
                    listing.extend(
                        self._list_directory(Path(entry.path), entry_path, history, recursive)
                    )
                continue
            if not entry.is_file() or is_temp_file_name(entry.name):
                continue
            if history:
                base_name, generation = split_historic_name(entry.name)
                if generation == 0:
                    continue
                entry_path = f"{logical_path}/{base_name}" if logical_path else base_name
            listing.append(entry_path)
        return listing


def open_store(root: str | Path, config: KeepsakeConfig | None = None) -> VersionedStore:
    """Open or create a store rooted at ``root``.

    Args:
        root: Store root directory.
        config: Optional base configuration; its root is replaced.

    Returns:
        Ready-to-use store.
    """
    base_config = config or KeepsakeConfig.from_env()
    resolved_root = Path(root).expanduser().resolve()
    return VersionedStore(replace(base_config, store_root=resolved_root))


def _describe(generation: int) -> str:
    if generation == CURRENT_GENERATION:
        return "current file"
    return f"generation {generation}"
