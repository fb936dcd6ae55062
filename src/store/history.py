"""Snapshot-before-mutate history capture.

This module copies the current content of a logical file into a new
immutable historic entry. Every store mutation calls
``capture_history`` for the affected path before touching it.
"""

from __future__ import annotations

from core.constants import DEFAULT_COMPARE_CHUNK_SIZE
from core.logging_config import get_logger
from store.content_compare import files_equal
from store.filesystem import copy_exclusive, is_regular_file, list_directory
from store.generation import GenerationCounter
from store.paths import StorePaths, check_legality, split_historic_name

_LOGGER = get_logger(__name__)


def list_generations(paths: StorePaths, path: str) -> list[int]:
    """List captured generations of a logical path, newest first.

    Args:
        paths: Store path resolver.
        path: Logical path.

    Returns:
        Generations sorted strictly descending; empty when nothing
        was ever captured.
    """
    historic = paths.historic(path)
    if not historic.parent.is_dir():
        return []
    generations: list[int] = []
    for entry in list_directory(historic.parent, "history"):
        base_name, generation = split_historic_name(entry.name)
        if base_name == historic.name and generation != 0 and entry.is_file():
            generations.append(generation)
    return sorted(generations, reverse=True)


def capture_history(
    paths: StorePaths,
    counter: GenerationCounter,
    path: str,
    chunk_size: int = DEFAULT_COMPARE_CHUNK_SIZE,
) -> int | None:
    """Preserve the current content of ``path`` as a new generation.

    Must complete before the mutation it guards is applied.

    Args:
        paths: Store path resolver.
        counter: Store generation counter.
        path: Caller-supplied logical path.
        chunk_size: Compare chunk size for deduplication.

    Returns:
        The captured generation, or None when there was no current file
        or its content already matches the newest historic entry.

    Raises:
        IllegalPathError: If ``path`` fails validation.
        InvariantViolationError: If the target entry name already exists.
        StorageIOError: If reading or copying fails.
    """
    logical_path = check_legality(path, operation="capture")
    current = paths.current(logical_path)
    if not is_regular_file(current):
        return None
    generations = list_generations(paths, logical_path)
    if generations:
        newest = paths.historic_entry(logical_path, generations[0])
        if files_equal(current, newest, chunk_size):
            _LOGGER.debug(
                "capture_skipped_unchanged",
                path=logical_path,
                generation=generations[0],
            )
            return None
    generation = counter.next_generation()
    copy_exclusive(current, paths.historic_entry(logical_path, generation), "capture")
    _LOGGER.info("history_captured", path=logical_path, generation=generation)
    return generation
