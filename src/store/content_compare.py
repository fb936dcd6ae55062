"""Byte-exact file comparison.

This module decides whether a capture would duplicate the newest
historic entry. Sizes are compared before any content is read.
"""

from __future__ import annotations

from pathlib import Path

from core.constants import DEFAULT_COMPARE_CHUNK_SIZE
from store.filesystem import open_for_read, translate_os_errors


def files_equal(
    first: Path,
    second: Path,
    chunk_size: int = DEFAULT_COMPARE_CHUNK_SIZE,
) -> bool:
    """Return whether two files hold identical bytes.

    Args:
        first: First file path.
        second: Second file path.
        chunk_size: Bytes read from each file per step.

    Returns:
        True only when both streams end together with every chunk equal.

    Raises:
        EntryNotFoundError: If either file is missing.
        StorageIOError: If either file cannot be read.
    """
    with translate_os_errors("compare", first):
        first_size = first.stat().st_size
    with translate_os_errors("compare", second):
        second_size = second.stat().st_size
    if first_size != second_size:
        return False
    with open_for_read(first, "compare") as first_file, open_for_read(
        second, "compare"
    ) as second_file:
        while True:
            with translate_os_errors("compare", first):
                first_chunk = first_file.read(chunk_size)
            with translate_os_errors("compare", second):
                second_chunk = second_file.read(chunk_size)
            if first_chunk != second_chunk:
                return False
            if not first_chunk:
                return True
