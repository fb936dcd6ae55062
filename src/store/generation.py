"""Store-wide generation counter.

This module owns the monotonically increasing generation number that
names every historic entry, and its recovery from the history tree.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path

from core.constants import MAX_GENERATION
from core.errors import InvariantViolationError
from store.filesystem import raise_walk_error
from store.paths import parse_generation


class GenerationCounter:
    """Thread-safe fetch-and-increment counter.

    Only the counter value is protected; callers composing it with
    filesystem work get no wider atomicity.
    """

    def __init__(self, start: int = 0) -> None:
        self._value = start
        self._lock = threading.Lock()

    def next_generation(self) -> int:
        """Increment the counter and return the new value.

        Raises:
            InvariantViolationError: If the 64-bit range is exhausted.
        """
        with self._lock:
            if self._value >= MAX_GENERATION:
                raise InvariantViolationError(
                    "Generation counter exhausted the unsigned 64-bit range.",
                    operation="next_generation",
                )
            self._value += 1
            return self._value

    def peek(self) -> int:
        """Return the most recently issued generation."""
        with self._lock:
            return self._value


def scan_max_generation(history_root: Path) -> int:
    """Return the largest generation present under the history tree.

    Entries without a parsable ``@<digits>`` suffix are ignored.

    Args:
        history_root: Root of the historic tree.

    Returns:
        Maximum generation found, or 0 for an empty or missing tree.
    """
    if not history_root.is_dir():
        return 0
    highest = 0
    for _, _, file_names in os.walk(history_root, onerror=raise_walk_error):
        for file_name in file_names:
            highest = max(highest, parse_generation(file_name))
    return highest
