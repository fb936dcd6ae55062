"""Logical path validation and physical path resolution.

This module owns the legality rules for caller-supplied paths, the
``<base>@<generation>`` naming scheme for historic entries, and the
mapping from logical paths to the current and historic trees.
"""

from __future__ import annotations

import os
import posixpath
import re
from pathlib import Path

from core.constants import (
    GENERATION_SEPARATOR,
    HISTORY_DIR_NAME,
    ILLEGAL_NAME_REPLACEMENT,
    MAX_GENERATION,
)
from core.errors import IllegalPathError

_GENERATION_SUFFIX = re.compile(r"@([0-9]+)\Z")


def normalize_logical_path(path: str) -> str:
    """Return the canonical root-relative form of a logical path.

    ``..`` segments are collapsed against a virtual root so they can
    never climb above the store root.

    Args:
        path: Caller-supplied path.

    Returns:
        Posix path without leading separators; empty for the root.
    """
    cleaned = posixpath.normpath("/" + _unify_separators(path))
    return cleaned.lstrip("/")


def check_legality(path: str, operation: str | None = None) -> str:
    """Validate a caller-supplied logical path.

    Args:
        path: Caller-supplied path.
        operation: Store operation name used in the error.

    Returns:
        The normalized logical path.

    Raises:
        IllegalPathError: If any segment is hidden, contains ``@``,
            or the path names no file at all.
    """
    segments = posixpath.normpath(_unify_separators(path)).split("/")
    named = [segment for segment in segments if segment]
    if not named:
        raise IllegalPathError(
            f"Illegal path '{path}': path is empty or names the store root. "
            "Provide a relative file path such as 'dir/file.txt'.",
            path=path,
            operation=operation,
        )
    for segment in named:
        if not is_legal_name(segment):
            raise IllegalPathError(
                f"Illegal path '{path}': segment '{segment}' starts with '.' "
                f"or contains '{GENERATION_SEPARATOR}'. Rename the path before retrying.",
                path=path,
                operation=operation,
            )
    return normalize_logical_path(path)


def is_legal_name(name: str) -> bool:
    """Return whether a single path segment may be used by callers."""
    if not name or name.startswith("."):
        return False
    return GENERATION_SEPARATOR not in name


def fixup_name(name: str) -> str:
    """Return the nearest legal form of an on-disk name.

    Leading dots are stripped and ``@`` is replaced. Only the recovery
    sweep uses this; live calls reject illegal paths instead.

    Args:
        name: Single path segment.

    Returns:
        A legal segment.
    """
    fixed = name.lstrip(".").replace(GENERATION_SEPARATOR, ILLEGAL_NAME_REPLACEMENT)
    return fixed or ILLEGAL_NAME_REPLACEMENT


def parse_generation(name: str) -> int:
    """Parse the generation suffix from the final segment of a name.

    Args:
        name: File name or path of a historic entry.

    Returns:
        Parsed generation, or 0 when the suffix is absent or invalid.
    """
    return split_historic_name(name)[1]


def split_historic_name(name: str) -> tuple[str, int]:
    """Split a historic entry name into base name and generation.

    Args:
        name: File name or path; only the final segment is examined.

    Returns:
        Pair of base name and generation. Generation is 0 when the
        final segment carries no valid ``@<digits>`` suffix.
    """
    final_segment = posixpath.basename(_unify_separators(name).rstrip("/"))
    match = _GENERATION_SUFFIX.search(final_segment)
    if match is None:
        return final_segment, 0
    generation = int(match.group(1))
    if generation > MAX_GENERATION:
        return final_segment, 0
    return final_segment[: match.start()], generation


def historic_name(base_name: str, generation: int) -> str:
    """Build the file name of a historic entry."""
    return f"{base_name}{GENERATION_SEPARATOR}{generation}"


def _unify_separators(path: str) -> str:
    """Rewrite platform separators to ``/``."""
    unified = path.replace(os.sep, "/")
    if os.altsep:
        unified = unified.replace(os.altsep, "/")
    return unified


class StorePaths:
    """Resolver from logical paths to physical store locations."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.history_root = root / HISTORY_DIR_NAME

    def current(self, path: str) -> Path:
        """Return the physical location of the current file."""
        return _join(self.root, normalize_logical_path(path))

    def historic(self, path: str) -> Path:
        """Return the historic location of ``path`` without a suffix."""
        return _join(self.history_root, normalize_logical_path(path))

    def historic_entry(self, path: str, generation: int) -> Path:
        """Return the physical location of one historic entry."""
        base = self.historic(path)
        return base.with_name(historic_name(base.name, generation))


def _join(base: Path, logical_path: str) -> Path:
    if not logical_path:
        return base
    return base.joinpath(*logical_path.split("/"))
