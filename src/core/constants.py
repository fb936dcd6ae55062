"""Core constants used across Keepsake modules.

This module centralizes on-disk layout names and tuning defaults.
Keeping values here avoids magic literals in store logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_STORE_ROOT = Path(".keepsake")
HISTORY_DIR_NAME = ".history"
GENERATION_SEPARATOR = "@"
ILLEGAL_NAME_REPLACEMENT = "_"
CURRENT_GENERATION = 0
MAX_GENERATION = 2**64 - 1
DEFAULT_COMPARE_CHUNK_SIZE = 64 * 1024
DIRECTORY_MODE = 0o755
TEMP_FILE_PREFIX = ".keepsake-tmp-"
