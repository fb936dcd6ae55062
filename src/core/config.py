"""Runtime configuration model for Keepsake.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_COMPARE_CHUNK_SIZE, DEFAULT_STORE_ROOT
from core.errors import KeepsakeConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class KeepsakeConfig:
    """Validated runtime configuration.

    Attributes:
        store_root: Directory holding the current tree and its history.
        compare_chunk_size: Bytes read per chunk when comparing contents.
        recover_on_open: Whether opening a store fixes illegal names and
            prunes empty directories before scanning generations.
    """

    store_root: Path
    compare_chunk_size: int = DEFAULT_COMPARE_CHUNK_SIZE
    recover_on_open: bool = True

    @classmethod
    def from_env(cls) -> "KeepsakeConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            KeepsakeConfigError: If environment values are invalid.
        """
        store_root_value = os.getenv("KEEPSAKE_ROOT", str(DEFAULT_STORE_ROOT))
        chunk_size_value = os.getenv(
            "KEEPSAKE_COMPARE_CHUNK_BYTES", str(DEFAULT_COMPARE_CHUNK_SIZE)
        )
        recover_value = os.getenv("KEEPSAKE_RECOVER_ON_OPEN", "true")
        return cls(
            store_root=Path(store_root_value).expanduser().resolve(),
            compare_chunk_size=_parse_chunk_size(chunk_size_value),
            recover_on_open=_parse_flag("KEEPSAKE_RECOVER_ON_OPEN", recover_value),
        )


def _parse_chunk_size(raw_value: str) -> int:
    """Parse the compare chunk size environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Positive chunk size in bytes.

    Raises:
        KeepsakeConfigError: If value is not a positive integer.
    """
    try:
        chunk_size = int(raw_value)
    except ValueError as error:
        raise KeepsakeConfigError(
            "Invalid KEEPSAKE_COMPARE_CHUNK_BYTES value: "
            f"expected integer, got '{raw_value}'. "
            "Set KEEPSAKE_COMPARE_CHUNK_BYTES to a positive number of bytes."
        ) from error
    if chunk_size <= 0:
        raise KeepsakeConfigError(
            "Invalid KEEPSAKE_COMPARE_CHUNK_BYTES value: "
            f"expected a positive integer, got {chunk_size}."
        )
    return chunk_size


def _parse_flag(variable_name: str, raw_value: str) -> bool:
    """Parse a boolean environment flag.

    Args:
        variable_name: Environment variable name used in errors.
        raw_value: Raw string from environment.

    Returns:
        Parsed boolean.

    Raises:
        KeepsakeConfigError: If value is not a recognized flag.
    """
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise KeepsakeConfigError(
        f"Invalid {variable_name} value: expected one of "
        f"{', '.join(_TRUE_VALUES + _FALSE_VALUES)}, got '{raw_value}'."
    )
