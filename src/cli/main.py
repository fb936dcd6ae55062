"""Keepsake CLI entry points.

This module exposes store operations as shell commands.
It maps argparse commands onto VersionedStore calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
import sys
from typing import Any, Sequence

from core.config import KeepsakeConfig
from core.constants import CURRENT_GENERATION
from core.errors import KeepsakeError, KeepsakeStoreError
from store.filesystem import translate_os_errors
from store.versioned_store import VersionedStore


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="keepsake", description="Versioned file store CLI")
    parser.add_argument("--root", help="Override KEEPSAKE_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_write_command(subparsers)
    _add_cat_command(subparsers)
    _add_transfer_commands(subparsers)
    _add_rm_command(subparsers)
    _add_ls_command(subparsers)
    _add_history_command(subparsers)
    _add_stat_command(subparsers)
    _add_generation_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Keepsake CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    handlers = {
        "write": _run_write_command,
        "cat": _run_cat_command,
        "cp": _run_cp_command,
        "mv": _run_mv_command,
        "rm": _run_rm_command,
        "ls": _run_ls_command,
        "history": _run_history_command,
        "stat": _run_stat_command,
        "generation": _run_generation_command,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.error(f"Unsupported command: {args.command}")
        return 2
    try:
        store = _build_store(args.root)
        return handler(store, args)
    except KeepsakeStoreError as error:
        print(f"error={error.kind.value}: {error}", file=sys.stderr)
        return 1
    except KeepsakeError as error:
        print(f"error=config: {error}", file=sys.stderr)
        return 1


def _build_store(root: str | None) -> VersionedStore:
    """Open the store with an optional root override.

    Args:
        root: Optional override path.

    Returns:
        Opened store.
    """
    config = KeepsakeConfig.from_env()
    if root:
        config = replace(config, store_root=Path(root).expanduser().resolve())
    return VersionedStore(config)


def _run_write_command(store: VersionedStore, args: argparse.Namespace) -> int:
    """Handle write command; content comes from --source or stdin."""
    if args.source:
        with translate_os_errors("write", args.source):
            data = Path(args.source).read_bytes()
    else:
        data = sys.stdin.buffer.read()
    store.write_bytes(args.path, data)
    print(f"generation={store.get_generation()}")
    return 0


def _run_cat_command(store: VersionedStore, args: argparse.Namespace) -> int:
    """Handle cat command."""
    data = store.read_bytes(args.path, args.generation)
    sys.stdout.buffer.write(data)
    sys.stdout.flush()
    return 0


def _run_cp_command(store: VersionedStore, args: argparse.Namespace) -> int:
    """Handle cp command."""
    store.copy(args.source, args.target)
    return 0


def _run_mv_command(store: VersionedStore, args: argparse.Namespace) -> int:
    """Handle mv command."""
    store.move(args.source, args.target)
    return 0


def _run_rm_command(store: VersionedStore, args: argparse.Namespace) -> int:
    """Handle rm command."""
    store.remove(args.path)
    return 0


def _run_ls_command(store: VersionedStore, args: argparse.Namespace) -> int:
    """Handle ls command."""
    for entry in store.list(args.path, history=args.history, recursive=args.recursive):
        print(entry)
    return 0


def _run_history_command(store: VersionedStore, args: argparse.Namespace) -> int:
    """Handle history command."""
    for generation in store.history(args.path):
        print(generation)
    return 0


def _run_stat_command(store: VersionedStore, args: argparse.Namespace) -> int:
    """Handle stat command.

    Args:
        store: Opened store.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    history = args.history or args.generation is not None
    metadata = store.stat(args.path, history=history, generation=args.generation)
    print(
        f"{metadata.path}\t"
        f"{metadata.generation}\t"
        f"{metadata.size_bytes}\t"
        f"{oct(metadata.mode)}\t"
        f"{metadata.modified_at.isoformat()}"
    )
    return 0


def _run_generation_command(store: VersionedStore, args: argparse.Namespace) -> int:
    """Handle generation command."""
    print(store.get_generation(increment=args.increment))
    return 0


def _add_write_command(subparsers: Any) -> None:
    """Register write subcommand."""
    parser = subparsers.add_parser("write", help="Replace a file, keeping its prior content")
    parser.add_argument("path", help="Logical file path")
    parser.add_argument("--source", help="Local file to read content from; stdin when omitted")


def _add_cat_command(subparsers: Any) -> None:
    """Register cat subcommand."""
    parser = subparsers.add_parser("cat", help="Print the current or a historic file")
    parser.add_argument("path", help="Logical file path")
    parser.add_argument(
        "--generation",
        type=int,
        default=CURRENT_GENERATION,
        help="Historic generation; 0 for the current file",
    )


def _add_transfer_commands(subparsers: Any) -> None:
    """Register cp and mv subcommands."""
    for name, help_text in (("cp", "Copy a file"), ("mv", "Move a file")):
        parser = subparsers.add_parser(name, help=help_text)
        parser.add_argument("source", help="Source logical path")
        parser.add_argument("target", help="Target logical path")


def _add_rm_command(subparsers: Any) -> None:
    """Register rm subcommand."""
    parser = subparsers.add_parser("rm", help="Remove a file, keeping its history")
    parser.add_argument("path", help="Logical file path")


def _add_ls_command(subparsers: Any) -> None:
    """Register ls subcommand."""
    parser = subparsers.add_parser("ls", help="List files")
    parser.add_argument("path", nargs="?", default="", help="Logical directory; store root by default")
    parser.add_argument("--history", action="store_true", help="List files that have history")
    parser.add_argument("--recursive", action="store_true", help="Descend into subdirectories")


def _add_history_command(subparsers: Any) -> None:
    """Register history subcommand."""
    parser = subparsers.add_parser("history", help="List generations of a file, newest first")
    parser.add_argument("path", help="Logical file path")


def _add_stat_command(subparsers: Any) -> None:
    """Register stat subcommand."""
    parser = subparsers.add_parser("stat", help="Show size, mode and mtime of an entry")
    parser.add_argument("path", help="Logical file path")
    parser.add_argument("--history", action="store_true", help="Describe the newest historic entry")
    parser.add_argument("--generation", type=int, help="Describe a specific historic generation")


def _add_generation_command(subparsers: Any) -> None:
    """Register generation subcommand."""
    parser = subparsers.add_parser("generation", help="Print the store generation counter")
    parser.add_argument("--increment", action="store_true", help="Advance the counter first")
