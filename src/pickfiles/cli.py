"""
CLI entrypoint for pickfiles package.
"""
import argparse
import curses
import locale
import sys
from functools import partial
from pathlib import Path

import pyperclip
from colorama import Fore

from .core import (
    build_exclude_spec,
    echo,
    list_entries,
    resolve_root,
    ClipboardError,
    PickfilesError,
)
from .session import commit, start_session
from .terminal import run_picker


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="pickfiles",
        description="Pick files and folders, then copy their contents to the clipboard.",
    )
    p.add_argument("--root", type=Path, default=Path("."), help="Directory to browse")
    p.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Extra gitwildmatch pattern to hide (repeatable)",
    )
    p.add_argument(
        "--exclude-nested",
        action="store_true",
        help="Also apply exclusions inside selected folders",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return p.parse_args(argv)


def copy_to_clipboard(text: str) -> None:
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        raise ClipboardError(f"Could not copy to clipboard: {e}") from e


def main(argv=None) -> None:
    try:
        ns = _parse_args(argv)
        locale.setlocale(locale.LC_ALL, "")

        try:
            root = resolve_root(ns.root)
        except PickfilesError as e:
            echo(f"Error: {e}", Fore.RED)
            sys.exit(1)

        exclude_spec = build_exclude_spec(ns.exclude)
        nested_spec = exclude_spec if ns.exclude_nested else None
        relist = partial(list_entries, root, exclude_spec)
        if ns.verbose:
            echo(f"[pickfiles] Browsing {root} …")

        counts = {}

        def on_commit(state):
            snapshot = relist("")
            state, file_count = commit(state, snapshot, copy_to_clipboard, nested_spec)
            if ns.verbose:
                counts.update(files=file_count, entries=len(state.selected))
            return state

        try:
            state = curses.wrapper(
                lambda stdscr: run_picker(stdscr, start_session(relist), relist, on_commit)
            )
        except PickfilesError as e:
            echo(f"Error: {e}", Fore.RED)
            sys.exit(1)

        echo(state.status, Fore.GREEN, sys.stdout)
        if ns.verbose and not state.selected:
            echo("[pickfiles] ! Nothing was selected, copied an empty document", Fore.YELLOW)
        if ns.verbose:
            echo(
                f"[pickfiles] Done. {counts['files']} files copied "
                f"from {counts['entries']} selected entries.",
                Fore.GREEN,
            )

    except KeyboardInterrupt:
        echo("\nCancelled.")
        sys.exit(1)
    except Exception as e:
        echo(f"Unexpected error: {e}", Fore.RED)
        sys.exit(1)


if __name__ == "__main__":
    main()
