"""
Core logic for pickfiles package.
"""

from __future__ import annotations

import enum
import locale
import os
import stat
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import AbstractSet, Iterable, Iterator, List, Optional, Sequence, Tuple

import pathspec
from colorama import Style, init as colorama_init

colorama_init()

# Exceptions
class PickfilesError(Exception): ...
class InvalidRootError(PickfilesError): ...
class ListingError(PickfilesError): ...
class StatError(PickfilesError): ...
class FileReadError(PickfilesError): ...
class ClipboardError(PickfilesError): ...

# Defaults & helpers
DEFAULT_PATTERNS: List[str] = [
    ".git",          # VCS data, a file in submodules and worktrees
    "node_modules",  # dependency manager
]
DEFAULT_SPEC = pathspec.PathSpec.from_lines("gitwildmatch", DEFAULT_PATTERNS)

MAX_SEARCH_LENGTH = 50


class EntryKind(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class Entry:
    """One child of a listed directory."""
    name: str
    path: Path
    kind: EntryKind

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


def echo(msg: str, colour: str = "", stream=None) -> None:
    stream = stream or sys.stderr
    if colour:
        stream.write(colour + msg + Style.RESET_ALL + "\n")
    else:
        stream.write(msg + "\n")


def build_exclude_spec(extra: Iterable[str] = ()) -> "pathspec.PathSpec":
    extra = [ln.strip() for ln in extra if ln.strip()]
    if not extra:
        return DEFAULT_SPEC
    return pathspec.PathSpec.from_lines("gitwildmatch", DEFAULT_PATTERNS + extra)


def _is_excluded(spec: Optional["pathspec.PathSpec"], name: str, kind: EntryKind) -> bool:
    if spec is None:
        return False
    # trailing slash lets directory-only patterns like "build/" match
    candidate = name + "/" if kind is EntryKind.DIRECTORY else name
    return spec.match_file(candidate)


def _classify(path: Path) -> EntryKind:
    try:
        mode = path.stat().st_mode
    except OSError as e:
        raise StatError(f"Could not stat '{path}': {e}") from e
    return EntryKind.DIRECTORY if stat.S_ISDIR(mode) else EntryKind.FILE


def _sort_key(entry: Entry) -> Tuple[bool, str]:
    return (not entry.is_dir, locale.strxfrm(entry.name))


def resolve_root(root: Path) -> Path:
    try:
        root = root.resolve()
    except (OSError, RuntimeError) as e:
        raise InvalidRootError(f"Could not resolve root path '{root}': {e}") from e
    if not root.exists():
        raise InvalidRootError(f"Root directory '{root}' does not exist")
    if not root.is_dir():
        raise InvalidRootError(f"Root path '{root}' is not a directory")
    return root


# Entry listing
def list_entries(
    directory: Path,
    exclude_spec: Optional["pathspec.PathSpec"] = DEFAULT_SPEC,
    search: str = "",
) -> List[Entry]:
    """
    Return the immediate children of *directory* as an ordered view.

    Excluded names and names not containing *search* (case-sensitive,
    literal) are dropped. Directories come first, then files, each group in
    locale order. An entry that cannot be classified raises ``StatError``
    instead of being skipped.
    """
    try:
        names = os.listdir(directory)
    except OSError as e:
        raise ListingError(f"Could not list directory '{directory}': {e}") from e

    entries: List[Entry] = []
    for name in names:
        path = directory / name
        kind = _classify(path)
        if _is_excluded(exclude_spec, name, kind):
            continue
        if search not in name:
            continue
        entries.append(Entry(name=name, path=path, kind=kind))
    entries.sort(key=_sort_key)
    return entries


# Serialization
def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(f"Could not read '{path}': {e}") from e


def _file_block(name: str, content: str) -> str:
    return f'<file name="{name}">\n{content}\n</file>\n'


def walk_files(
    directory: Path,
    exclude_spec: Optional["pathspec.PathSpec"] = None,
) -> Iterator[Path]:
    """
    Yield every file beneath *directory* at any depth, depth-first with
    children in name order. Symlinked sub-directories are not entered, so
    a linked folder never hides its target and link cycles cannot form.
    """
    stack = [directory]
    while stack:
        current = stack.pop()
        try:
            names = sorted(os.listdir(current))
        except OSError as e:
            raise ListingError(f"Could not list directory '{current}': {e}") from e

        subdirs: List[Path] = []
        for name in names:
            path = current / name
            kind = _classify(path)
            if _is_excluded(exclude_spec, name, kind):
                continue
            if kind is EntryKind.FILE:
                yield path
                continue
            if path.is_symlink():
                continue
            subdirs.append(path)
        # files of a directory are emitted before its sub-directories
        stack.extend(reversed(subdirs))


def serialize_selection(
    view: Sequence[Entry],
    selected: AbstractSet[Path],
    nested_exclude_spec: Optional["pathspec.PathSpec"] = None,
) -> Tuple[str, int]:
    """
    Build the clipboard document for the entries of *view* whose path is in
    *selected*, in view order.

    Files become ``<file name="NAME">`` blocks. Directories become a
    ``<directory name="NAME">`` wrapper around one block per nested file,
    named by the file's full path; sub-directories add no tag of their own.
    Only files are counted. Any read failure aborts the whole document.
    """
    blocks: List[str] = []
    file_count = 0
    for entry in view:
        if entry.path not in selected:
            continue
        if entry.is_dir:
            inner: List[str] = []
            for path in walk_files(entry.path, nested_exclude_spec):
                inner.append(_file_block(str(path), _read_text(path)))
            file_count += len(inner)
            blocks.append(
                f'<directory name="{entry.name}">\n' + "".join(inner) + "</directory>\n"
            )
        else:
            blocks.append(_file_block(entry.name, _read_text(entry.path)))
            file_count += 1
    return "\n".join(blocks), file_count


def success_message(file_count: int) -> str:
    plural = "" if file_count == 1 else "s"
    return f"✨ {file_count} file{plural} added to your clipboard ✨"
