"""
Keyboard state machine for the picker.

A session is one frozen ``SessionState``; ``handle_key`` maps a state and a
decoded key to the next state. Named keys are looked up in
``KEY_HANDLERS``; any other printable character edits the search buffer.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple

import pathspec

from .core import (
    MAX_SEARCH_LENGTH,
    Entry,
    FileReadError,
    serialize_selection,
    success_message,
)

KEY_UP = "UP"
KEY_DOWN = "DOWN"
KEY_LEFT = "LEFT"
KEY_RIGHT = "RIGHT"
KEY_ENTER = "ENTER"
KEY_BACKSPACE = "BACKSPACE"

EMPTY_VIEW_TEXT = "No directories/files matching search."

Relist = Callable[[str], Sequence[Entry]]


@dataclass(frozen=True)
class SessionState:
    view: Tuple[Entry, ...] = ()
    search: str = ""
    cursor: int = 0
    selected: FrozenSet[Path] = field(default_factory=frozenset)
    status: str = ""
    committed: bool = False

    @property
    def current(self) -> Optional[Entry]:
        if not self.view:
            return None
        return self.view[self.cursor]


@dataclass(frozen=True)
class ViewRow:
    name: str
    is_current: bool = False
    is_selected: bool = False
    placeholder: bool = False


def start_session(relist: Relist) -> SessionState:
    return SessionState(view=tuple(relist("")))


def _with_search(state: SessionState, search: str, relist: Relist) -> SessionState:
    if search == state.search:
        return state
    view = tuple(relist(search))
    cursor = min(state.cursor, max(len(view) - 1, 0))
    return replace(state, view=view, search=search, cursor=cursor)


def _erase(state: SessionState, relist: Relist) -> SessionState:
    return _with_search(state, state.search[:-1], relist)


def _request_commit(state: SessionState, relist: Relist) -> SessionState:
    return replace(state, committed=True)


def _move_up(state: SessionState, relist: Relist) -> SessionState:
    if not state.view:
        return state
    cursor = state.cursor - 1 if state.cursor > 0 else len(state.view) - 1
    return replace(state, cursor=cursor)


def _move_down(state: SessionState, relist: Relist) -> SessionState:
    if not state.view:
        return state
    cursor = state.cursor + 1 if state.cursor < len(state.view) - 1 else 0
    return replace(state, cursor=cursor)


def _toggle(state: SessionState, relist: Relist) -> SessionState:
    entry = state.current
    if entry is None:
        return state
    return replace(state, selected=state.selected ^ {entry.path})


KEY_HANDLERS: Dict[str, Callable[[SessionState, Relist], SessionState]] = {
    KEY_BACKSPACE: _erase,
    KEY_ENTER: _request_commit,
    KEY_UP: _move_up,
    KEY_DOWN: _move_down,
    KEY_LEFT: _toggle,
    KEY_RIGHT: _toggle,
}


def handle_key(state: SessionState, key: str, relist: Relist) -> SessionState:
    """Return the state after *key*; *relist* recomputes the view for a search."""
    if state.committed:
        return state
    handler = KEY_HANDLERS.get(key)
    if handler is not None:
        return handler(state, relist)
    if len(key) == 1 and key.isprintable() and len(state.search) < MAX_SEARCH_LENGTH:
        return _with_search(state, state.search + key, relist)
    return state


def build_view(state: SessionState) -> List[ViewRow]:
    if not state.view:
        return [ViewRow(name=EMPTY_VIEW_TEXT, placeholder=True)]
    return [
        ViewRow(
            name=entry.name,
            is_current=index == state.cursor,
            is_selected=entry.path in state.selected,
        )
        for index, entry in enumerate(state.view)
    ]


def build_document(
    state: SessionState,
    snapshot: Sequence[Entry],
    nested_exclude_spec: Optional["pathspec.PathSpec"] = None,
) -> Tuple[str, int]:
    """
    Serialize the selection against *snapshot*, a fresh unfiltered listing.

    Selected entries hidden by the current search are still included. A
    selected path that no longer exists in the snapshot raises
    ``FileReadError``.
    """
    listed = {entry.path for entry in snapshot}
    missing = sorted(str(p) for p in state.selected - listed)
    if missing:
        raise FileReadError(f"Selected entries no longer exist: {', '.join(missing)}")
    return serialize_selection(snapshot, state.selected, nested_exclude_spec)


def commit(
    state: SessionState,
    snapshot: Sequence[Entry],
    copy: Callable[[str], None],
    nested_exclude_spec: Optional["pathspec.PathSpec"] = None,
) -> Tuple[SessionState, int]:
    """
    Build the document, hand it to *copy* and return the state carrying the
    success status. Errors from either step propagate and leave no status.
    """
    document, file_count = build_document(state, snapshot, nested_exclude_spec)
    copy(document)
    return replace(state, status=success_message(file_count)), file_count
