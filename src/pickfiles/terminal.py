"""
Curses front end: key decoding, drawing and the event loop.
"""

from __future__ import annotations

import curses
import time
from typing import Callable, List, Optional, Tuple, Union

from .session import (
    KEY_BACKSPACE,
    KEY_DOWN,
    KEY_ENTER,
    KEY_LEFT,
    KEY_RIGHT,
    KEY_UP,
    SessionState,
    Relist,
    build_view,
    handle_key,
)

EXIT_DELAY = 0.1  # seconds the status stays on screen after a commit
TICK = "✓"

HEADER = "Select files and folders to include."
FOOTER = "Use Up / Down to navigate, Left / Right to select, and Enter to proceed."

_CURSES_KEYS = {
    curses.KEY_UP: KEY_UP,
    curses.KEY_DOWN: KEY_DOWN,
    curses.KEY_LEFT: KEY_LEFT,
    curses.KEY_RIGHT: KEY_RIGHT,
    curses.KEY_ENTER: KEY_ENTER,
    curses.KEY_BACKSPACE: KEY_BACKSPACE,
    curses.KEY_DC: KEY_BACKSPACE,
}
_CHAR_KEYS = {
    "\n": KEY_ENTER,
    "\r": KEY_ENTER,
    "\x7f": KEY_BACKSPACE,
    "\b": KEY_BACKSPACE,
}

# colour pair ids
_CURRENT = 1
_SELECTED = 2
_QUERY = 3
_MUTED = 4


def decode_key(raw: Union[int, str]) -> Optional[str]:
    """Map a ``get_wch`` result to a session key, or None to ignore it."""
    if isinstance(raw, int):
        return _CURSES_KEYS.get(raw)
    if raw in _CHAR_KEYS:
        return _CHAR_KEYS[raw]
    if len(raw) == 1 and raw.isprintable():
        return raw
    return None


def screen_lines(state: SessionState) -> Tuple[List[Tuple[str, int]], int]:
    """
    Flatten the view model into ``(text, colour_pair)`` lines.

    Returns the lines and the index of the first list row, so the caller
    can scroll the list without losing the header.
    """
    query = state.search or "None"
    lines: List[Tuple[str, int]] = [
        (HEADER, 0),
        (f"Search query: {query}", _QUERY if state.search else _MUTED),
        ("", 0),
    ]
    first_row = len(lines)
    for row in build_view(state):
        if row.placeholder:
            lines.append((row.name, _MUTED))
            continue
        mark = TICK if row.is_selected else " "
        pair = _CURRENT if row.is_current else _SELECTED if row.is_selected else 0
        lines.append((f"[{mark}] {row.name}", pair))
    lines.append(("", 0))
    lines.append((FOOTER, 0))
    if state.status:
        lines.append(("", 0))
        lines.append((state.status, _CURRENT))
    return lines, first_row


def _scroll_offset(total_rows: int, cursor: int, visible: int) -> int:
    if visible <= 0 or total_rows <= visible:
        return 0
    return min(max(cursor - visible + 1, 0), total_rows - visible)


def draw(stdscr, state: SessionState) -> None:
    height, width = stdscr.getmaxyx()
    lines, first_row = screen_lines(state)
    list_rows = max(len(state.view), 1)
    chrome = len(lines) - list_rows
    offset = _scroll_offset(list_rows, state.cursor, height - chrome)
    visible = lines[:first_row] + lines[first_row + offset:first_row + list_rows]
    visible += lines[first_row + list_rows:]

    stdscr.erase()
    for y, (text, pair) in enumerate(visible[:height]):
        try:
            stdscr.addnstr(y, 0, text, max(width - 1, 0), curses.color_pair(pair))
        except curses.error:
            pass  # writing the bottom-right cell raises
    stdscr.refresh()


def _init_colours() -> None:
    if not curses.has_colors():
        return
    curses.start_color()
    curses.use_default_colors()
    curses.init_pair(_CURRENT, curses.COLOR_GREEN, -1)
    curses.init_pair(_SELECTED, curses.COLOR_CYAN, -1)
    curses.init_pair(_QUERY, curses.COLOR_CYAN, -1)
    curses.init_pair(_MUTED, curses.COLOR_WHITE, -1)


def run_picker(
    stdscr,
    state: SessionState,
    relist: Relist,
    on_commit: Callable[[SessionState], SessionState],
) -> SessionState:
    """
    Process keys until Enter is pressed, run *on_commit*, then keep the
    status on screen for ``EXIT_DELAY`` seconds and return the final state.
    Exceptions raised by *relist* or *on_commit* end the loop.
    """
    try:
        curses.curs_set(0)
    except curses.error:
        pass  # terminal cannot hide the cursor
    _init_colours()
    stdscr.keypad(True)
    while True:
        draw(stdscr, state)
        key = decode_key(stdscr.get_wch())
        if key is None:
            continue
        state = handle_key(state, key, relist)
        if state.committed:
            break

    state = on_commit(state)
    draw(stdscr, state)
    time.sleep(EXIT_DELAY)
    return state
