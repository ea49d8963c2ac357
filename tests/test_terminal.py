import curses
from functools import partial
from pathlib import Path

import pytest

from pickfiles import terminal
from pickfiles.core import list_entries
from pickfiles.session import (
    KEY_BACKSPACE,
    KEY_DOWN,
    KEY_ENTER,
    KEY_LEFT,
    KEY_RIGHT,
    KEY_UP,
    SessionState,
    handle_key,
    start_session,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (curses.KEY_UP, KEY_UP),
        (curses.KEY_DOWN, KEY_DOWN),
        (curses.KEY_LEFT, KEY_LEFT),
        (curses.KEY_RIGHT, KEY_RIGHT),
        (curses.KEY_ENTER, KEY_ENTER),
        ("\n", KEY_ENTER),
        ("\r", KEY_ENTER),
        (curses.KEY_BACKSPACE, KEY_BACKSPACE),
        (curses.KEY_DC, KEY_BACKSPACE),
        ("\x7f", KEY_BACKSPACE),
        ("a", "a"),
        ("é", "é"),
        ("\x1b", None),
        (curses.KEY_RESIZE, None),
    ],
)
def test_decode_key(raw, expected):
    assert terminal.decode_key(raw) == expected


def test_screen_lines_for_empty_view():
    lines, first_row = terminal.screen_lines(SessionState())
    texts = [text for text, _ in lines]
    assert texts[0] == terminal.HEADER
    assert texts[1] == "Search query: None"
    assert texts[first_row] == "No directories/files matching search."
    assert texts[-1] == terminal.FOOTER


def test_screen_lines_marks_rows(project: Path):
    relist = partial(list_entries, project)
    state = start_session(relist)
    state = handle_key(state, KEY_RIGHT, relist)
    state = handle_key(state, "s", relist)
    lines, first_row = terminal.screen_lines(state)
    assert lines[1] == ("Search query: s", terminal._QUERY)
    assert lines[first_row] == ("[✓] docs", terminal._CURRENT)
    assert lines[first_row + 1] == ("[ ] src", 0)


def test_status_is_rendered_last():
    lines, _ = terminal.screen_lines(SessionState(status="done"))
    assert lines[-1] == ("done", terminal._CURRENT)


@pytest.mark.parametrize(
    "total, cursor, visible, expected",
    [(5, 4, 10, 0), (20, 0, 5, 0), (20, 7, 5, 3), (20, 19, 5, 15), (3, 2, 0, 0)],
)
def test_scroll_offset_keeps_cursor_visible(total, cursor, visible, expected):
    assert terminal._scroll_offset(total, cursor, visible) == expected


class FakeScreen:
    def __init__(self, keys, height=24, width=80):
        self.keys = list(keys)
        self.height = height
        self.width = width
        self.frames = []
        self._frame = []

    def getmaxyx(self):
        return self.height, self.width

    def keypad(self, flag):
        pass

    def erase(self):
        self._frame = []

    def addnstr(self, y, x, text, n, attr=0):
        self._frame.append(text[:n])

    def refresh(self):
        self.frames.append(self._frame)

    def get_wch(self):
        return self.keys.pop(0)


def test_run_picker_commits_selection(project: Path, monkeypatch):
    monkeypatch.setattr(terminal, "_init_colours", lambda: None)
    monkeypatch.setattr(curses, "color_pair", lambda n: n)
    monkeypatch.setattr(curses, "curs_set", lambda n: None)
    sleeps = []
    monkeypatch.setattr(terminal.time, "sleep", sleeps.append)

    relist = partial(list_entries, project)
    screen = FakeScreen([curses.KEY_DOWN, curses.KEY_DOWN, curses.KEY_RIGHT, "\n", "x"])
    committed = []

    def on_commit(state):
        committed.append(state)
        return SessionState(
            view=state.view, selected=state.selected, status="copied", committed=True
        )

    final = terminal.run_picker(screen, start_session(relist), relist, on_commit)

    assert final.status == "copied"
    assert committed[0].selected == {project / "a.txt"}
    assert screen.keys == ["x"]
    assert "copied" in screen.frames[-1]
    assert sleeps == [terminal.EXIT_DELAY]
