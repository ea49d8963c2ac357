from pathlib import Path

import pytest


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A small working directory with nested folders and excluded names."""
    (tmp_path / "src" / "pkg" / "deep").mkdir(parents=True)
    (tmp_path / "src" / "main.py").write_text("print('hi')", encoding="utf-8")
    (tmp_path / "src" / "pkg" / "util.py").write_text("x = 1", encoding="utf-8")
    (tmp_path / "src" / "pkg" / "deep" / "leaf.txt").write_text("leaf", encoding="utf-8")
    (tmp_path / "docs").mkdir()
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "HEAD").write_text("ref: refs/heads/main", encoding="utf-8")
    (tmp_path / "node_modules").mkdir()
    (tmp_path / "a.txt").write_text("hello", encoding="utf-8")
    (tmp_path / "b.md").write_text("# b", encoding="utf-8")
    return tmp_path
