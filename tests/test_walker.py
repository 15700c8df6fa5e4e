"""Tests for clean_lint/walker.py"""

import ast
import os

import pytest

from clean_lint.walker import (
    ModuleContext,
    SourceNotFoundError,
    SourceWalker,
    extract_comments,
    iter_source_files,
    read_source,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _touch(root, *relative: str) -> None:
    for rel in relative:
        path = root.joinpath(*rel.split("/"))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("VALUE = 1\n")


def _rel(root, paths: list[str]) -> list[str]:
    return [os.path.relpath(p, root).replace(os.sep, "/") for p in paths]


# ---------------------------------------------------------------------------
# iter_source_files()
# ---------------------------------------------------------------------------

def test_walks_directories_for_python_files(tmp_path):
    _touch(tmp_path, "pkg/b.py", "pkg/a.py", "pkg/notes.txt", "pkg/sub/c.py")
    found = iter_source_files([str(tmp_path)])
    assert _rel(tmp_path, found) == ["pkg/a.py", "pkg/b.py", "pkg/sub/c.py"]


def test_skips_tool_directories(tmp_path):
    _touch(tmp_path, "app.py", ".venv/lib/site.py", "pkg/__pycache__/cached.py", ".git/hook.py")
    assert _rel(tmp_path, iter_source_files([str(tmp_path)])) == ["app.py"]


def test_exclude_matches_relative_path_and_file_name(tmp_path):
    _touch(tmp_path, "app.py", "migrations/0001_initial.py", "pkg/test_app.py")
    found = iter_source_files([str(tmp_path)], exclude=["migrations/*", "test_*"])
    assert _rel(tmp_path, found) == ["app.py"]


def test_explicit_file_is_kept_and_deduplicated(tmp_path):
    _touch(tmp_path, "pkg/a.py", "script")
    found = iter_source_files([
        str(tmp_path / "pkg"),
        str(tmp_path / "pkg" / "a.py"),
        str(tmp_path / "script"),
    ])
    assert _rel(tmp_path, found) == ["pkg/a.py", "script"]


def test_missing_path_raises(tmp_path):
    with pytest.raises(SourceNotFoundError, match="Path not found"):
        iter_source_files([str(tmp_path / "nowhere")])


# ---------------------------------------------------------------------------
# read_source() / extract_comments()
# ---------------------------------------------------------------------------

def test_read_source_honours_encoding_cookie(tmp_path):
    path = tmp_path / "latin.py"
    path.write_bytes("# -*- coding: latin-1 -*-\nname = 'caf\xe9'\n".encode("latin-1"))
    assert "café" in read_source(str(path))


def test_extract_comments():
    comments = extract_comments("x = 1  # trailing\n# ---- own line\ntext = '# not a comment'\n")
    assert [(c.line, c.column, c.text) for c in comments] == [
        (1, 7, "trailing"),
        (2, 0, "---- own line"),
    ]
    assert comments[1].raw == "# ---- own line"


# ---------------------------------------------------------------------------
# ModuleContext / SourceWalker
# ---------------------------------------------------------------------------

SOURCE = """\
TOP = 1

class Shop:
    def buy(self, item):
        total = item

    def _internal(self):
        pass

def helper():
    def inner():
        deep = 2
"""


def test_walker_tracks_enclosing_scopes():
    ctx = ModuleContext.parse("shop.py", SOURCE)
    seen = {}

    def record(node):
        if isinstance(node, ast.Name):
            func = ctx.enclosing_function
            cls = ctx.enclosing_class
            seen[node.id] = (
                func.name if func else None,
                cls.name if cls else None,
                ctx.is_module_level,
            )

    SourceWalker(ctx, record).walk()
    assert seen["TOP"] == (None, None, True)
    assert seen["total"] == ("buy", "Shop", False)
    assert seen["deep"] == ("inner", None, False)
    assert ctx.stack == []


def test_is_method():
    ctx = ModuleContext.parse("shop.py", SOURCE)
    methods = []

    def record(node):
        if isinstance(node, ast.FunctionDef) and ctx.is_method(node):
            methods.append(node.name)

    SourceWalker(ctx, record).walk()
    assert methods == ["buy", "_internal"]


def test_memo_and_first_time():
    ctx = ModuleContext.parse("shop.py", SOURCE)
    calls = []
    assert ctx.memo("answer", lambda: calls.append(1) or 42) == 42
    assert ctx.memo("answer", lambda: calls.append(1) or 0) == 42
    assert calls == [1]
    assert ctx.first_time("names", "total") is True
    assert ctx.first_time("names", "total") is False


def test_parse_raises_on_invalid_source():
    with pytest.raises(SyntaxError):
        ModuleContext.parse("broken.py", "def broken(:\n")
