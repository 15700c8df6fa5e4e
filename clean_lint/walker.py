"""Source discovery and syntax-tree traversal.

Usage:
    for path in iter_source_files(["src", "tool.py"], exclude=["tests/*"]):
        source = read_source(path)
        ctx = ModuleContext.parse(path, source)   # raises SyntaxError
        SourceWalker(ctx, callback).walk()
"""

import ast
import fnmatch
import io
import os
import tokenize
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

SKIP_DIRS = {
    ".git", "__pycache__", ".venv", "venv", "node_modules",
    ".tox", ".mypy_cache", "build", "dist", ".eggs",
}

_FUNCTION_TYPES = (ast.FunctionDef, ast.AsyncFunctionDef)


class SourceNotFoundError(Exception):
    """Raised when a path given on the command line does not exist."""


# ---------------------------------------------------------------------------
# File discovery
# ---------------------------------------------------------------------------

def iter_source_files(paths: Iterable[str], exclude: Iterable[str] = ()) -> list[str]:
    """Return every .py file under *paths*, sorted and without duplicates.

    Exclude globs are matched against the file name and against the path
    relative to the scan root it was found under. Explicit files are kept
    even when they do not end in ``.py``.
    """
    patterns = list(exclude)
    found: set[str] = set()

    for raw in paths:
        root = os.path.abspath(raw)
        if not os.path.exists(root):
            raise SourceNotFoundError(f"Path not found: '{raw}'")

        if os.path.isfile(root):
            if not _is_excluded(os.path.basename(root), os.path.basename(root), patterns):
                found.add(os.path.normpath(raw))
            continue

        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
            for fname in filenames:
                if not fname.endswith(".py"):
                    continue
                full = os.path.join(dirpath, fname)
                rel = os.path.relpath(full, root)
                if _is_excluded(fname, rel, patterns):
                    continue
                found.add(os.path.normpath(os.path.join(raw, rel)))

    return sorted(found)


def _is_excluded(fname: str, rel: str, patterns: list[str]) -> bool:
    rel = rel.replace(os.sep, "/")
    return any(fnmatch.fnmatch(fname, p) or fnmatch.fnmatch(rel, p) for p in patterns)


def read_source(path: str) -> str:
    """Read a Python file, honouring its PEP 263 encoding declaration."""
    with tokenize.open(path) as f:
        return f.read()


# ---------------------------------------------------------------------------
# Module context
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Comment:
    line: int
    column: int
    text: str   # without the leading "#", stripped
    raw: str = ""


@dataclass
class ModuleContext:
    """Everything a rule may look at while a module is being walked."""

    path: str
    source: str
    tree: ast.Module
    lines: list[str] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    stack: list[ast.AST] = field(default_factory=list)
    _memo: dict[str, Any] = field(default_factory=dict, init=False, repr=False)

    @classmethod
    def parse(cls, path: str, source: str) -> "ModuleContext":
        tree = ast.parse(source, path)
        return cls(
            path=path,
            source=source,
            tree=tree,
            lines=source.splitlines(),
            comments=extract_comments(source),
        )

    @property
    def parent(self) -> ast.AST | None:
        return self.stack[-1] if self.stack else None

    @property
    def enclosing_function(self) -> ast.FunctionDef | ast.AsyncFunctionDef | None:
        for node in reversed(self.stack):
            if isinstance(node, _FUNCTION_TYPES):
                return node
        return None

    @property
    def enclosing_class(self) -> ast.ClassDef | None:
        """The class whose body directly or indirectly holds the node."""
        for node in reversed(self.stack):
            if isinstance(node, ast.ClassDef):
                return node
        return None

    @property
    def is_module_level(self) -> bool:
        """True when no function or class encloses the current node."""
        return not any(isinstance(n, (*_FUNCTION_TYPES, ast.ClassDef, ast.Lambda)) for n in self.stack)

    def is_method(self, node: ast.AST) -> bool:
        """True when *node* is a function defined directly in a class body."""
        return isinstance(node, _FUNCTION_TYPES) and isinstance(self.parent, ast.ClassDef)

    def memo(self, key: str, factory: Callable[[], Any]) -> Any:
        """Compute a per-module value once and reuse it across nodes."""
        if key not in self._memo:
            self._memo[key] = factory()
        return self._memo[key]

    def first_time(self, key: str, item: Any) -> bool:
        """True the first time *item* is seen under *key* in this module."""
        seen = self.memo(f"seen:{key}", set)
        if item in seen:
            return False
        seen.add(item)
        return True


def extract_comments(source: str) -> list[Comment]:
    """Return every ``#`` comment in *source* in line order."""
    comments: list[Comment] = []
    readline = io.StringIO(source).readline
    try:
        for tok in tokenize.generate_tokens(readline):
            if tok.type == tokenize.COMMENT:
                line, col = tok.start
                comments.append(Comment(line, col, tok.string.lstrip("#").strip(), tok.string))
    except (tokenize.TokenError, SyntaxError):
        # ast.parse already accepted the module; keep what was tokenized.
        pass
    return comments


# ---------------------------------------------------------------------------
# Walker
# ---------------------------------------------------------------------------

class SourceWalker(ast.NodeVisitor):
    """Depth-first, source-order traversal with an ancestor stack.

    *callback* is called with every node while ``ctx.stack`` holds the
    node's ancestors (outermost first).
    """

    def __init__(self, ctx: ModuleContext, callback: Callable[[ast.AST], None]) -> None:
        self.ctx = ctx
        self._callback = callback

    def walk(self) -> None:
        self.ctx.stack.clear()
        self.visit(self.ctx.tree)

    def generic_visit(self, node: ast.AST) -> None:
        self._callback(node)
        self.ctx.stack.append(node)
        try:
            super().generic_visit(node)
        finally:
            self.ctx.stack.pop()

