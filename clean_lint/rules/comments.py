"""Comment rules. Version control remembers what the code used to be;
comments should only explain what the code cannot."""

import ast
import re

from clean_lint.models import Violation
from clean_lint.registry import REGISTRY

_TOOL_PRAGMAS = ("clean-lint:", "noqa", "type:", "pragma", "fmt:", "pylint:", "isort:", "mypy:")
_CODE_STATEMENTS = (
    ast.Assign, ast.AugAssign, ast.Return, ast.Import, ast.ImportFrom,
    ast.Raise, ast.Delete, ast.Global, ast.Nonlocal,
)
_BLOCK_STATEMENTS = (
    ast.If, ast.For, ast.While, ast.With, ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef,
)
_JOURNAL_RE = re.compile(r"^\[?(\d{4}-\d{2}-\d{2}|\d{1,2}/\d{1,2}/\d{2,4})\b")
_MARKER_CHARS = "#=-*~_/+"


def _parses_as_code(text: str) -> bool:
    """True when *text* is one or more Python statements that look like code.

    Prose that happens to parse (``note: something`` is an annotation) is
    not counted; a trailing colon is tried as the head of a block.
    """
    if " " not in text and "(" not in text and "=" not in text:
        return False
    try:
        body = ast.parse(text).body
    except SyntaxError:
        if not text.endswith(":"):
            return False
        try:
            body = ast.parse(text + " pass").body
        except SyntaxError:
            return False
        return len(body) == 1 and isinstance(body[0], _BLOCK_STATEMENTS)

    if not body:
        return False
    for stmt in body:
        if isinstance(stmt, _CODE_STATEMENTS):
            continue
        if isinstance(stmt, ast.AnnAssign) and stmt.value is not None:
            continue
        if isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Call):
            continue
        return False
    return True


@REGISTRY.register(
    "commented-out-code",
    name="Don't leave commented out code",
    category="comments",
    severity="warning",
    node_types=(ast.Module,),
)
def check_commented_out_code(node, ctx, options):
    """Commented-out code rots: nobody dares to delete it and nobody keeps
    it working. Version control keeps the old code if it's ever needed."""
    previous_line = None
    for comment in ctx.comments:
        text = comment.text
        if not text or any(pragma in text for pragma in _TOOL_PRAGMAS):
            continue
        if not _parses_as_code(text):
            continue
        if previous_line is None or comment.line != previous_line + 1:
            yield Violation(comment.line, comment.column, "Commented-out code; delete it")
        previous_line = comment.line


@REGISTRY.register(
    "journal-comment",
    name="Don't keep journal comments",
    category="comments",
    severity="info",
    node_types=(ast.Module,),
)
def check_journal_comment(node, ctx, options):
    """Dated change-log entries in comments duplicate version control
    history and go stale. Use ``git log`` instead."""
    for comment in ctx.comments:
        if _JOURNAL_RE.match(comment.text):
            yield Violation(
                comment.line, comment.column,
                "Journal comment; change history belongs in version control",
            )


@REGISTRY.register(
    "positional-marker",
    name="Avoid positional markers",
    category="comments",
    severity="info",
    node_types=(ast.Module,),
    options={"min_length": 10},
)
def check_positional_marker(node, ctx, options):
    """Banner comments add visual noise. Let functions, classes and
    modules give the code its shape."""
    length = max(options["min_length"], 2)
    pattern = re.compile("([" + re.escape(_MARKER_CHARS) + r"])\1{" + str(length - 1) + ",}")
    for comment in ctx.comments:
        if pattern.search(comment.raw or comment.text):
            yield Violation(
                comment.line, comment.column,
                "Positional marker comment; let the code's structure speak",
            )
