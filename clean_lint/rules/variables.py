"""Variable rules: searchable names instead of bare literals."""

import ast
import re

from clean_lint.models import Violation
from clean_lint.registry import REGISTRY

_CONSTANT_NAME_RE = re.compile(r"^_*[A-Z][A-Z0-9_]*$")


def _assigns_constant(node: ast.AST) -> bool:
    """True for ``NAME = ...`` / ``NAME: T = ...`` with an UPPER_CASE target."""
    if isinstance(node, ast.Assign):
        targets = node.targets
    elif isinstance(node, ast.AnnAssign):
        targets = [node.target]
    else:
        return False
    return all(isinstance(t, ast.Name) and _CONSTANT_NAME_RE.match(t.id) for t in targets)


def _in_exempt_position(ctx) -> bool:
    """Named constants, default values and annotations are exempt."""
    stack = ctx.stack
    for index, ancestor in enumerate(stack):
        if isinstance(ancestor, ast.arguments) or _assigns_constant(ancestor):
            return True
        below = stack[index + 1] if index + 1 < len(stack) else None
        if below is None:
            continue
        if isinstance(ancestor, ast.AnnAssign) and below is ancestor.annotation:
            return True
        if isinstance(ancestor, (ast.FunctionDef, ast.AsyncFunctionDef)) and below is ancestor.returns:
            return True
    return False


@REGISTRY.register(
    "magic-number",
    name="Use searchable names",
    category="variables",
    severity="info",
    node_types=(ast.Constant,),
    options={"allowed": [-1, 0, 1, 2]},
)
def check_magic_number(node, ctx, options):
    """A bare number says nothing about what it means and cannot be searched
    for. Give it a name as an UPPER_CASE constant."""
    value = node.value
    if isinstance(value, bool) or not isinstance(value, (int, float, complex)):
        return

    located = node
    parent = ctx.parent
    if isinstance(parent, ast.UnaryOp) and isinstance(parent.op, (ast.USub, ast.UAdd)):
        located = parent
        if isinstance(parent.op, ast.USub):
            value = -value

    if value in options["allowed"] or _in_exempt_position(ctx):
        return
    yield Violation.at(located, f"Magic number `{value}`; assign it to a named constant")
