"""Conditional rules: shallow, positive, encapsulated, polymorphic."""

import ast
import re

from clean_lint.models import Violation
from clean_lint.registry import REGISTRY

_FUNCTIONS = (ast.FunctionDef, ast.AsyncFunctionDef)
# except* blocks (3.11+)
_TRY_STAR = getattr(ast, "TryStar", ast.Try)
_NESTING = (ast.For, ast.AsyncFor, ast.While, ast.With, ast.AsyncWith, ast.Try, _TRY_STAR, ast.Match)
_NEGATIVE_NAME_RE = re.compile(r"(^|_)not(_|$)|^(is_|has_|can_)?no_")


# ---------------------------------------------------------------------------
# Nesting depth
# ---------------------------------------------------------------------------

def _blocks(stmt: ast.stmt) -> list[list[ast.stmt]]:
    if isinstance(stmt, ast.Match):
        return [case.body for case in stmt.cases]
    blocks = [getattr(stmt, name, None) or [] for name in ("body", "orelse", "finalbody")]
    if isinstance(stmt, (ast.Try, _TRY_STAR)):
        blocks.extend(handler.body for handler in stmt.handlers)
    return blocks


def _block_depth(stmts: list[ast.stmt], level: int) -> int:
    return max((_stmt_depth(s, level) for s in stmts), default=level)


def _stmt_depth(stmt: ast.stmt, level: int) -> int:
    """Deepest control-flow level reached from *stmt*; ``elif`` does not nest."""
    if isinstance(stmt, ast.If):
        deepest = _block_depth(stmt.body, level + 1)
        if len(stmt.orelse) == 1 and isinstance(stmt.orelse[0], ast.If):
            return max(deepest, _stmt_depth(stmt.orelse[0], level))
        return max(deepest, _block_depth(stmt.orelse, level + 1))
    if isinstance(stmt, _NESTING):
        return max(_block_depth(block, level + 1) for block in _blocks(stmt))
    return level


def nesting_depth(func: ast.FunctionDef | ast.AsyncFunctionDef) -> int:
    """Control-flow depth of *func*'s body, not counting nested definitions."""
    return _block_depth(func.body, 0)


@REGISTRY.register(
    "max-nesting",
    name="Avoid deeply nested conditionals",
    category="conditionals",
    severity="warning",
    node_types=_FUNCTIONS,
    options={"max_depth": 3},
)
def check_max_nesting(node, ctx, options):
    """Every level of nesting is one more condition the reader must hold in
    mind. Return early with guard clauses or extract the inner block."""
    depth = nesting_depth(node)
    if depth > options["max_depth"]:
        yield Violation.at(
            node,
            f"`{node.name}` nests control flow {depth} levels deep (max {options['max_depth']}); "
            "use guard clauses or extract functions",
        )


# ---------------------------------------------------------------------------
# Negative conditionals
# ---------------------------------------------------------------------------

def _identifier(node: ast.AST) -> str | None:
    if isinstance(node, ast.Call):
        node = node.func
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _is_elif(node: ast.If, ctx) -> bool:
    parent = ctx.parent
    return isinstance(parent, ast.If) and len(parent.orelse) == 1 and parent.orelse[0] is node


@REGISTRY.register(
    "negated-condition",
    name="Avoid negative conditionals",
    category="conditionals",
    severity="info",
    node_types=(ast.If, ast.IfExp, ast.UnaryOp),
)
def check_negated_condition(node, ctx, options):
    """Positive conditions read faster. ``if not x: a else: b`` is ``if x:
    b else: a`` turned inside out, and ``not is_not_ready()`` is a double
    negative."""
    if isinstance(node, ast.UnaryOp):
        if not isinstance(node.op, ast.Not):
            return
        name = _identifier(node.operand)
        if name and _NEGATIVE_NAME_RE.search(name.lstrip("_")):
            yield Violation.at(node, f"Double negative `not {name}`; name the positive condition")
        return

    negated = isinstance(node.test, ast.UnaryOp) and isinstance(node.test.op, ast.Not)
    if not negated or not node.orelse:
        return
    if isinstance(node, ast.If) and len(node.orelse) == 1 and isinstance(node.orelse[0], ast.If):
        return
    yield Violation.at(node, "Negated condition with an else branch; swap the branches and drop the `not`")


# ---------------------------------------------------------------------------
# Type checks and complex conditions
# ---------------------------------------------------------------------------

def _is_type_check(test: ast.expr) -> bool:
    if isinstance(test, ast.Call) and isinstance(test.func, ast.Name) and test.func.id == "isinstance":
        return True
    if isinstance(test, ast.Compare) and isinstance(test.left, ast.Call):
        func = test.left.func
        return (
            isinstance(func, ast.Name)
            and func.id == "type"
            and all(isinstance(op, (ast.Is, ast.Eq)) for op in test.ops)
        )
    return False


@REGISTRY.register(
    "type-check-chain",
    name="Avoid conditionals on type",
    category="conditionals",
    severity="warning",
    node_types=(ast.If,),
    options={"min_branches": 2},
)
def check_type_check_chain(node, ctx, options):
    """An if/elif chain that dispatches on ``isinstance`` or ``type()`` is a
    switch statement in disguise; every new type means editing it. Let the
    types carry the behaviour (polymorphism, ``functools.singledispatch``)."""
    if _is_elif(node, ctx):
        return
    branches = 0
    current: ast.AST | None = node
    while isinstance(current, ast.If):
        if _is_type_check(current.test):
            branches += 1
        orelse = current.orelse
        current = orelse[0] if len(orelse) == 1 else None
    if branches >= options["min_branches"]:
        yield Violation.at(
            node,
            f"if/elif chain checks the type in {branches} branches; "
            "use polymorphism or functools.singledispatch",
        )


def _count_operands(expr: ast.expr) -> int:
    if isinstance(expr, ast.BoolOp):
        return sum(_count_operands(v) for v in expr.values)
    if isinstance(expr, ast.UnaryOp) and isinstance(expr.op, ast.Not):
        return _count_operands(expr.operand)
    return 1


@REGISTRY.register(
    "complex-condition",
    name="Encapsulate conditionals",
    category="conditionals",
    severity="info",
    node_types=(ast.If, ast.While, ast.IfExp),
    options={"max_operands": 3},
)
def check_complex_condition(node, ctx, options):
    """A condition built from many ``and``/``or`` operands says how, not
    what. Move it into a well-named function or variable."""
    operands = _count_operands(node.test)
    if operands > options["max_operands"]:
        yield Violation.at(
            node.test,
            f"Condition combines {operands} boolean operands (max {options['max_operands']}); "
            "extract it into a well-named function",
        )
