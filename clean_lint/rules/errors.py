"""Error handling rules."""

import ast

from clean_lint.models import Violation
from clean_lint.registry import REGISTRY


def _is_noop(stmt: ast.stmt) -> bool:
    if isinstance(stmt, (ast.Pass, ast.Continue)):
        return True
    # `...` or a bare string
    return isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Constant)


def _is_print(stmt: ast.stmt) -> bool:
    return (
        isinstance(stmt, ast.Expr)
        and isinstance(stmt.value, ast.Call)
        and isinstance(stmt.value.func, ast.Name)
        and stmt.value.func.id == "print"
    )


@REGISTRY.register(
    "bare-except",
    name="Catch specific exceptions",
    category="errors",
    severity="error",
    node_types=(ast.ExceptHandler,),
)
def check_bare_except(node, ctx, options):
    """``except:`` also catches KeyboardInterrupt and SystemExit and hides
    which failures the code actually expects."""
    if node.type is None:
        yield Violation.at(node, "Bare `except:`; name the exceptions you expect")


@REGISTRY.register(
    "ignored-exception",
    name="Don't ignore caught errors",
    category="errors",
    severity="warning",
    node_types=(ast.ExceptHandler,),
)
def check_ignored_exception(node, ctx, options):
    """Doing nothing with a caught error gives up the chance to fix or react
    to it, and printing it is not much better: the message is lost in the
    noise. Handle it, re-raise it or report it."""
    if all(_is_noop(stmt) for stmt in node.body):
        yield Violation.at(node, "Caught exception is silently ignored; handle, re-raise or report it")
    elif all(_is_noop(stmt) or _is_print(stmt) for stmt in node.body):
        yield Violation.at(node, "Caught exception is only printed; handle, re-raise or report it")
