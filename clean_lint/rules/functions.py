"""Function rules: few arguments, one thing, no side effects, no dead code."""

import ast

from clean_lint.models import Violation
from clean_lint.registry import REGISTRY

_FUNCTIONS = (ast.FunctionDef, ast.AsyncFunctionDef)
_TERMINATORS = (ast.Return, ast.Raise, ast.Continue, ast.Break)
# except* blocks (3.11+)
_TRY_STAR = getattr(ast, "TryStar", ast.Try)
_MUTABLE_LITERALS = (ast.List, ast.Dict, ast.Set, ast.ListComp, ast.DictComp, ast.SetComp)
_MUTABLE_FACTORIES = {"list", "dict", "set", "bytearray", "defaultdict", "OrderedDict", "deque"}


def _is_staticmethod(node) -> bool:
    return any(
        isinstance(d, ast.Name) and d.id == "staticmethod"
        for d in node.decorator_list
    )


def _explicit_params(node, ctx) -> list[ast.arg]:
    """Every named parameter except the implicit self/cls of a method."""
    args = node.args
    positional = list(args.posonlyargs) + list(args.args)
    if ctx.is_method(node) and not _is_staticmethod(node) and positional:
        positional = positional[1:]
    return positional + list(args.kwonlyargs)


def _params_with_defaults(args: ast.arguments):
    """Yield ``(arg, default)`` pairs; default is None when there is none."""
    positional = list(args.posonlyargs) + list(args.args)
    padding = [None] * (len(positional) - len(args.defaults))
    yield from zip(positional, padding + list(args.defaults))
    yield from zip(args.kwonlyargs, args.kw_defaults)


def _body_without_docstring(body: list[ast.stmt]) -> list[ast.stmt]:
    if (
        body
        and isinstance(body[0], ast.Expr)
        and isinstance(body[0].value, ast.Constant)
        and isinstance(body[0].value.value, str)
    ):
        return body[1:]
    return body


@REGISTRY.register(
    "max-params",
    name="Limit function arguments",
    category="functions",
    severity="warning",
    node_types=_FUNCTIONS,
    options={"max": 3},
)
def check_max_params(node, ctx, options):
    """Many parameters make a function hard to test and hard to call
    correctly. Two or fewer is ideal; past that, group related values
    into an object. ``*args``, ``**kwargs`` and ``self`` do not count."""
    count = len(_explicit_params(node, ctx))
    if count > options["max"]:
        yield Violation.at(
            node,
            f"`{node.name}` takes {count} parameters (max {options['max']}); "
            "group related ones into an object",
        )


@REGISTRY.register(
    "function-length",
    name="Functions should do one thing",
    category="functions",
    severity="warning",
    node_types=_FUNCTIONS,
    options={"max_lines": 40},
)
def check_function_length(node, ctx, options):
    """A long function is usually doing more than one thing at more than
    one level of abstraction. The docstring does not count."""
    body = _body_without_docstring(node.body)
    if not body:
        return
    length = node.end_lineno - body[0].lineno + 1
    if length > options["max_lines"]:
        yield Violation.at(
            node,
            f"`{node.name}` body is {length} lines (max {options['max_lines']}); "
            "extract the steps into functions",
        )


@REGISTRY.register(
    "flag-argument",
    name="Don't use flags as function parameters",
    category="functions",
    severity="warning",
    node_types=_FUNCTIONS,
)
def check_flag_argument(node, ctx, options):
    """A boolean parameter announces that the function does more than one
    thing. Split it into two functions instead."""
    for arg, default in _params_with_defaults(node.args):
        is_bool_default = isinstance(default, ast.Constant) and isinstance(default.value, bool)
        is_bool_annotation = isinstance(arg.annotation, ast.Name) and arg.annotation.id == "bool"
        if is_bool_default or is_bool_annotation:
            yield Violation.at(
                arg,
                f"`{arg.arg}` is a boolean flag of `{node.name}`; split the function "
                "into one per behaviour",
            )


@REGISTRY.register(
    "global-statement",
    name="Avoid side effects",
    category="functions",
    severity="warning",
    node_types=(ast.Global,),
)
def check_global_statement(node, ctx, options):
    """Writing to module state from inside a function is a hidden side
    effect that every caller inherits."""
    func = ctx.enclosing_function
    where = f"`{func.name}`" if func else "a class body"
    names = ", ".join(node.names)
    yield Violation.at(node, f"`global {names}` lets {where} mutate module state; return the value instead")


@REGISTRY.register(
    "mutable-default",
    name="Avoid shared mutable defaults",
    category="functions",
    severity="warning",
    node_types=_FUNCTIONS + (ast.Lambda,),
)
def check_mutable_default(node, ctx, options):
    """A mutable default value is created once and shared between calls,
    so a function that mutates it has a side effect on every later call."""
    label = f"`{node.name}`" if isinstance(node, _FUNCTIONS) else "lambda"
    for arg, default in _params_with_defaults(node.args):
        if default is None:
            continue
        is_mutable = isinstance(default, _MUTABLE_LITERALS) or (
            isinstance(default, ast.Call)
            and isinstance(default.func, ast.Name)
            and default.func.id in _MUTABLE_FACTORIES
        )
        if is_mutable:
            yield Violation.at(
                default,
                f"Default of `{arg.arg}` in {label} is mutable and shared between calls; "
                "default to None",
            )


@REGISTRY.register(
    "unreachable-code",
    name="Remove dead code",
    category="functions",
    severity="warning",
    node_types=_FUNCTIONS + (
        ast.Module, ast.ClassDef, ast.If, ast.For, ast.AsyncFor, ast.While,
        ast.With, ast.AsyncWith, ast.Try, _TRY_STAR, ast.ExceptHandler, ast.match_case,
    ),
)
def check_unreachable_code(node, ctx, options):
    """Statements after ``return``, ``raise``, ``continue`` or ``break`` in
    the same block never run. Dead code is as bad as duplicate code."""
    for block_name in ("body", "orelse", "finalbody"):
        block = getattr(node, block_name, None)
        if not isinstance(block, list):
            continue
        for index, stmt in enumerate(block[:-1]):
            if isinstance(stmt, _TERMINATORS):
                keyword = type(stmt).__name__.lower()
                yield Violation.at(block[index + 1], f"Unreachable code after `{keyword}`")
                break
