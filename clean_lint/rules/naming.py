"""Naming rules: meaningful, consistent, context-free names."""

import ast
import fnmatch
import re

from clean_lint.models import Violation
from clean_lint.registry import REGISTRY

_SNAKE_RE = re.compile(r"^_*[a-z][a-z0-9_]*$")
_UPPER_RE = re.compile(r"^_*[A-Z][A-Z0-9_]*$")
_CAPWORDS_RE = re.compile(r"^_*[A-Z][A-Za-z0-9]*$")
_DUNDER_RE = re.compile(r"^__[a-z0-9_]+__$")

_FUNCTIONS = (ast.FunctionDef, ast.AsyncFunctionDef)
_IMPLICIT_ARGS = {"self", "cls", "mcs"}


def to_snake_case(name: str) -> str:
    """``HTTPClient`` -> ``http_client``."""
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name.strip("_"))
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name).lower()


def _binding(node: ast.AST) -> str | None:
    """The identifier *node* binds, if any."""
    if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Store):
        return node.id
    if isinstance(node, ast.arg):
        return node.arg
    if isinstance(node, (*_FUNCTIONS, ast.ClassDef)):
        return node.name
    return None


def _scope_id(ctx) -> int:
    for node in reversed(ctx.stack):
        if isinstance(node, (*_FUNCTIONS, ast.ClassDef, ast.Lambda)):
            return id(node)
    return id(ctx.tree)


def _global_names(func: ast.AST) -> set[str]:
    """Names *func* declares ``global``, ignoring nested scopes."""
    names: set[str] = set()
    pending = list(ast.iter_child_nodes(func))
    while pending:
        node = pending.pop()
        if isinstance(node, ast.Global):
            names.update(node.names)
        elif not isinstance(node, (*_FUNCTIONS, ast.ClassDef, ast.Lambda)):
            pending.extend(ast.iter_child_nodes(node))
    return names


@REGISTRY.register(
    "short-name",
    name="Avoid mental mapping",
    category="naming",
    severity="warning",
    node_types=(ast.Name, ast.arg, *_FUNCTIONS, ast.ClassDef),
    options={"min_length": 2, "allowed": ["_", "i", "j", "k", "x", "y"]},
)
def check_short_name(node, ctx, options):
    """Names shorter than the minimum length force the reader to translate
    them in their head. Explicit is better than implicit."""
    name = _binding(node)
    if name is None or name in options["allowed"] or name in _IMPLICIT_ARGS:
        return
    core = name.strip("_")
    if not core or len(core) >= options["min_length"]:
        return
    if not ctx.first_time("short-name", (_scope_id(ctx), name)):
        return
    yield Violation.at(node, f"Name `{name}` is too short to say what it holds; spell it out")


@REGISTRY.register(
    "naming-convention",
    name="Use consistent capitalization",
    category="naming",
    severity="warning",
    node_types=(ast.Name, ast.arg, *_FUNCTIONS, ast.ClassDef),
    options={"ignore": ["setUp*", "tearDown*", "visit_*", "generic_visit", "asyncSetUp", "asyncTearDown"]},
)
def check_naming_convention(node, ctx, options):
    """Classes use CapWords, functions, arguments and locals use snake_case,
    module and class level names use snake_case, UPPER_CASE constants or
    CapWords aliases."""
    name = _binding(node)
    if name is None or _DUNDER_RE.match(name) or name.strip("_") == "":
        return
    if any(fnmatch.fnmatchcase(name, pattern) for pattern in options["ignore"]):
        return

    if isinstance(node, ast.ClassDef):
        if not _CAPWORDS_RE.match(name):
            yield Violation.at(node, f"Class `{name}` should use CapWords")
        return

    if isinstance(node, _FUNCTIONS):
        if not _SNAKE_RE.match(name):
            yield Violation.at(node, f"Function `{name}` should use snake_case")
        return

    if isinstance(node, ast.arg):
        if not _SNAKE_RE.match(name):
            yield Violation.at(node, f"Argument `{name}` should use snake_case")
        return

    func = ctx.enclosing_function
    scope = _scope_id(ctx)
    if func is not None and name in ctx.memo(f"global-names:{id(func)}", lambda: _global_names(func)):
        func, scope = None, id(ctx.tree)  # rebinds a module-level name
    if not ctx.first_time("naming-convention", (scope, name)):
        return
    if func is None:
        if not (_SNAKE_RE.match(name) or _UPPER_RE.match(name) or _CAPWORDS_RE.match(name)):
            yield Violation.at(node, f"Name `{name}` should use snake_case, or UPPER_CASE for a constant")
    elif not _SNAKE_RE.match(name):
        yield Violation.at(node, f"Local variable `{name}` should use snake_case")


@REGISTRY.register(
    "redundant-context",
    name="Don't add unneeded context",
    category="naming",
    severity="info",
    node_types=(ast.ClassDef,),
)
def check_redundant_context(node, ctx, options):
    """If the class name already tells you something, don't repeat it in
    its attribute and method names: ``Car.color``, not ``Car.car_color``."""
    prefix = to_snake_case(node.name) + "_"
    reported: set[str] = set()

    for child in node.body:
        if isinstance(child, _FUNCTIONS) and child.name.lstrip("_").startswith(prefix):
            reported.add(child.name)
            yield Violation.at(
                child,
                f"Method `{child.name}` repeats the class name; call it "
                f"`{child.name.lstrip('_')[len(prefix):]}`",
            )

    for attr in _self_attributes(node):
        if attr.attr in reported or not attr.attr.lstrip("_").startswith(prefix):
            continue
        reported.add(attr.attr)
        yield Violation.at(
            attr,
            f"Attribute `{attr.attr}` repeats the class name; call it "
            f"`{attr.attr.lstrip('_')[len(prefix):]}`",
        )


def _self_attributes(cls: ast.ClassDef):
    """``self.x = ...`` targets in the class's own methods."""
    for method in cls.body:
        if not isinstance(method, _FUNCTIONS) or not method.args.args:
            continue
        receiver = method.args.args[0].arg
        for child in ast.walk(method):
            if (
                isinstance(child, ast.Attribute)
                and isinstance(child.ctx, ast.Store)
                and isinstance(child.value, ast.Name)
                and child.value.id == receiver
            ):
                yield child
