"""Object and class rules: Law of Demeter, single responsibility,
composition over inheritance, properties over accessors."""

import ast

from clean_lint.models import Violation
from clean_lint.registry import REGISTRY

_FUNCTIONS = (ast.FunctionDef, ast.AsyncFunctionDef)
_RECEIVERS = {"self", "cls"}
_NEUTRAL_BASES = {"object", "ABC", "Protocol", "Generic"}
_MAX_CHAIN_TEXT = 60


# ---------------------------------------------------------------------------
# Law of Demeter
# ---------------------------------------------------------------------------

def _imported_roots(tree: ast.Module) -> set[str]:
    """Names bound by ``import a.b.c`` (binds ``a``) anywhere in the module."""
    roots: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                roots.add(alias.asname or alias.name.split(".")[0])
    return roots


def _chain(node: ast.Attribute) -> tuple[int, ast.expr]:
    hops = 0
    current: ast.expr = node
    while True:
        if isinstance(current, ast.Call) and isinstance(current.func, ast.Attribute):
            current = current.func
        elif isinstance(current, ast.Attribute):
            hops += 1
            current = current.value
        else:
            return hops, current


def _inside_chain(node: ast.Attribute, ctx) -> bool:
    # a.b.c or a.b().c: the attribute is not the end of its chain
    parent = ctx.parent
    if isinstance(parent, ast.Attribute):
        return parent.value is node
    if isinstance(parent, ast.Call) and parent.func is node and len(ctx.stack) > 1:
        grandparent = ctx.stack[-2]
        return isinstance(grandparent, ast.Attribute) and grandparent.value is parent
    return False


@REGISTRY.register(
    "law-of-demeter",
    name="Talk only to immediate friends",
    category="objects",
    severity="info",
    node_types=(ast.Attribute,),
    options={"max_depth": 2, "ignore_roots": []},
)
def check_law_of_demeter(node, ctx, options):
    """Reaching through an object into the objects it holds couples the
    caller to their structure. Ask the nearest object for what you need.
    Chains rooted at an imported module are module paths, not objects."""
    if _inside_chain(node, ctx):
        return  # only the outermost attribute of a chain is measured

    hops, root = _chain(node)
    if isinstance(root, ast.Name):
        if root.id in options["ignore_roots"]:
            return
        if root.id in ctx.memo("imported-roots", lambda: _imported_roots(ctx.tree)):
            return
        if root.id in _RECEIVERS:
            hops -= 1

    if hops > options["max_depth"]:
        text = ast.unparse(node)
        if len(text) > _MAX_CHAIN_TEXT:
            text = text[: _MAX_CHAIN_TEXT - 3] + "..."
        yield Violation.at(
            node,
            f"`{text}` reaches through {hops} objects (max {options['max_depth']}); "
            "ask the nearest object for what you need",
        )


# ---------------------------------------------------------------------------
# Classes
# ---------------------------------------------------------------------------

@REGISTRY.register(
    "too-many-methods",
    name="Single responsibility",
    category="objects",
    severity="warning",
    node_types=(ast.ClassDef,),
    options={"max_methods": 10},
)
def check_too_many_methods(node, ctx, options):
    """A class with many public methods usually has more than one reason to
    change. A journal that also knows how to persist itself should hand
    persistence to a separate class."""
    public = [
        child for child in node.body
        if isinstance(child, _FUNCTIONS) and not child.name.startswith("_")
    ]
    if len(public) > options["max_methods"]:
        yield Violation.at(
            node,
            f"Class `{node.name}` has {len(public)} public methods (max {options['max_methods']}); "
            "split its responsibilities",
        )


def _base_name(base: ast.expr) -> str | None:
    if isinstance(base, ast.Subscript):
        base = base.value
    if isinstance(base, ast.Name):
        return base.id
    if isinstance(base, ast.Attribute):
        return base.attr
    return None


def _module_classes(tree: ast.Module) -> dict[str, ast.ClassDef]:
    return {n.name: n for n in tree.body if isinstance(n, ast.ClassDef)}


def inheritance_depth(cls: ast.ClassDef, classes: dict[str, ast.ClassDef], _seen=None) -> int:
    """Length of the longest base-class chain; bases outside the module count one."""
    seen = _seen or set()
    if cls.name in seen:
        return 0
    seen = seen | {cls.name}
    deepest = 0
    for base in cls.bases:
        name = _base_name(base)
        if name is None or name in _NEUTRAL_BASES:
            continue
        if name in classes and classes[name] is not cls:
            deepest = max(deepest, 1 + inheritance_depth(classes[name], classes, seen))
        else:
            deepest = max(deepest, 1)
    return deepest


@REGISTRY.register(
    "deep-inheritance",
    name="Prefer composition over inheritance",
    category="objects",
    severity="info",
    node_types=(ast.ClassDef,),
    options={"max_depth": 3},
)
def check_deep_inheritance(node, ctx, options):
    """Deep hierarchies spread one behaviour over many files and make every
    change ripple downwards. Prefer "has-a" over "is-a"."""
    classes = ctx.memo("module-classes", lambda: _module_classes(ctx.tree))
    depth = inheritance_depth(node, classes)
    if depth > options["max_depth"]:
        yield Violation.at(
            node,
            f"`{node.name}` sits {depth} levels deep in an inheritance chain "
            f"(max {options['max_depth']}); prefer composition",
        )


@REGISTRY.register(
    "accessor-pair",
    name="Use properties instead of getters and setters",
    category="objects",
    severity="info",
    node_types=(ast.ClassDef,),
)
def check_accessor_pair(node, ctx, options):
    """``get_x`` and ``set_x`` methods are Java-style accessors. A property
    keeps the attribute syntax and still lets you validate or compute."""
    methods = {child.name: child for child in node.body if isinstance(child, _FUNCTIONS)}
    for name, method in methods.items():
        if not name.startswith("get_"):
            continue
        field_name = name[len("get_"):]
        if field_name and f"set_{field_name}" in methods:
            yield Violation.at(
                method,
                f"`{name}`/`set_{field_name}` accessor pair; expose `{field_name}` as a property",
            )
