"""Rule registry: every heuristic the linter knows about.

Usage:
    @REGISTRY.register(
        "max-params",
        name="Limit function parameters",
        category="functions",
        severity="warning",
        node_types=(ast.FunctionDef, ast.AsyncFunctionDef),
        options={"max": 3},
    )
    def check_max_params(node, ctx, options):
        ...
        yield Violation.at(node, "...")

    rule = REGISTRY.get("max-params")      # raises UnknownRuleError
    for rule in REGISTRY: ...              # sorted by id
"""

import ast
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator

from clean_lint.models import CATEGORIES, SEVERITIES, Violation

CheckFunc = Callable[[ast.AST, Any, dict[str, Any]], Iterable[Violation]]

_RULE_ID_RE = re.compile(r"^[a-z][a-z0-9]*(-[a-z0-9]+)*$")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class RegistryError(Exception):
    """Base exception for registry errors."""


class DuplicateRuleError(RegistryError):
    """Raised when two rules are registered under the same id."""


class UnknownRuleError(RegistryError):
    """Raised when looking up a rule id that was never registered."""


# ---------------------------------------------------------------------------
# Rule
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rule:
    id: str
    name: str
    category: str
    severity: str
    description: str
    node_types: tuple[type, ...]
    check: CheckFunc
    options: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class RuleRegistry:
    """Holds rules by id."""

    def __init__(self) -> None:
        self._rules: dict[str, Rule] = {}

    def register(
        self,
        rule_id: str,
        *,
        name: str,
        category: str,
        severity: str,
        node_types: tuple[type, ...],
        options: dict[str, Any] | None = None,
    ) -> Callable[[CheckFunc], CheckFunc]:
        """Decorator that registers *check* under *rule_id*.

        The rule description is taken from the check function's docstring.

        Raises:
            DuplicateRuleError: *rule_id* is already registered.
            RegistryError:      malformed id, unknown category or severity.
        """
        if not _RULE_ID_RE.match(rule_id):
            raise RegistryError(f"Rule id '{rule_id}' must be lower-case kebab-case")
        if category not in CATEGORIES:
            raise RegistryError(f"Rule '{rule_id}' has unknown category '{category}'")
        if severity not in SEVERITIES:
            raise RegistryError(f"Rule '{rule_id}' has unknown severity '{severity}'")

        def decorator(check: CheckFunc) -> CheckFunc:
            if rule_id in self._rules:
                raise DuplicateRuleError(f"Rule '{rule_id}' is already registered")
            self._rules[rule_id] = Rule(
                id=rule_id,
                name=name,
                category=category,
                severity=severity,
                description=_clean_doc(check.__doc__),
                node_types=tuple(node_types),
                check=check,
                options=dict(options or {}),
            )
            return check

        return decorator

    def get(self, rule_id: str) -> Rule:
        try:
            return self._rules[rule_id]
        except KeyError:
            raise UnknownRuleError(f"Unknown rule '{rule_id}'") from None

    def __contains__(self, rule_id: str) -> bool:
        return rule_id in self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(sorted(self._rules.values(), key=lambda r: r.id))

    def __len__(self) -> int:
        return len(self._rules)

    def ids(self) -> list[str]:
        return sorted(self._rules)

    def by_category(self) -> dict[str, list[Rule]]:
        grouped: dict[str, list[Rule]] = {c: [] for c in CATEGORIES}
        for rule in self:
            grouped[rule.category].append(rule)
        return grouped

    def rules_for(self, node_type: type) -> list[Rule]:
        """Rules that inspect nodes of *node_type*, sorted by id."""
        return [r for r in self if issubclass(node_type, r.node_types)]


def _clean_doc(doc: str | None) -> str:
    if not doc:
        return ""
    lines = [line.strip() for line in doc.strip().splitlines()]
    return " ".join(line for line in lines if line)


REGISTRY = RuleRegistry()
