"""Rule evaluation: run every enabled rule over every syntax node.

Usage:
    evaluator = Evaluator(config)                      # uses the global registry
    file_result = evaluator.lint_source(source, "pkg/mod.py")
    result = evaluator.lint_paths(["src"])             # LintResult

Suppression comments:
    x = 42  # clean-lint: disable=magic-number
    # clean-lint: disable-file                 (first 10 lines, whole file)
    # clean-lint: disable-file=max-params      (first 10 lines, named rules)
"""

import ast
import re
import warnings
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Iterable

from clean_lint import rules as _builtin_rules  # noqa: F401  registers the built-in rules
from clean_lint.config import Config
from clean_lint.models import Diagnostic, FileResult, LintResult, Violation, severity_rank
from clean_lint.registry import REGISTRY, Rule, RuleRegistry
from clean_lint.walker import (
    Comment,
    ModuleContext,
    SourceWalker,
    iter_source_files,
    read_source,
)

SYNTAX_ERROR_RULE = "syntax-error"
FILE_DIRECTIVE_LINES = 10

_DIRECTIVE_RE = re.compile(
    r"clean-lint:\s*(?P<kind>disable-file|disable)(?:\s*=\s*(?P<rules>[a-z0-9-]+(?:\s*,\s*[a-z0-9-]+)*))?",
)

# Stands for "every rule" in a suppression set
_ALL = "*"


class RuleExecutionError(Exception):
    """Raised when a rule's check crashes on a node."""

    def __init__(self, rule_id: str, path: str, line: int, cause: Exception) -> None:
        super().__init__(f"Rule '{rule_id}' failed on {path}:{line}: {cause!r}")
        self.rule_id = rule_id
        self.path = path
        self.line = line


@dataclass(frozen=True)
class _ActiveRule:
    rule: Rule
    severity: str
    options: dict[str, Any]


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------

class Evaluator:
    """Applies the configured rules to modules."""

    def __init__(self, config: Config | None = None, registry: RuleRegistry = REGISTRY) -> None:
        self.config = config or Config()
        self._registry = registry
        min_rank = severity_rank(self.config.min_severity)
        # rules below min_severity never run
        self.active: list[_ActiveRule] = []
        for rule in registry:
            enabled, severity, options = self.config.rule_settings(rule)
            if enabled and severity_rank(severity) >= min_rank:
                self.active.append(_ActiveRule(rule, severity, options))
        self._active_by_id = {a.rule.id: a for a in self.active}
        self._dispatch: dict[type, list[_ActiveRule]] = {}

    def _rules_for(self, node_type: type) -> list[_ActiveRule]:
        cached = self._dispatch.get(node_type)
        if cached is None:
            cached = [
                self._active_by_id[rule.id]
                for rule in self._registry.rules_for(node_type)
                if rule.id in self._active_by_id
            ]
            self._dispatch[node_type] = cached
        return cached

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def lint_source(self, source: str, path: str) -> FileResult:
        """Lint one module's source text.

        A module that does not parse yields a single ``syntax-error``
        diagnostic and no rule runs.
        """
        try:
            ctx = ModuleContext.parse(path, source)
        except (SyntaxError, ValueError) as exc:
            line = getattr(exc, "lineno", None) or 1
            column = max((getattr(exc, "offset", None) or 1) - 1, 0)
            message = getattr(exc, "msg", None) or str(exc)
            diagnostic = Diagnostic(
                rule_id=SYNTAX_ERROR_RULE,
                path=path,
                line=line,
                column=column,
                severity="error",
                message=f"Cannot parse module: {message}",
                category="errors",
            )
            return FileResult(path=path, diagnostics=[diagnostic])

        found: list[Diagnostic] = []

        def visit(node: ast.AST) -> None:
            for active in self._rules_for(type(node)):
                try:
                    violations = list(active.rule.check(node, ctx, active.options))
                except Exception as exc:
                    raise RuleExecutionError(
                        active.rule.id, path, getattr(node, "lineno", 1), exc
                    ) from exc
                found.extend(self._diagnostics(active, path, violations))

        SourceWalker(ctx, visit).walk()
        return self._apply_suppressions(path, found, ctx.comments)

    def lint_paths(self, paths: Iterable[str]) -> LintResult:
        """Lint every Python file under *paths*.

        Files that cannot be decoded are skipped with a warning.
        """
        result = LintResult()
        for path in iter_source_files(paths, self.config.exclude):
            try:
                source = read_source(path)
            except (UnicodeDecodeError, SyntaxError) as exc:
                # tokenize.open raises SyntaxError for a bad encoding cookie
                warnings.warn(f"Skipping '{path}': cannot decode source ({exc})", UserWarning, stacklevel=2)
                continue
            result.add(self.lint_source(source, path))
        return result

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _diagnostics(
        self, active: _ActiveRule, path: str, violations: list[Violation]
    ) -> Iterable[Diagnostic]:
        return [
            Diagnostic(
                rule_id=active.rule.id,
                path=path,
                line=v.line,
                column=v.column,
                severity=active.severity,
                message=v.message,
                category=active.rule.category,
            )
            for v in violations
        ]

    def _apply_suppressions(
        self, path: str, diagnostics: list[Diagnostic], comments: list[Comment]
    ) -> FileResult:
        file_wide, by_line = parse_suppressions(comments)
        kept: list[Diagnostic] = []
        suppressed = 0
        for d in diagnostics:
            line_rules = by_line.get(d.line, set())
            if _matches(file_wide, d.rule_id) or _matches(line_rules, d.rule_id):
                suppressed += 1
            else:
                kept.append(d)
        kept.sort(key=lambda d: d.sort_key)
        return FileResult(path=path, diagnostics=kept, suppressed=suppressed)


def _matches(rules: set[str], rule_id: str) -> bool:
    return _ALL in rules or rule_id in rules


def parse_suppressions(comments: list[Comment]) -> tuple[set[str], dict[int, set[str]]]:
    """Return ``(file_wide, by_line)`` rule-id sets; ``"*"`` means every rule."""
    file_wide: set[str] = set()
    by_line: dict[int, set[str]] = defaultdict(set)

    for comment in comments:
        match = _DIRECTIVE_RE.search(comment.text)
        if not match:
            continue
        names = match.group("rules")
        rules = {n.strip() for n in names.split(",") if n.strip()} if names else {_ALL}
        if match.group("kind") == "disable-file":
            if comment.line <= FILE_DIRECTIVE_LINES:
                file_wide |= rules
        else:
            by_line[comment.line] |= rules

    return file_wide, dict(by_line)
