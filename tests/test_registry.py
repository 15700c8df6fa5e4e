"""Tests for clean_lint/registry.py and clean_lint/models.py"""

import ast

import pytest

from clean_lint import rules  # noqa: F401
from clean_lint.models import CATEGORIES, Diagnostic, FileResult, LintResult, Violation, severity_rank
from clean_lint.registry import (
    REGISTRY,
    DuplicateRuleError,
    RegistryError,
    RuleRegistry,
    UnknownRuleError,
)


def _register_sample(registry: RuleRegistry, rule_id: str = "no-print", **overrides):
    settings = dict(name="No print", category="functions", severity="warning", node_types=(ast.Call,))
    settings.update(overrides)

    @registry.register(rule_id, **settings)
    def check(node, ctx, options):
        """Prints belong in scripts,
        not in libraries."""
        yield Violation.at(node, "print")

    return check


def _diagnostic(path="a.py", line=1, column=0, rule_id="short-name", severity="warning"):
    return Diagnostic(
        rule_id=rule_id,
        path=path,
        line=line,
        column=column,
        severity=severity,
        message="msg",
        category="naming",
    )


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

def test_register_and_get():
    registry = RuleRegistry()
    check = _register_sample(registry)
    rule = registry.get("no-print")
    assert rule.check is check
    assert rule.severity == "warning"
    assert rule.description == "Prints belong in scripts, not in libraries."
    assert "no-print" in registry
    assert len(registry) == 1


def test_duplicate_id_raises():
    registry = RuleRegistry()
    _register_sample(registry)
    with pytest.raises(DuplicateRuleError, match="already registered"):
        _register_sample(registry)


@pytest.mark.parametrize("rule_id, overrides, message", [
    ("NoPrint", {}, "kebab-case"),
    ("no-print", {"category": "style"}, "unknown category"),
    ("no-print", {"severity": "fatal"}, "unknown severity"),
])
def test_invalid_registration(rule_id, overrides, message):
    with pytest.raises(RegistryError, match=message):
        _register_sample(RuleRegistry(), rule_id, **overrides)


def test_unknown_rule_raises():
    with pytest.raises(UnknownRuleError, match="Unknown rule 'nope'"):
        RuleRegistry().get("nope")


def test_iteration_is_sorted_by_id():
    registry = RuleRegistry()
    _register_sample(registry, "zeta")
    _register_sample(registry, "alpha")
    assert [r.id for r in registry] == ["alpha", "zeta"]
    assert registry.ids() == ["alpha", "zeta"]


def test_rules_for_node_type():
    registry = RuleRegistry()
    _register_sample(registry, "calls")
    _register_sample(registry, "functions", node_types=(ast.FunctionDef, ast.AsyncFunctionDef))
    assert [r.id for r in registry.rules_for(ast.Call)] == ["calls"]
    assert [r.id for r in registry.rules_for(ast.AsyncFunctionDef)] == ["functions"]
    assert registry.rules_for(ast.Name) == []


# ---------------------------------------------------------------------------
# Built-in rules
# ---------------------------------------------------------------------------

def test_builtin_rules_cover_every_category():
    grouped = REGISTRY.by_category()
    assert list(grouped) == list(CATEGORIES)
    assert all(grouped[category] for category in CATEGORIES)


def test_builtin_rules_are_documented():
    assert len(REGISTRY) == 23
    for rule in REGISTRY:
        assert rule.description, rule.id
        assert rule.name, rule.id


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

def test_severity_rank():
    assert severity_rank("error") > severity_rank("warning") > severity_rank("info")
    with pytest.raises(ValueError, match="Unknown severity"):
        severity_rank("fatal")


def test_lint_result_keeps_diagnostics_sorted():
    result = LintResult()
    result.add(FileResult("b.py", [_diagnostic("b.py", 1)]))
    result.add(FileResult("a.py", [_diagnostic("a.py", 9), _diagnostic("a.py", 2)], suppressed=3))
    assert [(d.path, d.line) for d in result.diagnostics] == [("a.py", 2), ("a.py", 9), ("b.py", 1)]
    assert result.files == ["b.py", "a.py"]
    assert result.suppressed == 3


def test_lint_result_appends_files_added_in_path_order():
    result = LintResult()
    result.add(FileResult("a.py", [_diagnostic("a.py", 5), _diagnostic("a.py", 1)]))
    diagnostics = result.diagnostics
    result.add(FileResult("b.py", [_diagnostic("b.py", 3)]))
    result.add(FileResult("c.py", []))
    assert result.diagnostics is diagnostics
    assert [(d.path, d.line) for d in result.diagnostics] == [("a.py", 1), ("a.py", 5), ("b.py", 3)]


def test_at_or_above():
    result = LintResult()
    result.add(FileResult("a.py", [
        _diagnostic(line=1, severity="info"),
        _diagnostic(line=2, severity="warning"),
        _diagnostic(line=3, severity="error"),
    ]))
    assert [d.line for d in result.at_or_above("warning")] == [2, 3]
    assert len(result.at_or_above("info")) == 3


def test_diagnostic_to_dict():
    assert _diagnostic().to_dict() == {
        "rule_id": "short-name",
        "path": "a.py",
        "line": 1,
        "column": 0,
        "severity": "warning",
        "message": "msg",
        "category": "naming",
    }
