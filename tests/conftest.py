"""Shared fixtures."""

import textwrap

import pytest

from clean_lint.config import Config, RuleConfig
from clean_lint.evaluator import Evaluator


def run_rule(source: str, rule_id: str, **options) -> list:
    """Lint *source* and return only the diagnostics of *rule_id*."""
    rules = {rule_id: RuleConfig(options=options)} if options else {}
    evaluator = Evaluator(Config(rules=rules))
    code = textwrap.dedent(source).lstrip("\n")
    result = evaluator.lint_source(code, "sample.py")
    return [d for d in result.diagnostics if d.rule_id == rule_id]


@pytest.fixture
def lint():
    return run_rule
