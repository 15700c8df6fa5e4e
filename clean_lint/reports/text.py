"""Human and CI text formats.

Functions:
    format_text(result)       -> str   path:line:col: severity rule-id message
    format_github(result)     -> str   GitHub Actions workflow commands
    format_rules(registry)    -> str   table of registered rules
"""

from clean_lint.models import SEVERITIES, LintResult
from clean_lint.registry import RuleRegistry

# GitHub has no "info" level for annotations
_GITHUB_LEVELS = {"error": "error", "warning": "warning", "info": "notice"}


def format_text(result: LintResult) -> str:
    if not result.diagnostics:
        lines = [f"No issues found in {len(result.files)} file(s)."]
    else:
        lines = [
            f"{d.path}:{d.line}:{d.column + 1}: {d.severity} {d.rule_id} {d.message}"
            for d in result.diagnostics
        ]
        counts = {s: 0 for s in SEVERITIES}
        for d in result.diagnostics:
            counts[d.severity] += 1
        breakdown = ", ".join(f"{counts[s]} {s}" for s in SEVERITIES if counts[s])
        lines.append("")
        lines.append(
            f"{len(result.diagnostics)} issue(s) in {len(result.files)} file(s) ({breakdown})"
        )
    if result.suppressed:
        lines.append(f"{result.suppressed} suppressed by clean-lint comments.")
    return "\n".join(lines)


def _escape_data(text: str) -> str:
    return text.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(text: str) -> str:
    return _escape_data(text).replace(":", "%3A").replace(",", "%2C")


def format_github(result: LintResult) -> str:
    lines = []
    for d in result.diagnostics:
        level = _GITHUB_LEVELS[d.severity]
        lines.append(
            f"::{level} file={_escape_property(d.path)},line={d.line},col={d.column + 1},"
            f"title={_escape_property(d.rule_id)}::{_escape_data(d.message)}"
        )
    return "\n".join(lines)


def format_rules(registry: RuleRegistry) -> str:
    rows = [("RULE", "CATEGORY", "SEVERITY", "NAME")]
    rows.extend((r.id, r.category, r.severity, r.name) for r in registry)
    widths = [max(len(row[i]) for row in rows) for i in range(3)]
    return "\n".join(
        f"{row[0]:<{widths[0]}}  {row[1]:<{widths[1]}}  {row[2]:<{widths[2]}}  {row[3]}"
        for row in rows
    )
