"""JSON lint report.

Functions:
    build_report(result, paths)   -> dict

The report is a plain dict ready for ``json.dumps``:

    {
      "report_type":   "lint",
      "generated_at":  "2026-10-19T08:00:00+00:00",
      "paths":         ["src"],
      "files_scanned": 12,
      "summary":       {"total", "by_severity", "by_category", "by_rule", "suppressed"},
      "diagnostics":   [{"rule_id", "path", "line", "column", "severity", "message", "category"}]
    }
"""

from datetime import datetime, timezone
from typing import Iterable

from clean_lint.models import CATEGORIES, SEVERITIES, Diagnostic, LintResult


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_report(result: LintResult, paths: Iterable[str]) -> dict:
    """Return the machine-readable report for a lint run."""
    return {
        "report_type":   "lint",
        "generated_at":  datetime.now(timezone.utc).isoformat(),
        "paths":         list(paths),
        "files_scanned": len(result.files),
        "summary":       build_summary(result.diagnostics, result.suppressed),
        "diagnostics":   [d.to_dict() for d in result.diagnostics],
    }


def build_summary(diagnostics: list[Diagnostic], suppressed: int = 0) -> dict:
    by_severity = {s: 0 for s in SEVERITIES}
    by_category = {c: 0 for c in CATEGORIES}
    by_rule: dict[str, int] = {}

    for d in diagnostics:
        if d.severity in by_severity:
            by_severity[d.severity] += 1
        if d.category in by_category:
            by_category[d.category] += 1
        by_rule[d.rule_id] = by_rule.get(d.rule_id, 0) + 1

    return {
        "total":       len(diagnostics),
        "by_severity": by_severity,
        "by_category": by_category,
        "by_rule":     dict(sorted(by_rule.items())),
        "suppressed":  suppressed,
    }
