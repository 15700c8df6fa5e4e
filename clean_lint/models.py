"""Data models for lint results.

Contains the records that flow from the rules to the reporters:
    - Violation     what a rule check yields (location + message)
    - Diagnostic    a Violation bound to a rule, a file and a severity
    - FileResult    diagnostics for one file
    - LintResult    diagnostics for a whole run
"""

import ast
import heapq
from dataclasses import asdict, dataclass, field

# Most to least severe
SEVERITIES = ("error", "warning", "info")

CATEGORIES = (
    "naming",
    "functions",
    "conditionals",
    "variables",
    "objects",
    "errors",
    "comments",
)

_SEVERITY_RANK = {"error": 2, "warning": 1, "info": 0}


def severity_rank(severity: str) -> int:
    """Return 2 for error, 1 for warning, 0 for info."""
    try:
        return _SEVERITY_RANK[severity]
    except KeyError:
        raise ValueError(
            f"Unknown severity '{severity}'. Expected one of: {', '.join(SEVERITIES)}"
        ) from None


# ---------------------------------------------------------------------------
# Rule output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Violation:
    line: int
    column: int
    message: str

    @classmethod
    def at(cls, node: ast.AST, message: str) -> "Violation":
        return cls(getattr(node, "lineno", 1), getattr(node, "col_offset", 0), message)


@dataclass(frozen=True)
class Diagnostic:
    rule_id: str
    path: str
    line: int
    column: int
    severity: str
    message: str
    category: str

    @property
    def sort_key(self) -> tuple:
        return (self.path, self.line, self.column, self.rule_id)

    def to_dict(self) -> dict:
        return asdict(self)


def _sort_key(diagnostic: Diagnostic) -> tuple:
    return diagnostic.sort_key


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

@dataclass
class FileResult:
    path: str
    diagnostics: list[Diagnostic] = field(default_factory=list)
    suppressed: int = 0


@dataclass
class LintResult:
    files: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    suppressed: int = 0

    def add(self, file_result: FileResult) -> None:
        """Fold in one file; files usually arrive in path order and are appended."""
        self.files.append(file_result.path)
        incoming = sorted(file_result.diagnostics, key=_sort_key)
        if incoming and self.diagnostics and incoming[0].sort_key < self.diagnostics[-1].sort_key:
            self.diagnostics = list(heapq.merge(self.diagnostics, incoming, key=_sort_key))
        else:
            self.diagnostics.extend(incoming)
        self.suppressed += file_result.suppressed

    def at_or_above(self, severity: str) -> list[Diagnostic]:
        threshold = severity_rank(severity)
        return [d for d in self.diagnostics if severity_rank(d.severity) >= threshold]
