"""
Validation report data structures.

This module contains the structures used to represent the outcome of
validating a build configuration record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .enums import Severity


@dataclass(frozen=True)
class ValidationIssue:
    """A single finding raised by a validation rule."""

    rule: str
    severity: Severity
    message: str
    field: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "rule": self.rule,
            "severity": self.severity.value,
            "message": self.message,
        }
        if self.field is not None:
            result["field"] = self.field
        return result

    def __str__(self) -> str:
        return f"{self.severity.value.upper()} [{self.rule}] {self.message}"


@dataclass
class ValidationReport:
    """Outcome of validating one configuration record."""

    issues: List[ValidationIssue] = field(default_factory=list)
    source_file: Optional[Path] = None
    strict: bool = False

    def add_issue(self, issue: ValidationIssue) -> None:
        self.issues.append(issue)

    def get_issues_by_severity(self, severity: Severity) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == severity]

    @property
    def errors(self) -> List[ValidationIssue]:
        return self.get_issues_by_severity(Severity.ERROR)

    @property
    def warnings(self) -> List[ValidationIssue]:
        return self.get_issues_by_severity(Severity.WARNING)

    @property
    def infos(self) -> List[ValidationIssue]:
        return self.get_issues_by_severity(Severity.INFO)

    @property
    def failing_issues(self) -> List[ValidationIssue]:
        """Issues that cause the record to be rejected."""
        if self.strict:
            return self.errors + self.warnings
        return self.errors

    @property
    def accepted(self) -> bool:
        """True when compilation may proceed."""
        return not self.failing_issues

    def rules_triggered(self) -> List[str]:
        return list(dict.fromkeys(issue.rule for issue in self.issues))

    def sorted_issues(self) -> List[ValidationIssue]:
        return sorted(self.issues, key=lambda issue: issue.severity.rank)

    def summary(self) -> str:
        verdict = "accepted" if self.accepted else "rejected"
        return (
            f"Configuration {verdict}: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s), {len(self.infos)} info"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_file": str(self.source_file) if self.source_file else None,
            "accepted": self.accepted,
            "strict": self.strict,
            "summary": {
                "errors": len(self.errors),
                "warnings": len(self.warnings),
                "infos": len(self.infos),
            },
            "issues": [issue.to_dict() for issue in self.sorted_issues()],
        }
