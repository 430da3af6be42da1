"""Validation issue types, the collect-all issue sink and the capped formatter."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from flakiness_report.constants import MAX_REPORTED_ISSUES


@dataclass(frozen=True, slots=True)
class ReportValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str

    def render(self) -> str:
        return f"- {self.path}: {self.message}"


@dataclass(frozen=True, slots=True)
class IssueReport:
    """Ordered, non-empty list of issues found in one document."""

    issues: tuple[ReportValidationIssue, ...]

    def __len__(self) -> int:
        return len(self.issues)

    def __iter__(self) -> Iterator[ReportValidationIssue]:
        return iter(self.issues)

    @property
    def paths(self) -> tuple[str, ...]:
        return tuple(issue.path for issue in self.issues)

    def format(self, max_issues: int = MAX_REPORTED_ISSUES) -> str:
        return format_issues(self.issues, max_issues=max_issues)

    def __str__(self) -> str:
        return self.format()


class ReportValidationError(ValueError):
    """Raised by ``assert_valid_report`` when a document does not conform."""

    def __init__(
        self,
        issues: Sequence[ReportValidationIssue],
        *,
        max_issues: int = MAX_REPORTED_ISSUES,
    ) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = format_issues(self.issues, max_issues=max_issues)
        super().__init__(f"invalid report:\n{rendered}")


def format_issues(
    issues: Sequence[ReportValidationIssue],
    *,
    max_issues: int = MAX_REPORTED_ISSUES,
) -> str:
    """Render at most ``max_issues`` issues and a trailing remaining-count line."""

    if max_issues < 1:
        raise ValueError("max_issues must be >= 1")
    shown = issues[:max_issues]
    lines = [issue.render() for issue in shown]
    remaining = len(issues) - len(shown)
    if remaining > 0:
        suffix = "" if remaining == 1 else "s"
        lines.append(f"...and {remaining} more issue{suffix}...")
    return "\n".join(lines)


class IssueCollector:
    """Append-only sink shared by every check of one validation pass."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ReportValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ReportValidationIssue(path=path, message=message))

    def items(self) -> tuple[ReportValidationIssue, ...]:
        return tuple(self._items)

    def report(self) -> IssueReport | None:
        if not self._items:
            return None
        return IssueReport(issues=self.items())

    @property
    def has_issues(self) -> bool:
        return bool(self._items)

    def __len__(self) -> int:
        return len(self._items)


__all__ = [
    "IssueCollector",
    "IssueReport",
    "ReportValidationError",
    "ReportValidationIssue",
    "format_issues",
]
