"""
flakiness-report schema package public API.

Purpose
- Export the validation entry points, issue types and JSON Schema export.

Functional requirements
- Validation returns issues as values; only ``assert_valid_report`` raises.
"""

from flakiness_report.schema.engine import ValidationSettings
from flakiness_report.schema.issues import (
    IssueReport,
    ReportValidationError,
    ReportValidationIssue,
    format_issues,
)
from flakiness_report.schema.json_schema import json_schema
from flakiness_report.schema.versions import (
    RULE_SETS,
    UnsupportedReportVersionError,
    assert_valid_report,
    validate,
    validate_v0,
    validate_v1,
    validation_message,
)

__all__ = [
    "IssueReport",
    "RULE_SETS",
    "ReportValidationError",
    "ReportValidationIssue",
    "UnsupportedReportVersionError",
    "ValidationSettings",
    "assert_valid_report",
    "format_issues",
    "json_schema",
    "validate",
    "validate_v0",
    "validate_v1",
    "validation_message",
]
