"""
flakiness-report — test-run report model, validator, migrations and traversal.

Purpose
- Package root. Re-exports the small public surface callers need.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

from flakiness_report.codec import (
    ReportDecodeError,
    ReportEncodeError,
    attachment_id_for_bytes,
    dumps_report,
    loads_report,
    read_report,
    write_report,
)
from flakiness_report.constants import CURRENT_REPORT_VERSION, LEGACY_REPORT_VERSION
from flakiness_report.domain import AnyReport, LegacyReport, Report, v0, v1
from flakiness_report.migrations import (
    MIGRATIONS,
    detect_version,
    migrate_to_latest,
    migrate_to_v0,
    migrate_to_v1,
)
from flakiness_report.schema import (
    IssueReport,
    ReportValidationError,
    ReportValidationIssue,
    UnsupportedReportVersionError,
    ValidationSettings,
    assert_valid_report,
    json_schema,
    validate,
    validate_v0,
    validate_v1,
    validation_message,
)
from flakiness_report.traversal import find_test, iter_tests, visit_tests, visit_tests_async

__version__ = "0.1.0"

__all__ = [
    "AnyReport",
    "CURRENT_REPORT_VERSION",
    "IssueReport",
    "LEGACY_REPORT_VERSION",
    "LegacyReport",
    "MIGRATIONS",
    "Report",
    "ReportDecodeError",
    "ReportEncodeError",
    "ReportValidationError",
    "ReportValidationIssue",
    "UnsupportedReportVersionError",
    "ValidationSettings",
    "__version__",
    "assert_valid_report",
    "attachment_id_for_bytes",
    "detect_version",
    "dumps_report",
    "find_test",
    "iter_tests",
    "json_schema",
    "loads_report",
    "migrate_to_latest",
    "migrate_to_v0",
    "migrate_to_v1",
    "read_report",
    "v0",
    "v1",
    "validate",
    "validate_v0",
    "validate_v1",
    "validation_message",
    "visit_tests",
    "visit_tests_async",
    "write_report",
]
