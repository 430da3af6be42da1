"""
flakiness-report — entity model package.

Purpose
- One module per report schema version (``v0`` legacy, ``v1`` current).
- Each version is a complete, self-contained set of TypedDict shapes.

Functional requirements
- No behavior beyond definitions; validation lives in ``flakiness_report.schema``.
"""

from flakiness_report.domain import v0, v1

Report = v1.Report
LegacyReport = v0.Report
AnyReport = v0.Report | v1.Report

__all__ = ["AnyReport", "LegacyReport", "Report", "v0", "v1"]
