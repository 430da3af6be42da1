"""Stable constants shared across the report model, validator and migrations."""

from __future__ import annotations

from typing import Final

# Report schema versions. Version 0 documents carry no ``version`` field.
LEGACY_REPORT_VERSION: Final[int] = 0
CURRENT_REPORT_VERSION: Final[int] = 1

# Well-known report categories.
CATEGORY_PLAYWRIGHT: Final[str] = "playwright"
CATEGORY_PYTEST: Final[str] = "pytest"
CATEGORY_JUNIT: Final[str] = "junit"
CATEGORY_PERF: Final[str] = "perf"

# Field bounds.
COMMIT_ID_LENGTH: Final[int] = 40
CATEGORY_MIN_LENGTH: Final[int] = 1
CATEGORY_MAX_LENGTH: Final[int] = 100
ENVIRONMENT_NAME_MIN_LENGTH: Final[int] = 1
ENVIRONMENT_NAME_MAX_LENGTH: Final[int] = 512
ATTACHMENT_ID_MIN_LENGTH: Final[int] = 1
ATTACHMENT_ID_MAX_LENGTH: Final[int] = 1024
PERCENT_MIN: Final[float] = 0.0
PERCENT_MAX: Final[float] = 100.0

# Diagnostics.
MAX_REPORTED_ISSUES: Final[int] = 5
ROOT_PATH: Final[str] = "<root>"

__all__ = [
    "ATTACHMENT_ID_MAX_LENGTH",
    "ATTACHMENT_ID_MIN_LENGTH",
    "CATEGORY_JUNIT",
    "CATEGORY_MAX_LENGTH",
    "CATEGORY_MIN_LENGTH",
    "CATEGORY_PERF",
    "CATEGORY_PLAYWRIGHT",
    "CATEGORY_PYTEST",
    "COMMIT_ID_LENGTH",
    "CURRENT_REPORT_VERSION",
    "ENVIRONMENT_NAME_MAX_LENGTH",
    "ENVIRONMENT_NAME_MIN_LENGTH",
    "LEGACY_REPORT_VERSION",
    "MAX_REPORTED_ISSUES",
    "PERCENT_MAX",
    "PERCENT_MIN",
    "ROOT_PATH",
]
