"""Shared report factories for unit tests."""

from __future__ import annotations

import copy
from typing import Any

COMMIT_ID = "0123456789abcdef0123456789abcdef01234567"
START_MS = 1_703_001_600_000


def make_attempt(**overrides: Any) -> dict[str, Any]:
    attempt: dict[str, Any] = {
        "environmentIdx": 0,
        "expectedStatus": "passed",
        "status": "passed",
        "startTimestamp": START_MS,
        "duration": 1500,
    }
    attempt.update(overrides)
    return attempt


def make_test(title: str = "t", **overrides: Any) -> dict[str, Any]:
    test: dict[str, Any] = {"title": title, "attempts": [make_attempt()]}
    test.update(overrides)
    return test


def make_suite(
    title: str,
    *,
    tests: list[dict[str, Any]] | None = None,
    suites: list[dict[str, Any]] | None = None,
    suite_type: str = "suite",
    location: dict[str, Any] | None = None,
) -> dict[str, Any]:
    suite: dict[str, Any] = {"type": suite_type, "title": title}
    if location is not None:
        suite["location"] = location
    if suites is not None:
        suite["suites"] = suites
    if tests is not None:
        suite["tests"] = tests
    return suite


def make_report(**overrides: Any) -> dict[str, Any]:
    """Smallest current report accepted with zero issues."""

    report: dict[str, Any] = {
        "category": "pytest",
        "commitId": COMMIT_ID,
        "environments": [{"name": "Python Tests"}],
        "suites": [],
        "tests": [make_test("t")],
        "startTimestamp": START_MS,
        "duration": 2000,
    }
    report.update(overrides)
    return report


def make_legacy_report(**overrides: Any) -> dict[str, Any]:
    """Version 0 report carrying every field the migration relocates or drops."""

    location = {"file": "tests/test_app.py", "line": 1, "column": 1}
    report: dict[str, Any] = {
        "category": "playwright",
        "commitId": COMMIT_ID,
        "opaqueData": {"runner": "legacy"},
        "environments": [
            {
                "name": "E",
                "systemData": {"osName": "linux", "osArch": "x64"},
                "userSuppliedData": {"foo": "bar"},
                "opaqueData": [1, 2, 3],
            }
        ],
        "suites": [
            make_suite(
                "tests/test_app.py",
                suite_type="file",
                location=location,
                tests=[make_test("t1", location=copy.deepcopy(location))],
            )
        ],
        "startTimestamp": START_MS,
        "duration": 2000,
    }
    report.update(overrides)
    return report


__all__ = [
    "COMMIT_ID",
    "START_MS",
    "make_attempt",
    "make_legacy_report",
    "make_report",
    "make_suite",
    "make_test",
]
