"""
flakiness-report — unit tests for report validation

Purpose
- Validate the collect-all validator over current and legacy rule sets.

What this test file should cover
- Acceptance of a minimal current report.
- Exact issue paths and messages for bounds, missing fields and bad enums.
- Environment-index cross-checks and unknown-field policy.
- Deep recursive step trees without native recursion limits.

Functional requirements
- Offline, no filesystem access.
"""

from __future__ import annotations

import copy
import sys
from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st

from flakiness_report.codec import loads_report
from flakiness_report.schema import (
    ReportValidationError,
    UnsupportedReportVersionError,
    ValidationSettings,
    assert_valid_report,
    validate,
    validate_v0,
    validate_v1,
    validation_message,
)

from .. import COMMIT_ID, make_attempt, make_legacy_report, make_report, make_suite, make_test


def _issues(document: object, **kwargs: Any) -> list[tuple[str, str]]:
    result = validate(document, **kwargs)
    if result is None:
        return []
    return [(issue.path, issue.message) for issue in result]


def test_minimal_current_report_has_no_issues() -> None:
    assert validate(make_report()) is None
    assert validate_v1(make_report()) is None
    assert validation_message(make_report()) is None


def test_explicit_version_tag_is_accepted_and_checked() -> None:
    assert validate(make_report(version=1)) is None
    assert _issues(make_report(version=2)) == [("version", "expected version 1, got 2")]
    assert _issues(make_report(version="1")) == [("version", "expected integer, got string")]


def test_truncated_commit_id_yields_exactly_one_issue() -> None:
    document = make_report(commitId=COMMIT_ID[:39])

    assert _issues(document) == [("commitId", "must be exactly 40 characters, got 39")]


def test_missing_environments_is_reported_as_required_field() -> None:
    document = make_report()
    del document["environments"]

    assert _issues(document) == [("environments", "missing required field")]


def test_missing_fields_are_reported_in_sorted_order() -> None:
    assert _issues({}) == [
        ("category", "missing required field"),
        ("commitId", "missing required field"),
        ("duration", "missing required field"),
        ("environments", "missing required field"),
        ("startTimestamp", "missing required field"),
        ("suites", "missing required field"),
    ]


@pytest.mark.parametrize(
    ("document", "expected"),
    [
        ([], ("<root>", "expected object, got array")),
        ("report", ("<root>", "expected object, got string")),
        (None, ("<root>", "expected object, got null")),
    ],
)
def test_non_object_root_is_reported_at_root_path(
    document: object, expected: tuple[str, str]
) -> None:
    assert _issues(document) == [expected]


def test_issue_cap_renders_five_issues_and_remaining_count() -> None:
    document = make_report(
        category="",
        commitId=COMMIT_ID[:39],
        environments=[{"name": ""}],
        tests=[
            make_test(
                "t",
                attempts=[make_attempt(expectedStatus="nope", status="bogus", duration=-5)],
            )
        ],
        startTimestamp="soon",
        duration=-1,
    )

    result = validate(document)

    assert result is not None
    assert len(result) == 8
    lines = str(result).splitlines()
    assert lines == [
        "- category: must be at least 1 character(s)",
        "- commitId: must be exactly 40 characters, got 39",
        "- environments[0].name: must be at least 1 character(s)",
        "- tests[0].attempts[0].expectedStatus: invalid value 'nope'; expected one of: "
        "'passed', 'failed', 'timedOut', 'skipped', 'interrupted'",
        "- tests[0].attempts[0].status: invalid value 'bogus'; expected one of: "
        "'passed', 'failed', 'timedOut', 'skipped', 'interrupted'",
        "...and 3 more issues...",
    ]
    assert result.paths[5:] == (
        "tests[0].attempts[0].duration",
        "startTimestamp",
        "duration",
    )


def test_issue_cap_follows_settings() -> None:
    document = make_report(category="", commitId="short", duration=-1)
    message = validation_message(document, settings=ValidationSettings(max_reported_issues=1))

    assert message == (
        "- category: must be at least 1 character(s)\n...and 2 more issues..."
    )


def test_nested_suite_issues_come_out_in_document_order() -> None:
    document = make_report(
        suites=[
            make_suite(
                "A",
                suites=[make_suite("B", tests=[make_test("t2", tags=["ok", 3])])],
                tests=[make_test("t1", attempts=[make_attempt(status="lost")])],
            ),
            make_suite("C", suite_type="folder"),
        ],
        tests=[],
    )

    assert [path for path, _ in _issues(document)] == [
        "suites[0].tests[0].attempts[0].status",
        "suites[0].suites[0].tests[0].tags[1]",
        "suites[1].type",
    ]


@pytest.mark.parametrize("value", [0, 100, 0.5, 99.99])
def test_percent_bounds_accept_inclusive_range(value: float) -> None:
    assert validate(make_report(cpuAvg=[[0, value]], cpuMax=[[10, value]])) is None


@pytest.mark.parametrize(
    ("value", "message"),
    [(101, "must be <= 100"), (-1, "must be >= 0"), (float("nan"), "must be finite")],
)
def test_percent_bounds_reject_out_of_range(value: float, message: str) -> None:
    assert _issues(make_report(ram=[[0, value]])) == [("ram[0][1]", message)]


def test_integers_too_large_for_a_float_are_reported_not_raised() -> None:
    huge = loads_report('{"value": 1' + "0" * 400 + "}")["value"]
    document = make_report(duration=huge, cpuAvg=[[0, huge]])
    document["environments"][0]["metadata"] = {"n": huge}

    assert _issues(document) == [("cpuAvg[0][1]", "must be <= 100")]


@given(st.floats(min_value=100, exclude_min=True, allow_infinity=False))
def test_percent_above_hundred_is_always_rejected(value: float) -> None:
    assert _issues(make_report(cpuAvg=[[0, value]])) == [("cpuAvg[0][1]", "must be <= 100")]


@given(st.floats(min_value=0, max_value=100))
def test_percent_inside_range_is_always_accepted(value: float) -> None:
    assert validate(make_report(cpuAvg=[[1, value]])) is None


def test_telemetry_point_must_be_a_pair() -> None:
    assert _issues(make_report(cpuMax=[[1], [1, 2, 3]])) == [
        ("cpuMax[0]", "expected [time, value] pair, got 1 item(s)"),
        ("cpuMax[1]", "expected [time, value] pair, got 3 item(s)"),
    ]


def test_legacy_sample_percentages_are_bounded() -> None:
    document = make_legacy_report(
        systemUtilization={
            "totalMemoryBytes": 1024,
            "startTimestamp": 0,
            "samples": [
                {"dts": 0, "cpuUtilization": 0, "memoryUtilization": 100},
                {"dts": 10, "cpuUtilization": -1, "memoryUtilization": 101},
            ],
        }
    )

    assert _issues(document, version=0) == [
        ("systemUtilization.samples[1].cpuUtilization", "must be >= 0"),
        ("systemUtilization.samples[1].memoryUtilization", "must be <= 100"),
    ]


def test_environment_index_must_reference_an_environment() -> None:
    document = make_report(tests=[make_test("t", attempts=[make_attempt(environmentIdx=1)])])

    assert _issues(document) == [
        (
            "tests[0].attempts[0].environmentIdx",
            "environment index 1 is out of range; report defines 1 environment(s)",
        )
    ]
    relaxed = ValidationSettings(check_environment_refs=False)
    assert validate(document, settings=relaxed) is None


def test_environment_index_must_be_a_non_negative_integer() -> None:
    document = make_report(
        tests=[
            make_test("a", attempts=[make_attempt(environmentIdx=-1)]),
            make_test("b", attempts=[make_attempt(environmentIdx=0.5)]),
        ]
    )

    assert _issues(document) == [
        ("tests[0].attempts[0].environmentIdx", "must be >= 0"),
        ("tests[1].attempts[0].environmentIdx", "expected integer, got number"),
    ]


def test_unknown_fields_are_ignored_unless_rejected_by_settings() -> None:
    document = make_report(extra="x")
    document["environments"][0]["nickname"] = "ci"

    assert validate(document) is None
    assert _issues(document, settings=ValidationSettings(reject_unknown_fields=True)) == [
        ("extra", "unknown field"),
        ("environments[0].nickname", "unknown field"),
    ]


def test_stdio_entries_accept_text_or_buffer_only() -> None:
    attempt = make_attempt(
        stdout=[{"text": "hello"}, {"buffer": "aGVsbG8="}],
        stderr=[{"text": 1}, "oops"],
    )
    document = make_report(tests=[make_test("t", attempts=[attempt])])

    assert _issues(document) == [
        ("tests[0].attempts[0].stderr[0]", "expected {text: string} or {buffer: string} entry"),
        ("tests[0].attempts[0].stderr[1]", "expected object, got string"),
    ]


def test_attachment_and_annotation_shapes() -> None:
    attempt = make_attempt(
        attachments=[
            {"name": "trace", "contentType": "application/zip", "id": "abc"},
            {"name": "screenshot", "contentType": "image/png", "id": ""},
        ],
        annotations=[{"type": "skip", "description": "flaky on CI"}, {"description": "?"}],
    )
    document = make_report(tests=[make_test("t", attempts=[attempt])])

    assert _issues(document) == [
        ("tests[0].attempts[0].annotations[1].type", "missing required field"),
        ("tests[0].attempts[0].attachments[1].id", "must be at least 1 character(s)"),
    ]


def test_sources_and_metadata_are_checked() -> None:
    document = make_report(
        sources=[{"filePath": "tests/test_app.py", "text": "def test(): pass"}, {"text": 1}],
    )
    document["environments"][0]["metadata"] = {"python": "3.12", "shards": 4, "bad": [1]}

    assert _issues(document) == [
        ("environments[0].metadata.bad", "expected string, boolean or number, got array"),
        ("sources[1].filePath", "missing required field"),
        ("sources[1].text", "expected string, got number"),
    ]


def test_deep_step_trees_do_not_hit_the_recursion_limit() -> None:
    depth = sys.getrecursionlimit() + 500
    leaf: dict[str, Any] = {"title": "leaf", "duration": -1}
    node = leaf
    for level in range(depth - 1):
        node = {"title": f"step {level}", "duration": 1, "steps": [node]}
    document = make_report(tests=[make_test("t", attempts=[make_attempt(steps=[node])])])

    result = validate(document)

    assert result is not None
    assert len(result) == 1
    issue = result.issues[0]
    assert issue.message == "must be >= 0"
    assert issue.path.count("steps[0]") == depth
    assert issue.path.endswith(".duration")


def test_legacy_rules_require_locations() -> None:
    document = make_legacy_report()
    assert validate_v0(document) is None

    del document["suites"][0]["location"]
    assert _issues(document, version=0) == [("suites[0].location", "missing required field")]


@pytest.mark.parametrize(("version", "rendered"), [(7, "7"), (True, "True"), (False, "False")])
def test_unknown_schema_version_raises(version: Any, rendered: str) -> None:
    with pytest.raises(
        UnsupportedReportVersionError, match=f"unsupported report version {rendered}"
    ):
        validate(make_report(), version=version)


def test_validation_does_not_mutate_input() -> None:
    document = make_report(commitId="short", cpuAvg=[[0, 200]])
    snapshot = copy.deepcopy(document)

    validate(document)

    assert document == snapshot


def test_assert_valid_report_returns_input_or_raises() -> None:
    document = make_report()
    assert assert_valid_report(document) is document

    with pytest.raises(ReportValidationError) as exc_info:
        assert_valid_report(make_report(commitId=COMMIT_ID[:39]))
    assert str(exc_info.value) == (
        "invalid report:\n- commitId: must be exactly 40 characters, got 39"
    )
    assert exc_info.value.issues[0].path == "commitId"
