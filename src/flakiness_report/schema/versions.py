"""Per-version rule sets and the public validation entry points."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final, cast

import structlog

from flakiness_report.constants import CURRENT_REPORT_VERSION, LEGACY_REPORT_VERSION
from flakiness_report.domain import v0, v1
from flakiness_report.schema.engine import RuleSet, ValidationSettings, run_validator, shape_table
from flakiness_report.schema.issues import IssueReport, ReportValidationError

_LOGGER = structlog.get_logger(__name__)

_COMMON_SHAPES: Final[dict[str, tuple[tuple[str, ...], tuple[str, ...]]]] = {
    "systemData": ((), ("osName", "osVersion", "osArch")),
    "location": (("file", "line", "column"), ()),
    "error": ((), ("location", "message", "stack", "snippet", "value")),
    "step": (("title", "duration"), ("location", "snippet", "error", "steps")),
    "attachment": (("name", "contentType", "id"), ()),
    "annotation": (("type",), ("description", "location")),
    "attempt": (
        ("environmentIdx", "expectedStatus", "status", "startTimestamp", "duration"),
        (
            "timeout",
            "annotations",
            "errors",
            "parallelIndex",
            "steps",
            "stdout",
            "stderr",
            "attachments",
        ),
    ),
    "systemUtilization": (("totalMemoryBytes", "startTimestamp", "samples"), ()),
    "systemUtilizationSample": (("dts", "cpuUtilization", "memoryUtilization"), ()),
}

_REPORT_REQUIRED: Final[tuple[str, ...]] = (
    "category",
    "commitId",
    "environments",
    "suites",
    "startTimestamp",
    "duration",
)

V1_RULES: Final[RuleSet] = RuleSet(
    version=v1.VERSION,
    shapes=shape_table(
        **_COMMON_SHAPES,
        report=(
            _REPORT_REQUIRED,
            (
                "version",
                "relatedCommitIds",
                "configPath",
                "url",
                "tests",
                "unattributedErrors",
                "sources",
                "systemUtilization",
                "cpuCount",
                "cpuAvg",
                "cpuMax",
                "ram",
                "ramBytes",
            ),
        ),
        environment=(("name",), ("systemData", "metadata", "userSuppliedData")),
        suite=(("type", "title"), ("location", "suites", "tests")),
        test=(("title", "attempts"), ("location", "tags")),
        source=(("filePath", "text"), ("contentType", "lineOffset")),
    ),
    test_statuses=v1.TEST_STATUSES,
    suite_types=v1.SUITE_TYPES,
)

V0_RULES: Final[RuleSet] = RuleSet(
    version=v0.VERSION,
    shapes=shape_table(
        **_COMMON_SHAPES,
        report=(
            _REPORT_REQUIRED,
            (
                "relatedCommitIds",
                "configPath",
                "url",
                "unattributedErrors",
                "opaqueData",
                "systemUtilization",
            ),
        ),
        environment=(("name",), ("systemData", "userSuppliedData", "opaqueData")),
        suite=(("type", "title", "location"), ("suites", "tests")),
        test=(("title", "location", "attempts"), ("tags",)),
    ),
    test_statuses=v0.TEST_STATUSES,
    suite_types=v0.SUITE_TYPES,
)

RULE_SETS: Final[Mapping[int, RuleSet]] = {
    LEGACY_REPORT_VERSION: V0_RULES,
    CURRENT_REPORT_VERSION: V1_RULES,
}


class UnsupportedReportVersionError(ValueError):
    """Raised when a report version tag matches no known schema."""

    def __init__(self, version: object) -> None:
        self.version = version
        known = ", ".join(str(item) for item in sorted(RULE_SETS))
        super().__init__(f"unsupported report version {version!r}; known versions: {known}")


def validate(
    document: object,
    *,
    version: int = CURRENT_REPORT_VERSION,
    settings: ValidationSettings | None = None,
) -> IssueReport | None:
    """Validate ``document`` against ``version``; ``None`` means it conforms."""

    rules = None if isinstance(version, bool) else RULE_SETS.get(version)
    if rules is None:
        raise UnsupportedReportVersionError(version)
    result = run_validator(rules, document, settings)
    _LOGGER.debug(
        "report_validated",
        schema_version=version,
        issue_count=0 if result is None else len(result),
    )
    return result


def validate_v0(
    document: object, *, settings: ValidationSettings | None = None
) -> IssueReport | None:
    return validate(document, version=LEGACY_REPORT_VERSION, settings=settings)


def validate_v1(
    document: object, *, settings: ValidationSettings | None = None
) -> IssueReport | None:
    return validate(document, version=CURRENT_REPORT_VERSION, settings=settings)


def validation_message(
    document: object,
    *,
    version: int = CURRENT_REPORT_VERSION,
    settings: ValidationSettings | None = None,
) -> str | None:
    """Return the capped human-readable issue list, or ``None`` when valid."""

    resolved = settings or ValidationSettings()
    result = validate(document, version=version, settings=resolved)
    if result is None:
        return None
    return result.format(max_issues=resolved.max_reported_issues)


def assert_valid_report(
    document: object,
    *,
    version: int = CURRENT_REPORT_VERSION,
    settings: ValidationSettings | None = None,
) -> Mapping[str, Any]:
    """Validate and return ``document`` unchanged, or raise ``ReportValidationError``."""

    resolved = settings or ValidationSettings()
    result = validate(document, version=version, settings=resolved)
    if result is not None:
        raise ReportValidationError(result.issues, max_issues=resolved.max_reported_issues)
    return cast("Mapping[str, Any]", document)


__all__ = [
    "RULE_SETS",
    "UnsupportedReportVersionError",
    "V0_RULES",
    "V1_RULES",
    "assert_valid_report",
    "validate",
    "validate_v0",
    "validate_v1",
    "validation_message",
]
