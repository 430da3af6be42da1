"""Report entity model, version 0 (legacy).

Version 0 documents have no ``version`` field. Compared to version 1 they
carry framework-specific ``opaqueData`` blobs, spell environment metadata as
``userSuppliedData``, require a ``location`` on every suite and test, and have
no root-level tests, embedded sources or CPU/RAM telemetry series.
"""

from __future__ import annotations

from typing import Any, Final, Literal, NewType, NotRequired, TypedDict, get_args

from flakiness_report.constants import CATEGORY_JUNIT, CATEGORY_PERF, CATEGORY_PLAYWRIGHT

VERSION: Final[Literal[0]] = 0

CommitId = NewType("CommitId", str)
AttachmentId = NewType("AttachmentId", str)
UnixTimestampMS = NewType("UnixTimestampMS", float)
DurationMS = NewType("DurationMS", float)
Number1Based = NewType("Number1Based", float)
GitFilePath = NewType("GitFilePath", str)

TestStatus = Literal["passed", "failed", "timedOut", "skipped", "interrupted"]
TestOutcome = Literal["skipped", "expected", "unexpected", "flaky"]
SuiteType = Literal["file", "anonymous suite", "suite"]

TEST_STATUSES: Final[tuple[str, ...]] = get_args(TestStatus)
SUITE_TYPES: Final[tuple[str, ...]] = get_args(SuiteType)

CATEGORIES: Final[tuple[str, ...]] = (CATEGORY_PLAYWRIGHT, CATEGORY_JUNIT, CATEGORY_PERF)


class Location(TypedDict):
    file: GitFilePath
    line: Number1Based
    column: Number1Based


NO_LOCATION: Final[Location] = {
    "file": GitFilePath(""),
    "line": Number1Based(0),
    "column": Number1Based(0),
}


class SystemData(TypedDict, total=False):
    osName: str
    osVersion: str
    osArch: str


class Environment(TypedDict):
    name: str
    systemData: NotRequired[SystemData]
    userSuppliedData: NotRequired[dict[str, str | bool | float]]
    # Not indexed; framework configuration such as a Playwright project.
    opaqueData: NotRequired[Any]


class TextEntry(TypedDict):
    text: str


class BufferEntry(TypedDict):
    buffer: str


STDIOEntry = TextEntry | BufferEntry


class ReportError(TypedDict, total=False):
    location: Location
    message: str
    stack: str
    snippet: str
    value: str


class TestStep(TypedDict):
    title: str
    duration: DurationMS
    location: NotRequired[Location]
    snippet: NotRequired[str]
    error: NotRequired[ReportError]
    steps: NotRequired[list[TestStep]]


class Attachment(TypedDict):
    name: str
    contentType: str
    id: AttachmentId


class Annotation(TypedDict):
    type: str
    description: NotRequired[str]
    location: NotRequired[Location]


class RunAttempt(TypedDict):
    environmentIdx: int
    expectedStatus: TestStatus
    status: TestStatus
    startTimestamp: UnixTimestampMS
    duration: DurationMS
    timeout: NotRequired[DurationMS]
    annotations: NotRequired[list[Annotation]]
    errors: NotRequired[list[ReportError]]
    parallelIndex: NotRequired[int]
    steps: NotRequired[list[TestStep]]
    stdout: NotRequired[list[STDIOEntry]]
    stderr: NotRequired[list[STDIOEntry]]
    attachments: NotRequired[list[Attachment]]


class Test(TypedDict):
    title: str
    location: Location
    tags: NotRequired[list[str]]
    attempts: list[RunAttempt]


class Suite(TypedDict):
    type: SuiteType
    title: str
    location: Location
    suites: NotRequired[list[Suite]]
    tests: NotRequired[list[Test]]


class SystemUtilizationSample(TypedDict):
    dts: DurationMS
    cpuUtilization: float
    memoryUtilization: float


class SystemUtilization(TypedDict):
    totalMemoryBytes: float
    startTimestamp: UnixTimestampMS
    samples: list[SystemUtilizationSample]


class Report(TypedDict):
    category: str
    commitId: CommitId
    relatedCommitIds: NotRequired[list[CommitId]]
    configPath: NotRequired[GitFilePath]
    url: NotRequired[str]
    environments: list[Environment]
    suites: list[Suite]
    unattributedErrors: NotRequired[list[ReportError]]
    startTimestamp: UnixTimestampMS
    duration: DurationMS
    opaqueData: NotRequired[Any]
    systemUtilization: NotRequired[SystemUtilization]


__all__ = [
    "Annotation",
    "Attachment",
    "AttachmentId",
    "BufferEntry",
    "CATEGORIES",
    "CommitId",
    "DurationMS",
    "Environment",
    "GitFilePath",
    "Location",
    "NO_LOCATION",
    "Number1Based",
    "Report",
    "ReportError",
    "RunAttempt",
    "STDIOEntry",
    "SUITE_TYPES",
    "Suite",
    "SuiteType",
    "SystemData",
    "SystemUtilization",
    "SystemUtilizationSample",
    "TEST_STATUSES",
    "Test",
    "TestOutcome",
    "TestStatus",
    "TestStep",
    "TextEntry",
    "UnixTimestampMS",
    "VERSION",
]
