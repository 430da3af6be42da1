"""Report entity model, version 1 (current).

Every shape in this module is self-contained: version 0 lives in
``domain/v0.py`` and shares names with this module by convention only.

Branded primitives are ``NewType`` aliases over ``str``/``float``. They carry
no runtime behavior; they keep commit ids, attachment ids, timestamps and
durations from being mixed up in annotated code. Wire constraints on the
underlying values are enforced by ``flakiness_report.schema``.

Paths (``Location.file``, ``Source.filePath``, ``Report.configPath``) are POSIX
paths relative to the repository checkout root.
"""

from __future__ import annotations

from typing import Final, Literal, NewType, NotRequired, TypedDict, get_args

from flakiness_report.constants import (
    CATEGORY_JUNIT,
    CATEGORY_PERF,
    CATEGORY_PLAYWRIGHT,
    CATEGORY_PYTEST,
)

VERSION: Final[Literal[1]] = 1

CommitId = NewType("CommitId", str)
AttachmentId = NewType("AttachmentId", str)
UnixTimestampMS = NewType("UnixTimestampMS", float)
DurationMS = NewType("DurationMS", float)
# 1-based by convention only; any number is accepted, file suites use 0.
Number1Based = NewType("Number1Based", float)
# May be empty for "no location".
GitFilePath = NewType("GitFilePath", str)

TestStatus = Literal["passed", "failed", "timedOut", "skipped", "interrupted"]
SuiteType = Literal["file", "anonymous suite", "suite"]

TEST_STATUSES: Final[tuple[str, ...]] = get_args(TestStatus)
SUITE_TYPES: Final[tuple[str, ...]] = get_args(SuiteType)

# Category names reported by the well-known adapters.
CATEGORIES: Final[tuple[str, ...]] = (
    CATEGORY_PLAYWRIGHT,
    CATEGORY_PYTEST,
    CATEGORY_JUNIT,
    CATEGORY_PERF,
)


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
    """Named execution configuration referenced by ``RunAttempt.environmentIdx``."""

    name: str
    systemData: NotRequired[SystemData]
    metadata: NotRequired[dict[str, str | bool | float]]
    # Legacy spelling of ``metadata``; migrations never produce it.
    userSuppliedData: NotRequired[dict[str, str | bool | float]]


class TextEntry(TypedDict):
    text: str


class BufferEntry(TypedDict):
    # base64-encoded bytes
    buffer: str


STDIOEntry = TextEntry | BufferEntry


class ReportError(TypedDict, total=False):
    location: Location
    message: str
    stack: str
    # Deprecated: attach a ``Source`` instead.
    snippet: str
    # String form of a thrown non-Error value.
    value: str


class TestStep(TypedDict):
    title: str
    duration: DurationMS
    location: NotRequired[Location]
    snippet: NotRequired[str]
    error: NotRequired[ReportError]
    steps: NotRequired[list[TestStep]]


class Attachment(TypedDict):
    """Reference to an out-of-band payload stored under ``attachments/<id>``."""

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
    location: NotRequired[Location]
    tags: NotRequired[list[str]]
    attempts: list[RunAttempt]


class Suite(TypedDict):
    type: SuiteType
    title: str
    location: NotRequired[Location]
    suites: NotRequired[list[Suite]]
    tests: NotRequired[list[Test]]


class Source(TypedDict):
    filePath: GitFilePath
    text: str
    contentType: NotRequired[str]
    # Line of the original file that ``text`` starts at; defaults to 1.
    lineOffset: NotRequired[float]


class SystemUtilizationSample(TypedDict):
    # Delta from the previous sample, or from ``SystemUtilization.startTimestamp``.
    dts: DurationMS
    cpuUtilization: float
    memoryUtilization: float


class SystemUtilization(TypedDict):
    totalMemoryBytes: float
    startTimestamp: UnixTimestampMS
    samples: list[SystemUtilizationSample]


# ``[time, percent]``: the first point's time is a Unix-ms timestamp, every
# later point's time is a delta in ms from the previous point.
TelemetryPoint = tuple[float, float]


class Report(TypedDict):
    version: Literal[1]
    category: str
    commitId: CommitId
    relatedCommitIds: NotRequired[list[CommitId]]
    configPath: NotRequired[GitFilePath]
    url: NotRequired[str]
    environments: list[Environment]
    suites: list[Suite]
    tests: NotRequired[list[Test]]
    unattributedErrors: NotRequired[list[ReportError]]
    sources: NotRequired[list[Source]]
    startTimestamp: UnixTimestampMS
    duration: DurationMS
    systemUtilization: NotRequired[SystemUtilization]
    cpuCount: NotRequired[int]
    cpuAvg: NotRequired[list[TelemetryPoint]]
    cpuMax: NotRequired[list[TelemetryPoint]]
    ram: NotRequired[list[TelemetryPoint]]
    ramBytes: NotRequired[float]


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
    "Source",
    "Suite",
    "SuiteType",
    "SystemData",
    "SystemUtilization",
    "SystemUtilizationSample",
    "TEST_STATUSES",
    "TelemetryPoint",
    "Test",
    "TestStatus",
    "TestStep",
    "TextEntry",
    "UnixTimestampMS",
    "VERSION",
]
