"""
flakiness-report — validation engine.

Purpose
- Check a report document against one version's fixed rule set and return
  every violation as an ordered ``(path, message)`` issue.

Functional requirements
- Collect all issues in one pass; never fail fast and never raise.
- Walk recursive suites and steps without native recursion: each node is a
  generator that yields child nodes, and the engine drives an explicit stack
  of generators. Issues therefore come out in document order at any depth.
- Cross-check ``RunAttempt.environmentIdx`` against ``Report.environments``.

Non-functional requirements
- Pure: no mutation of the input, no shared state between runs.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from flakiness_report.constants import (
    ATTACHMENT_ID_MAX_LENGTH,
    ATTACHMENT_ID_MIN_LENGTH,
    CATEGORY_MAX_LENGTH,
    CATEGORY_MIN_LENGTH,
    COMMIT_ID_LENGTH,
    ENVIRONMENT_NAME_MAX_LENGTH,
    ENVIRONMENT_NAME_MIN_LENGTH,
    MAX_REPORTED_ISSUES,
    PERCENT_MAX,
    PERCENT_MIN,
    ROOT_PATH,
)
from flakiness_report.schema.issues import IssueCollector, IssueReport
from flakiness_report.schema.primitives import (
    as_array,
    as_enum,
    as_int,
    as_number,
    as_object,
    as_scalar_map,
    as_str,
    index,
    join,
    reject_unknown_keys,
    require_keys,
)

# A pending node: running it validates the node and yields its children.
_Node = Iterator["_Node"]


@dataclass(frozen=True, slots=True)
class Shape:
    """Required and optional keys of one entity."""

    required: frozenset[str]
    optional: frozenset[str] = frozenset()

    @property
    def allowed(self) -> frozenset[str]:
        return self.required | self.optional


@dataclass(frozen=True, slots=True)
class RuleSet:
    """Fixed rules of one report version."""

    version: int
    shapes: Mapping[str, Shape]
    test_statuses: tuple[str, ...]
    suite_types: tuple[str, ...]

    def shape(self, entity: str) -> Shape:
        return self.shapes[entity]


@dataclass(frozen=True, slots=True)
class ValidationSettings:
    """Caller-tunable policy knobs; defaults match the documented contract."""

    max_reported_issues: int = MAX_REPORTED_ISSUES
    check_environment_refs: bool = True
    reject_unknown_fields: bool = False

    @classmethod
    def from_mapping(cls, section: Mapping[str, object]) -> ValidationSettings:
        defaults = cls()
        max_issues = section.get("max_reported_issues", defaults.max_reported_issues)
        check_refs = section.get("check_environment_refs", defaults.check_environment_refs)
        reject_unknown = section.get("reject_unknown_fields", defaults.reject_unknown_fields)
        return cls(
            max_reported_issues=int(max_issues)
            if isinstance(max_issues, int) and not isinstance(max_issues, bool)
            else defaults.max_reported_issues,
            check_environment_refs=bool(check_refs),
            reject_unknown_fields=bool(reject_unknown),
        )


@dataclass(slots=True)
class ReportValidator:
    """Single-use validator; create one per document."""

    rules: RuleSet
    settings: ValidationSettings = field(default_factory=ValidationSettings)
    _issues: IssueCollector = field(default_factory=IssueCollector, init=False)
    _environment_count: int | None = field(default=None, init=False)

    def run(self, document: object) -> IssueReport | None:
        payload = as_object(document, ROOT_PATH, self._issues)
        if payload is not None:
            _drain(self._report(payload))
        return self._issues.report()

    # -- structure -----------------------------------------------------------

    def _shape(self, entity: str, payload: Mapping[str, object], path: str) -> Shape:
        shape = self.rules.shape(entity)
        require_keys(payload, shape.required, path, self._issues)
        if self.settings.reject_unknown_fields:
            reject_unknown_keys(payload, shape.allowed, path, self._issues)
        return shape

    def _items(
        self,
        payload: Mapping[str, object],
        shape: Shape,
        key: str,
        path: str,
    ) -> list[tuple[object, str]]:
        if key not in shape.allowed or key not in payload:
            return []
        key_path = join(path, key)
        items = as_array(payload[key], key_path, self._issues)
        if items is None:
            return []
        return [(item, index(key_path, position)) for position, item in enumerate(items)]

    def _present(self, payload: Mapping[str, object], shape: Shape, key: str) -> bool:
        return key in shape.allowed and key in payload

    # -- report --------------------------------------------------------------

    def _report(self, payload: Mapping[str, object]) -> _Node:
        issues = self._issues
        shape = self._shape("report", payload, "")

        if self._present(payload, shape, "version"):
            parsed = as_int(payload["version"], "version", issues)
            if parsed is not None and parsed != self.rules.version:
                issues.add("version", f"expected version {self.rules.version}, got {parsed}")

        if "category" in payload:
            as_str(
                payload["category"],
                "category",
                issues,
                min_len=CATEGORY_MIN_LENGTH,
                max_len=CATEGORY_MAX_LENGTH,
            )
        if "commitId" in payload:
            _commit_id(payload["commitId"], "commitId", issues)
        for item, item_path in self._items(payload, shape, "relatedCommitIds", ""):
            _commit_id(item, item_path, issues)
        for key in ("configPath", "url"):
            if self._present(payload, shape, key):
                as_str(payload[key], key, issues)

        if "environments" in payload:
            environments = as_array(payload["environments"], "environments", issues)
            if environments is not None:
                self._environment_count = len(environments)
                for position, item in enumerate(environments):
                    self._environment(item, index("environments", position))

        for item, item_path in self._items(payload, shape, "tests", ""):
            yield self._test(item, item_path)
        for item, item_path in self._items(payload, shape, "suites", ""):
            yield self._suite(item, item_path)
        for item, item_path in self._items(payload, shape, "unattributedErrors", ""):
            self._error(item, item_path)
        for item, item_path in self._items(payload, shape, "sources", ""):
            self._source(item, item_path)

        for key in ("startTimestamp", "duration"):
            if key in payload:
                as_number(payload[key], key, issues, minimum=0)

        if self._present(payload, shape, "systemUtilization"):
            self._system_utilization(payload["systemUtilization"], "systemUtilization")
        if self._present(payload, shape, "cpuCount"):
            as_int(payload["cpuCount"], "cpuCount", issues, minimum=0)
        for key in ("cpuAvg", "cpuMax", "ram"):
            for item, item_path in self._items(payload, shape, key, ""):
                self._telemetry_point(item, item_path)
        if self._present(payload, shape, "ramBytes"):
            as_number(payload["ramBytes"], "ramBytes", issues, minimum=0)

    # -- leaf entities -------------------------------------------------------

    def _environment(self, value: object, path: str) -> None:
        issues = self._issues
        payload = as_object(value, path, issues)
        if payload is None:
            return
        shape = self._shape("environment", payload, path)
        if "name" in payload:
            as_str(
                payload["name"],
                join(path, "name"),
                issues,
                min_len=ENVIRONMENT_NAME_MIN_LENGTH,
                max_len=ENVIRONMENT_NAME_MAX_LENGTH,
            )
        if self._present(payload, shape, "systemData"):
            system_path = join(path, "systemData")
            system = as_object(payload["systemData"], system_path, issues)
            if system is not None:
                system_shape = self._shape("systemData", system, system_path)
                for key in sorted(system_shape.allowed):
                    if key in system:
                        as_str(system[key], join(system_path, key), issues)
        for key in ("metadata", "userSuppliedData"):
            if self._present(payload, shape, key):
                as_scalar_map(payload[key], join(path, key), issues)

    def _location(self, value: object, path: str) -> None:
        issues = self._issues
        payload = as_object(value, path, issues)
        if payload is None:
            return
        self._shape("location", payload, path)
        if "file" in payload:
            as_str(payload["file"], join(path, "file"), issues)
        for key in ("line", "column"):
            if key in payload:
                as_number(payload[key], join(path, key), issues)

    def _error(self, value: object, path: str) -> None:
        issues = self._issues
        payload = as_object(value, path, issues)
        if payload is None:
            return
        shape = self._shape("error", payload, path)
        if self._present(payload, shape, "location"):
            self._location(payload["location"], join(path, "location"))
        for key in ("message", "stack", "snippet", "value"):
            if self._present(payload, shape, key):
                as_str(payload[key], join(path, key), issues)

    def _attachment(self, value: object, path: str) -> None:
        issues = self._issues
        payload = as_object(value, path, issues)
        if payload is None:
            return
        self._shape("attachment", payload, path)
        for key in ("name", "contentType"):
            if key in payload:
                as_str(payload[key], join(path, key), issues)
        if "id" in payload:
            as_str(
                payload["id"],
                join(path, "id"),
                issues,
                min_len=ATTACHMENT_ID_MIN_LENGTH,
                max_len=ATTACHMENT_ID_MAX_LENGTH,
            )

    def _annotation(self, value: object, path: str) -> None:
        issues = self._issues
        payload = as_object(value, path, issues)
        if payload is None:
            return
        shape = self._shape("annotation", payload, path)
        for key in ("type", "description"):
            if self._present(payload, shape, key):
                as_str(payload[key], join(path, key), issues)
        if self._present(payload, shape, "location"):
            self._location(payload["location"], join(path, "location"))

    def _stdio_entry(self, value: object, path: str) -> None:
        issues = self._issues
        payload = as_object(value, path, issues)
        if payload is None:
            return
        # First matching variant wins: text, then buffer.
        for variant in ("text", "buffer"):
            if isinstance(payload.get(variant), str):
                if self.settings.reject_unknown_fields:
                    reject_unknown_keys(payload, frozenset({variant}), path, issues)
                return
        issues.add(path, "expected {text: string} or {buffer: string} entry")

    def _source(self, value: object, path: str) -> None:
        issues = self._issues
        payload = as_object(value, path, issues)
        if payload is None:
            return
        shape = self._shape("source", payload, path)
        for key in ("filePath", "text", "contentType"):
            if self._present(payload, shape, key):
                as_str(payload[key], join(path, key), issues)
        if self._present(payload, shape, "lineOffset"):
            as_number(payload["lineOffset"], join(path, "lineOffset"), issues)

    def _system_utilization(self, value: object, path: str) -> None:
        issues = self._issues
        payload = as_object(value, path, issues)
        if payload is None:
            return
        shape = self._shape("systemUtilization", payload, path)
        for key in ("totalMemoryBytes", "startTimestamp"):
            if key in payload:
                as_number(payload[key], join(path, key), issues, minimum=0)
        for item, item_path in self._items(payload, shape, "samples", path):
            sample = as_object(item, item_path, issues)
            if sample is None:
                continue
            self._shape("systemUtilizationSample", sample, item_path)
            if "dts" in sample:
                as_number(sample["dts"], join(item_path, "dts"), issues, minimum=0)
            for key in ("cpuUtilization", "memoryUtilization"):
                if key in sample:
                    _percent(sample[key], join(item_path, key), issues)

    def _telemetry_point(self, value: object, path: str) -> None:
        issues = self._issues
        point = as_array(value, path, issues)
        if point is None:
            return
        if len(point) != 2:
            issues.add(path, f"expected [time, value] pair, got {len(point)} item(s)")
            return
        as_number(point[0], index(path, 0), issues, minimum=0)
        _percent(point[1], index(path, 1), issues)

    # -- recursive entities --------------------------------------------------

    def _suite(self, value: object, path: str) -> _Node:
        issues = self._issues
        payload = as_object(value, path, issues)
        if payload is None:
            return
        shape = self._shape("suite", payload, path)
        if "type" in payload:
            as_enum(
                payload["type"],
                join(path, "type"),
                issues,
                allowed_values=self.rules.suite_types,
            )
        if "title" in payload:
            as_str(payload["title"], join(path, "title"), issues)
        if self._present(payload, shape, "location"):
            self._location(payload["location"], join(path, "location"))
        for item, item_path in self._items(payload, shape, "tests", path):
            yield self._test(item, item_path)
        for item, item_path in self._items(payload, shape, "suites", path):
            yield self._suite(item, item_path)

    def _test(self, value: object, path: str) -> _Node:
        issues = self._issues
        payload = as_object(value, path, issues)
        if payload is None:
            return
        shape = self._shape("test", payload, path)
        if "title" in payload:
            as_str(payload["title"], join(path, "title"), issues)
        if self._present(payload, shape, "location"):
            self._location(payload["location"], join(path, "location"))
        for item, item_path in self._items(payload, shape, "tags", path):
            as_str(item, item_path, issues)
        for item, item_path in self._items(payload, shape, "attempts", path):
            yield self._attempt(item, item_path)

    def _attempt(self, value: object, path: str) -> _Node:
        issues = self._issues
        payload = as_object(value, path, issues)
        if payload is None:
            return
        shape = self._shape("attempt", payload, path)

        if "environmentIdx" in payload:
            env_path = join(path, "environmentIdx")
            env_idx = as_int(payload["environmentIdx"], env_path, issues, minimum=0)
            if env_idx is not None:
                self._check_environment_ref(env_idx, env_path)
        for key in ("expectedStatus", "status"):
            if key in payload:
                as_enum(
                    payload[key],
                    join(path, key),
                    issues,
                    allowed_values=self.rules.test_statuses,
                )
        for key in ("startTimestamp", "duration", "timeout"):
            if self._present(payload, shape, key):
                as_number(payload[key], join(path, key), issues, minimum=0)
        for item, item_path in self._items(payload, shape, "annotations", path):
            self._annotation(item, item_path)
        for item, item_path in self._items(payload, shape, "errors", path):
            self._error(item, item_path)
        if self._present(payload, shape, "parallelIndex"):
            as_int(payload["parallelIndex"], join(path, "parallelIndex"), issues, minimum=0)
        for item, item_path in self._items(payload, shape, "steps", path):
            yield self._step(item, item_path)
        for key in ("stdout", "stderr"):
            for item, item_path in self._items(payload, shape, key, path):
                self._stdio_entry(item, item_path)
        for item, item_path in self._items(payload, shape, "attachments", path):
            self._attachment(item, item_path)

    def _step(self, value: object, path: str) -> _Node:
        issues = self._issues
        payload = as_object(value, path, issues)
        if payload is None:
            return
        shape = self._shape("step", payload, path)
        if "title" in payload:
            as_str(payload["title"], join(path, "title"), issues)
        if "duration" in payload:
            as_number(payload["duration"], join(path, "duration"), issues, minimum=0)
        if self._present(payload, shape, "location"):
            self._location(payload["location"], join(path, "location"))
        if self._present(payload, shape, "snippet"):
            as_str(payload["snippet"], join(path, "snippet"), issues)
        if self._present(payload, shape, "error"):
            self._error(payload["error"], join(path, "error"))
        for item, item_path in self._items(payload, shape, "steps", path):
            yield self._step(item, item_path)

    def _check_environment_ref(self, env_idx: int, path: str) -> None:
        if not self.settings.check_environment_refs or self._environment_count is None:
            return
        if env_idx >= self._environment_count:
            self._issues.add(
                path,
                f"environment index {env_idx} is out of range; "
                f"report defines {self._environment_count} environment(s)",
            )


def _drain(root: _Node) -> None:
    stack: list[_Node] = [root]
    while stack:
        try:
            child = next(stack[-1])
        except StopIteration:
            stack.pop()
            continue
        stack.append(child)


def _commit_id(value: object, path: str, issues: IssueCollector) -> None:
    as_str(value, path, issues, min_len=COMMIT_ID_LENGTH, max_len=COMMIT_ID_LENGTH)


def _percent(value: object, path: str, issues: IssueCollector) -> None:
    as_number(value, path, issues, minimum=PERCENT_MIN, maximum=PERCENT_MAX)


def run_validator(
    rules: RuleSet,
    document: object,
    settings: ValidationSettings | None = None,
) -> IssueReport | None:
    validator = ReportValidator(rules=rules, settings=settings or ValidationSettings())
    return validator.run(document)


def shape_table(**shapes: Any) -> dict[str, Shape]:
    """Build an entity → ``Shape`` table from ``(required, optional)`` pairs."""

    table: dict[str, Shape] = {}
    for entity, (required, optional) in shapes.items():
        table[entity] = Shape(required=frozenset(required), optional=frozenset(optional))
    return table


__all__ = [
    "ReportValidator",
    "RuleSet",
    "Shape",
    "ValidationSettings",
    "run_validator",
    "shape_table",
]
