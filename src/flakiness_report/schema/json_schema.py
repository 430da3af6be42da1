"""JSON Schema (draft 2020-12) export of the current report shape.

The exported schema mirrors the structural and bounds rules of
``V1_RULES``. The environment-index cross-reference cannot be expressed in
JSON Schema and is only enforced by ``validate``.
"""

from __future__ import annotations

import copy
from typing import Any, Final

from flakiness_report.constants import (
    ATTACHMENT_ID_MAX_LENGTH,
    ATTACHMENT_ID_MIN_LENGTH,
    CATEGORY_MAX_LENGTH,
    CATEGORY_MIN_LENGTH,
    COMMIT_ID_LENGTH,
    CURRENT_REPORT_VERSION,
    ENVIRONMENT_NAME_MAX_LENGTH,
    ENVIRONMENT_NAME_MIN_LENGTH,
    PERCENT_MAX,
    PERCENT_MIN,
)
from flakiness_report.schema.versions import V1_RULES

JSON_SCHEMA_DIALECT: Final[str] = "https://json-schema.org/draft/2020-12/schema"

_STRING: Final[dict[str, Any]] = {"type": "string"}
_NUMBER: Final[dict[str, Any]] = {"type": "number"}
_NON_NEGATIVE: Final[dict[str, Any]] = {"type": "number", "minimum": 0}
_NON_NEGATIVE_INT: Final[dict[str, Any]] = {"type": "integer", "minimum": 0}
_PERCENT: Final[dict[str, Any]] = {"type": "number", "minimum": PERCENT_MIN, "maximum": PERCENT_MAX}
_COMMIT_ID: Final[dict[str, Any]] = {
    "type": "string",
    "minLength": COMMIT_ID_LENGTH,
    "maxLength": COMMIT_ID_LENGTH,
}
_SCALAR_MAP: Final[dict[str, Any]] = {
    "type": "object",
    "additionalProperties": {"type": ["string", "boolean", "number"]},
}


def _ref(name: str) -> dict[str, Any]:
    return {"$ref": f"#/$defs/{name}"}


def _array(items: dict[str, Any]) -> dict[str, Any]:
    return {"type": "array", "items": items}


def _object(entity: str, properties: dict[str, dict[str, Any]]) -> dict[str, Any]:
    shape = V1_RULES.shape(entity)
    missing = shape.allowed - set(properties)
    if missing:
        raise RuntimeError(f"json schema for {entity!r} lacks properties: {sorted(missing)}")
    return {
        "type": "object",
        "properties": {key: properties[key] for key in sorted(properties)},
        "required": sorted(shape.required),
    }


def _definitions() -> dict[str, dict[str, Any]]:
    telemetry_point = {
        "type": "array",
        "prefixItems": [_NON_NEGATIVE, _PERCENT],
        "minItems": 2,
        "maxItems": 2,
    }
    return {
        "Location": _object(
            "location",
            {"file": _STRING, "line": _NUMBER, "column": _NUMBER},
        ),
        "ReportError": _object(
            "error",
            {
                "location": _ref("Location"),
                "message": _STRING,
                "stack": _STRING,
                "snippet": _STRING,
                "value": _STRING,
            },
        ),
        "STDIOEntry": {
            "anyOf": [
                {"type": "object", "properties": {"text": _STRING}, "required": ["text"]},
                {"type": "object", "properties": {"buffer": _STRING}, "required": ["buffer"]},
            ]
        },
        "Attachment": _object(
            "attachment",
            {
                "name": _STRING,
                "contentType": _STRING,
                "id": {
                    "type": "string",
                    "minLength": ATTACHMENT_ID_MIN_LENGTH,
                    "maxLength": ATTACHMENT_ID_MAX_LENGTH,
                },
            },
        ),
        "Annotation": _object(
            "annotation",
            {"type": _STRING, "description": _STRING, "location": _ref("Location")},
        ),
        "TestStep": _object(
            "step",
            {
                "title": _STRING,
                "duration": _NON_NEGATIVE,
                "location": _ref("Location"),
                "snippet": _STRING,
                "error": _ref("ReportError"),
                "steps": _array(_ref("TestStep")),
            },
        ),
        "RunAttempt": _object(
            "attempt",
            {
                "environmentIdx": _NON_NEGATIVE_INT,
                "expectedStatus": {"enum": list(V1_RULES.test_statuses)},
                "status": {"enum": list(V1_RULES.test_statuses)},
                "startTimestamp": _NON_NEGATIVE,
                "duration": _NON_NEGATIVE,
                "timeout": _NON_NEGATIVE,
                "annotations": _array(_ref("Annotation")),
                "errors": _array(_ref("ReportError")),
                "parallelIndex": _NON_NEGATIVE_INT,
                "steps": _array(_ref("TestStep")),
                "stdout": _array(_ref("STDIOEntry")),
                "stderr": _array(_ref("STDIOEntry")),
                "attachments": _array(_ref("Attachment")),
            },
        ),
        "Test": _object(
            "test",
            {
                "title": _STRING,
                "location": _ref("Location"),
                "tags": _array(_STRING),
                "attempts": _array(_ref("RunAttempt")),
            },
        ),
        "Suite": _object(
            "suite",
            {
                "type": {"enum": list(V1_RULES.suite_types)},
                "title": _STRING,
                "location": _ref("Location"),
                "suites": _array(_ref("Suite")),
                "tests": _array(_ref("Test")),
            },
        ),
        "Environment": _object(
            "environment",
            {
                "name": {
                    "type": "string",
                    "minLength": ENVIRONMENT_NAME_MIN_LENGTH,
                    "maxLength": ENVIRONMENT_NAME_MAX_LENGTH,
                },
                "systemData": _object(
                    "systemData",
                    {"osName": _STRING, "osVersion": _STRING, "osArch": _STRING},
                ),
                "metadata": _SCALAR_MAP,
                "userSuppliedData": _SCALAR_MAP,
            },
        ),
        "Source": _object(
            "source",
            {
                "filePath": _STRING,
                "text": _STRING,
                "contentType": _STRING,
                "lineOffset": _NUMBER,
            },
        ),
        "SystemUtilization": _object(
            "systemUtilization",
            {
                "totalMemoryBytes": _NON_NEGATIVE,
                "startTimestamp": _NON_NEGATIVE,
                "samples": _array(
                    _object(
                        "systemUtilizationSample",
                        {
                            "dts": _NON_NEGATIVE,
                            "cpuUtilization": _PERCENT,
                            "memoryUtilization": _PERCENT,
                        },
                    )
                ),
            },
        ),
        "TelemetryPoint": telemetry_point,
    }


def _report_schema() -> dict[str, Any]:
    schema = _object(
        "report",
        {
            "version": {"const": CURRENT_REPORT_VERSION},
            "category": {
                "type": "string",
                "minLength": CATEGORY_MIN_LENGTH,
                "maxLength": CATEGORY_MAX_LENGTH,
            },
            "commitId": _COMMIT_ID,
            "relatedCommitIds": _array(_COMMIT_ID),
            "configPath": _STRING,
            "url": _STRING,
            "environments": _array(_ref("Environment")),
            "suites": _array(_ref("Suite")),
            "tests": _array(_ref("Test")),
            "unattributedErrors": _array(_ref("ReportError")),
            "sources": _array(_ref("Source")),
            "startTimestamp": _NON_NEGATIVE,
            "duration": _NON_NEGATIVE,
            "systemUtilization": _ref("SystemUtilization"),
            "cpuCount": _NON_NEGATIVE_INT,
            "cpuAvg": _array(_ref("TelemetryPoint")),
            "cpuMax": _array(_ref("TelemetryPoint")),
            "ram": _array(_ref("TelemetryPoint")),
            "ramBytes": _NON_NEGATIVE,
        },
    )
    return {
        "$schema": JSON_SCHEMA_DIALECT,
        "title": "Report",
        **schema,
        "$defs": _definitions(),
    }


_CACHED_SCHEMA: dict[str, Any] | None = None


def json_schema() -> dict[str, Any]:
    """Return a fresh copy of the JSON Schema for the current report version."""

    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        _CACHED_SCHEMA = _report_schema()
    return copy.deepcopy(_CACHED_SCHEMA)


__all__ = ["JSON_SCHEMA_DIALECT", "json_schema"]
