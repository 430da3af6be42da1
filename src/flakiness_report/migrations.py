"""
flakiness-report — report version migrations.

Purpose
- Map older report versions onto the current shape with pure functions.

Functional requirements
- Never mutate the input; legacy documents are copied with an explicit stack
  before editing, so arbitrarily deep suite and step trees are safe.
- Documents already at (or beyond) the target version are returned as-is.
- Only the documented field moves happen; everything else, including the
  delta-encoded telemetry series, passes through unchanged.
- Output is not validated here; run ``flakiness_report.schema.validate``
  afterwards when a conformance guarantee is needed.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Final, cast

import structlog

from flakiness_report.constants import CURRENT_REPORT_VERSION, LEGACY_REPORT_VERSION
from flakiness_report.domain import v0, v1
from flakiness_report.schema.versions import UnsupportedReportVersionError

_LOGGER = structlog.get_logger(__name__)

Migration = Callable[[Mapping[str, Any]], Mapping[str, Any]]


def detect_version(document: Mapping[str, object]) -> int:
    """Return the schema version a document declares; no tag means version 0."""

    if "version" not in document:
        return LEGACY_REPORT_VERSION
    raw = document["version"]
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise UnsupportedReportVersionError(raw)
    return raw


def migrate_to_v0(document: v0.Report) -> v0.Report:
    """Version 0 is the oldest shape; nothing to do."""

    return document


def migrate_to_v1(document: v0.Report | v1.Report) -> v1.Report:
    """Map a version 0 document onto version 1.

    - ``opaqueData`` is dropped from the report and from every environment.
    - ``Environment.userSuppliedData`` is renamed to ``metadata``.
    - The result is stamped with ``version: 1``.
    """

    version = detect_version(cast("Mapping[str, object]", document))
    if version >= v1.VERSION:
        if version > CURRENT_REPORT_VERSION:
            _LOGGER.warning(
                "report_version_newer_than_supported",
                report_version=version,
                supported_version=CURRENT_REPORT_VERSION,
            )
        return cast("v1.Report", document)

    migrated = cast("dict[str, Any]", _copy_tree(dict(document)))
    migrated.pop("opaqueData", None)

    environments = migrated.get("environments")
    if isinstance(environments, list):
        migrated["environments"] = [_migrate_environment(env) for env in environments]

    migrated["version"] = v1.VERSION
    _LOGGER.info(
        "report_migrated",
        from_version=version,
        to_version=v1.VERSION,
        environment_count=len(environments) if isinstance(environments, list) else 0,
    )
    return cast("v1.Report", migrated)


def _copy_tree(value: object) -> object:
    """Copy nested dicts and lists with an explicit stack; leaves are shared."""

    if not isinstance(value, (dict, list)):
        return value
    root: dict[str, Any] | list[Any] = {} if isinstance(value, dict) else []
    stack: list[tuple[dict[str, Any] | list[Any], dict[str, Any] | list[Any]]] = [(value, root)]
    while stack:
        source, target = stack.pop()
        entries = source.items() if isinstance(source, dict) else enumerate(source)
        for key, item in entries:
            child: object = item
            if isinstance(item, dict):
                child = {}
                stack.append((item, child))
            elif isinstance(item, list):
                child = []
                stack.append((item, child))
            if isinstance(target, dict):
                target[key] = child
            else:
                target.append(child)
    return root


def _migrate_environment(environment: object) -> object:
    if not isinstance(environment, dict):
        return environment
    migrated = {key: value for key, value in environment.items() if key != "opaqueData"}
    if "userSuppliedData" in migrated:
        migrated["metadata"] = migrated.pop("userSuppliedData")
    return migrated


MIGRATIONS: Final[Mapping[int, Migration]] = {
    LEGACY_REPORT_VERSION: cast("Migration", migrate_to_v0),
    CURRENT_REPORT_VERSION: cast("Migration", migrate_to_v1),
}


def migrate_to_latest(document: v0.Report | v1.Report) -> v1.Report:
    """Migrate any supported report version to the current one."""

    return migrate_to_v1(document)


__all__ = [
    "MIGRATIONS",
    "Migration",
    "detect_version",
    "migrate_to_latest",
    "migrate_to_v0",
    "migrate_to_v1",
]
