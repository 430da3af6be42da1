"""
flakiness-report — tool configuration schema and validation.

Purpose
- Define built-in defaults for the validation and logging sections.
- Validate config payloads and return structured issues (field path + message).

Functional requirements
- Reject unknown sections and keys; require every key after merging defaults.
- Deterministic deep-merge so file, env and explicit overrides layer cleanly.

Non-functional requirements
- Keep rules small and easy to audit; no I/O in this module.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, TypedDict

from flakiness_report.constants import MAX_REPORTED_ISSUES
from flakiness_report.schema.engine import ValidationSettings
from flakiness_report.schema.issues import IssueCollector, ReportValidationIssue
from flakiness_report.schema.primitives import (
    as_bool,
    as_enum,
    as_int,
    as_object,
    join,
    reject_unknown_keys,
    require_keys,
)

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMATS: Final[tuple[str, ...]] = ("json", "text")

_SECTIONS: Final[frozenset[str]] = frozenset({"validation", "logging"})
_VALIDATION_KEYS: Final[frozenset[str]] = frozenset(
    {"max_reported_issues", "check_environment_refs", "reject_unknown_fields"}
)
_LOGGING_KEYS: Final[frozenset[str]] = frozenset({"log_level", "log_format"})


class ValidationConfig(TypedDict):
    max_reported_issues: int
    check_environment_refs: bool
    reject_unknown_fields: bool


class LoggingSectionConfig(TypedDict):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]
    log_format: Literal["json", "text"]


class ReportToolsConfig(TypedDict):
    validation: ValidationConfig
    logging: LoggingSectionConfig


DEFAULT_CONFIG: Final[ReportToolsConfig] = {
    "validation": {
        "max_reported_issues": MAX_REPORTED_ISSUES,
        "check_environment_refs": True,
        "reject_unknown_fields": False,
    },
    "logging": {
        "log_level": "WARNING",
        "log_format": "json",
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ReportValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ReportValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(item.render() for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


def default_config() -> ReportToolsConfig:
    """Return a deep copy of the built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``."""

    merged = _deep_copy_mapping(base)
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate a complete config and return structured issues with dotted paths."""

    issues = IssueCollector()
    root = as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    reject_unknown_keys(root, _SECTIONS, "", issues)
    require_keys(root, _SECTIONS, "", issues)

    normalized: dict[str, Any] = {}
    if "validation" in root:
        section = as_object(root["validation"], "validation", issues)
        if section is not None:
            normalized["validation"] = _validate_validation(section, "validation", issues)
    if "logging" in root:
        section = as_object(root["logging"], "logging", issues)
        if section is not None:
            normalized["logging"] = _validate_logging(section, "logging", issues)

    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def validation_settings(config: Mapping[str, object]) -> ValidationSettings:
    """Build engine settings from the ``[validation]`` section of a loaded config."""

    section = config.get("validation")
    if not isinstance(section, Mapping):
        return ValidationSettings()
    return ValidationSettings.from_mapping(section)


def _validate_validation(
    payload: Mapping[str, object], path: str, issues: IssueCollector
) -> dict[str, Any]:
    reject_unknown_keys(payload, _VALIDATION_KEYS, path, issues)
    require_keys(payload, _VALIDATION_KEYS, path, issues)

    out: dict[str, Any] = {}
    if "max_reported_issues" in payload:
        parsed_cap = as_int(
            payload["max_reported_issues"],
            join(path, "max_reported_issues"),
            issues,
            minimum=1,
        )
        if parsed_cap is not None:
            out["max_reported_issues"] = parsed_cap
    for key in ("check_environment_refs", "reject_unknown_fields"):
        if key in payload:
            parsed_flag = as_bool(payload[key], join(path, key), issues)
            if parsed_flag is not None:
                out[key] = parsed_flag
    return out


def _validate_logging(
    payload: Mapping[str, object], path: str, issues: IssueCollector
) -> dict[str, Any]:
    reject_unknown_keys(payload, _LOGGING_KEYS, path, issues)
    require_keys(payload, _LOGGING_KEYS, path, issues)

    out: dict[str, Any] = {}
    if "log_level" in payload:
        parsed_level = as_enum(
            payload["log_level"],
            join(path, "log_level"),
            issues,
            allowed_values=LOG_LEVELS,
            normalize=str.upper,
        )
        if parsed_level is not None:
            out["log_level"] = parsed_level
    if "log_format" in payload:
        parsed_format = as_enum(
            payload["log_format"],
            join(path, "log_format"),
            issues,
            allowed_values=LOG_FORMATS,
            normalize=str.lower,
        )
        if parsed_format is not None:
            out["log_format"] = parsed_format
    return out


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        if isinstance(value, Mapping):
            existing = target.get(key)
            nested = _deep_copy_mapping(existing) if isinstance(existing, Mapping) else {}
            _merge_into(nested, value)
            target[key] = nested
        else:
            target[key] = copy.deepcopy(value)


def _deep_copy_mapping(value: Mapping[str, object]) -> dict[str, Any]:
    return {key: copy.deepcopy(value[key]) for key in sorted(value)}


__all__ = [
    "DEFAULT_CONFIG",
    "LOG_FORMATS",
    "LOG_LEVELS",
    "ConfigValidationError",
    "ConfigValidationResult",
    "LoggingSectionConfig",
    "ReportToolsConfig",
    "ValidationConfig",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "validate_config",
    "validation_settings",
]
