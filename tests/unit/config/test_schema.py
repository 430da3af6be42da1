"""
flakiness-report — unit tests for config schema

Purpose
- Validate defaults, structured validation issues and the engine settings bridge.
"""

from __future__ import annotations

import pytest

from flakiness_report.config.schema import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
    validation_settings,
)
from flakiness_report.schema import ValidationSettings


def test_defaults_are_valid_and_copied() -> None:
    config = default_config()
    assert validate_config(config).is_valid

    config["validation"]["max_reported_issues"] = 99
    assert DEFAULT_CONFIG["validation"]["max_reported_issues"] == 5


def test_validation_reports_paths_and_messages() -> None:
    config = merge_config(
        default_config(),
        {
            "validation": {"max_reported_issues": 0, "check_environment_refs": "yes"},
            "logging": {"log_level": "LOUD", "colour": True},
            "extras": {},
        },
    )

    result = validate_config(config)

    assert result.config is None
    assert [(issue.path, issue.message) for issue in result.issues] == [
        ("extras", "unknown field"),
        ("validation.max_reported_issues", "must be >= 1"),
        ("validation.check_environment_refs", "expected boolean, got string"),
        ("logging.colour", "unknown field"),
        (
            "logging.log_level",
            "invalid value 'LOUD'; expected one of: 'DEBUG', 'INFO', 'WARNING', 'ERROR'",
        ),
    ]


def test_missing_sections_are_required() -> None:
    result = validate_config({"logging": DEFAULT_CONFIG["logging"]})
    assert [(issue.path, issue.message) for issue in result.issues] == [
        ("validation", "missing required field")
    ]
    assert result.issues[0].render() == "- validation: missing required field"


def test_log_enums_are_normalized() -> None:
    config = merge_config(
        default_config(), {"logging": {"log_level": "debug", "log_format": "TEXT"}}
    )

    normalized = assert_valid_config(config)

    assert normalized["logging"] == {"log_level": "DEBUG", "log_format": "text"}


def test_assert_valid_config_raises_with_rendered_issues() -> None:
    with pytest.raises(ConfigValidationError) as exc_info:
        assert_valid_config([])
    assert str(exc_info.value) == "invalid config:\n- <root>: expected object, got list"


def test_merge_config_is_deep_and_non_mutating() -> None:
    base = default_config()

    merged = merge_config(base, {"validation": {"reject_unknown_fields": True}})

    assert merged["validation"] == {
        "max_reported_issues": 5,
        "check_environment_refs": True,
        "reject_unknown_fields": True,
    }
    assert base["validation"]["reject_unknown_fields"] is False


def test_validation_settings_bridge() -> None:
    config = merge_config(
        default_config(),
        {"validation": {"max_reported_issues": 2, "check_environment_refs": False}},
    )

    assert validation_settings(config) == ValidationSettings(
        max_reported_issues=2,
        check_environment_refs=False,
        reject_unknown_fields=False,
    )
    assert validation_settings({}) == ValidationSettings()
