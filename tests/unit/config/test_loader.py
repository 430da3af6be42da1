"""
flakiness-report — unit tests for config loader

Purpose
- Validate config loading from defaults, TOML, env overrides and explicit overrides.

What this test file should cover
- Precedence: overrides > env > file > defaults.
- Env var path mapping and type coercion.
- Clear load errors for missing files, bad TOML and bad env values.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from flakiness_report.config import (
    ConfigLoadError,
    ConfigValidationError,
    load_config,
)

if TYPE_CHECKING:
    from pathlib import Path


def _write_config(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_defaults_without_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    config = load_config(environ={})

    assert config == {
        "validation": {
            "max_reported_issues": 5,
            "check_environment_refs": True,
            "reject_unknown_fields": False,
        },
        "logging": {"log_level": "WARNING", "log_format": "json"},
    }


def test_default_file_is_picked_up_from_cwd(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _write_config(tmp_path / "flakiness_report.toml", "[logging]\nlog_format = \"text\"\n")
    monkeypatch.chdir(tmp_path)

    assert load_config(environ={})["logging"]["log_format"] == "text"


def test_precedence_file_env_overrides(tmp_path: Path) -> None:
    config_path = tmp_path / "conf" / "tools.toml"
    _write_config(
        config_path,
        """
[validation]
max_reported_issues = 3
reject_unknown_fields = true

[logging]
log_level = "INFO"
""".strip(),
    )

    config = load_config(
        config_path,
        environ={
            "FLAKINESS_REPORT_VALIDATION_MAX_REPORTED_ISSUES": "7",
            "FLAKINESS_REPORT_VALIDATION_CHECK_ENVIRONMENT_REFS": "off",
            "FLAKINESS_REPORT_LOGGING_LOG_LEVEL": "debug",
        },
        overrides={"validation.max_reported_issues": 10, "logging": {"log_format": "text"}},
    )

    assert config["validation"] == {
        "max_reported_issues": 10,
        "check_environment_refs": False,
        "reject_unknown_fields": True,
    }
    assert config["logging"] == {"log_level": "DEBUG", "log_format": "text"}


def test_missing_explicit_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="config file not found"):
        load_config(tmp_path / "absent.toml", environ={})


def test_invalid_toml_raises(tmp_path: Path) -> None:
    config_path = tmp_path / "broken.toml"
    _write_config(config_path, "[validation\n")

    with pytest.raises(ConfigLoadError, match="invalid TOML"):
        load_config(config_path, environ={})


@pytest.mark.parametrize(
    ("name", "value", "message"),
    [
        ("FLAKINESS_REPORT_VALIDATION_MAX_REPORTED_ISSUES", "many", "must be an integer"),
        ("FLAKINESS_REPORT_VALIDATION_REJECT_UNKNOWN_FIELDS", "maybe", "must be a boolean"),
    ],
)
def test_bad_env_values_raise(tmp_path: Path, name: str, value: str, message: str) -> None:
    config_path = tmp_path / "tools.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigLoadError, match=message):
        load_config(config_path, environ={name: value})


def test_unknown_env_names_are_ignored(tmp_path: Path) -> None:
    config_path = tmp_path / "tools.toml"
    _write_config(config_path, "")

    config = load_config(config_path, environ={"FLAKINESS_REPORT_LOGGING_COLOUR": "red"})

    assert "colour" not in config["logging"]


def test_file_values_are_validated(tmp_path: Path) -> None:
    config_path = tmp_path / "tools.toml"
    _write_config(config_path, "[validation]\nmax_reported_issues = 0\n")

    with pytest.raises(ConfigValidationError, match="validation.max_reported_issues: must be >= 1"):
        load_config(config_path, environ={})
