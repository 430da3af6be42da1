"""
flakiness-report config package public API.

Purpose
- Export config loading/validation entrypoints and public error types.

Functional requirements
- Support loading from ``flakiness_report.toml`` + ``FLAKINESS_REPORT_`` env overrides.
- Fail fast with clear structured validation/load errors.
"""

from flakiness_report.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ConfigLoadError,
    load_config,
)
from flakiness_report.config.schema import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    ConfigValidationResult,
    ReportToolsConfig,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
    validation_settings,
)

__all__ = [
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "ReportToolsConfig",
    "assert_valid_config",
    "default_config",
    "load_config",
    "merge_config",
    "validate_config",
    "validation_settings",
]
