"""Public observability primitives: structured logging and correlation scope."""

from flakiness_report.observability.logging import (
    LoggingConfig,
    LoggingHandle,
    correlation_scope,
    get_active_logger,
    get_correlation_context,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "LoggingHandle",
    "correlation_scope",
    "get_active_logger",
    "get_correlation_context",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
