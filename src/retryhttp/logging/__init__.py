"""Structured logging utilities."""

from .setup import (
    LoggingConfig,
    build_logger,
    fatal,
    get_logger,
    new_test_logger,
    resolve_logging_config,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "build_logger",
    "get_logger",
    "fatal",
    "new_test_logger",
    "resolve_logging_config",
    "LoggingConfig",
]
