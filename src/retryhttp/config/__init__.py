"""Configuration management utilities."""

from .settings import ClientSettings, LoggingSettings, get_logging_settings, get_settings

__all__ = [
    "ClientSettings",
    "LoggingSettings",
    "get_settings",
    "get_logging_settings",
]
