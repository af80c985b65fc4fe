"""Configuration package."""

from expense_splitter.config.settings import (
    AppSettings,
    EngineSettings,
    Settings,
    get_settings,
    validate_all_settings,
)
from expense_splitter.config.log_setup import configure_logging, resolve_log_level

__all__ = [
    "AppSettings",
    "EngineSettings",
    "Settings",
    "configure_logging",
    "get_settings",
    "resolve_log_level",
    "validate_all_settings",
]
