"""Configuration module."""

from taller.config.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)
from taller.config.settings import (
    FiscalSettings,
    Settings,
    StorageSettings,
    get_settings,
    reset_settings,
)

__all__ = [
    "Settings",
    "StorageSettings",
    "FiscalSettings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    "get_logger",
    "bind_request_context",
    "clear_request_context",
]
