"""Configuration package."""

from src.config.settings import (
    EmailSettings,
    GoogleSheetsSettings,
    Settings,
    TrackerSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "EmailSettings",
    "GoogleSheetsSettings",
    "Settings",
    "TrackerSettings",
    "get_settings",
    "validate_all_settings",
]
