"""
Configuration Management for Solat Qada Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Each external collaborator (Google Sheets, SMTP) has its own settings
class so the tracker can start with any subset of them configured.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TrackerSettings(BaseSettings):
    """Core tracker behaviour and local cache location."""

    model_config = SettingsConfigDict(
        env_prefix="QADA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    cache_path: str = Field(
        default="~/.solat-qada/cache.json",
        description="File used as the on-device key-value cache"
    )
    cycle_length_days: int = Field(
        default=7,
        ge=1,
        le=31,
        description="Length of a tracking cycle in whole days"
    )
    warning_days_left: int = Field(
        default=2,
        ge=0,
        description="Warn when this many days or fewer are left and a target is unmet"
    )
    min_pin_length: int = Field(
        default=4,
        ge=1,
        description="Minimum PIN length accepted at registration"
    )
    remote_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Timeout applied to each remote store call"
    )

    @property
    def resolved_cache_path(self) -> Path:
        return Path(self.cache_path).expanduser()


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets remote store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    users_sheet_name: str = Field(
        default="Users",
        description="Name of the sheet holding one row per user"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class EmailSettings(BaseSettings):
    """SMTP settings for the weekly backup email."""

    model_config = SettingsConfigDict(
        env_prefix="BACKUP_EMAIL_",
        extra="ignore"
    )

    smtp_host: str = Field(
        ...,
        description="SMTP server hostname"
    )
    smtp_port: int = Field(
        default=587,
        ge=1,
        le=65535,
        description="SMTP server port"
    )
    username: Optional[str] = Field(
        default=None,
        description="SMTP login, if the server requires one"
    )
    password: Optional[str] = Field(
        default=None,
        description="SMTP password"
    )
    sender: str = Field(
        ...,
        description="From address"
    )
    recipient: str = Field(
        ...,
        description="Address that receives the weekly backup"
    )
    use_tls: bool = Field(
        default=True,
        description="Upgrade the connection with STARTTLS"
    )
    timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Socket timeout for the SMTP conversation"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so that a missing integration
    # only fails when it is actually used.

    @property
    def tracker(self) -> TrackerSettings:
        return TrackerSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def email(self) -> EmailSettings:
        return EmailSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus an
    ``<name>_error`` entry for every section that failed.
    """
    results = {}

    settings = get_settings()

    sections = {
        "tracker": lambda: settings.tracker,
        "google_sheets": lambda: settings.google_sheets,
        "email": lambda: settings.email,
    }
    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
