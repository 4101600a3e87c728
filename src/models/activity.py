"""
Activity Models for Solat Qada Tracker

Significant tracker actions (loads, cycle resets, sync failures, backup
emails, logins) are described by an ActivityEvent and written to the
structured log.

DESIGN DECISION: Activity events are log records only.
They are never persisted, so there is no history of completions beyond
the current ledger.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """Types of events the tracker reports."""
    # Ledger lifecycle
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_MUTATED = "ledger_mutated"
    CYCLE_RESET = "cycle_reset"

    # Storage
    CACHE_READ_FAILED = "cache_read_failed"
    CACHE_WRITE_FAILED = "cache_write_failed"
    REMOTE_LOAD_FAILED = "remote_load_failed"
    REMOTE_SAVE_SUCCEEDED = "remote_save_succeeded"
    REMOTE_SAVE_FAILED = "remote_save_failed"
    REMOTE_SAVE_SUPPRESSED = "remote_save_suppressed"

    # Session
    USER_LOGGED_IN = "user_logged_in"
    USER_REGISTERED = "user_registered"
    USER_LOGGED_OUT = "user_logged_out"
    AUTH_FAILED = "auth_failed"

    # Transfer
    DATA_EXPORTED = "data_exported"
    DATA_IMPORTED = "data_imported"
    IMPORT_REJECTED = "import_rejected"

    # Backup email
    BACKUP_SENT = "backup_sent"
    BACKUP_SKIPPED = "backup_skipped"
    BACKUP_FAILED = "backup_failed"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single activity event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: ActivityEventType = Field(
        ...,
        description="Type of event"
    )
    severity: ActivitySeverity = Field(
        default=ActivitySeverity.INFO,
        description="Event severity"
    )

    username: Optional[str] = Field(
        default=None,
        description="Session the event belongs to, if any"
    )
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "username": self.username,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.cycle_reset(username, snapshot_dict)
        event = ActivityEventBuilder.remote_save_failed(username, str(e))
    """

    @staticmethod
    def ledger_loaded(
        source: str,
        username: Optional[str],
        migrated: bool = False,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LEDGER_LOADED,
            username=username,
            description=f"Ledger loaded from {source}",
            details={
                "source": source,
                "migrated_legacy_keys": migrated,
            },
        )

    @staticmethod
    def ledger_mutated(
        operation: str,
        prayer: str,
        value: int,
        username: Optional[str],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LEDGER_MUTATED,
            severity=ActivitySeverity.DEBUG,
            username=username,
            description=f"{operation} on {prayer}",
            details={
                "operation": operation,
                "prayer": prayer,
                "value": value,
            },
            is_user_action=True,
        )

    @staticmethod
    def cycle_reset(
        previous_cycle_start: str,
        new_cycle_start: str,
        manual: bool,
        username: Optional[str],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.CYCLE_RESET,
            username=username,
            description="Weekly cycle reset" + (" by user" if manual else ""),
            details={
                "previous_cycle_start": previous_cycle_start,
                "new_cycle_start": new_cycle_start,
            },
            is_user_action=manual,
        )

    @staticmethod
    def storage_failed(
        event_type: ActivityEventType,
        error_message: str,
        username: Optional[str] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=event_type,
            severity=ActivitySeverity.WARNING,
            username=username,
            description=f"Storage operation failed: {event_type.value}",
            error_message=error_message,
        )

    @staticmethod
    def remote_save_succeeded(username: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.REMOTE_SAVE_SUCCEEDED,
            severity=ActivitySeverity.DEBUG,
            username=username,
            description="Tracker saved to remote store",
        )

    @staticmethod
    def remote_save_failed(username: str, error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.REMOTE_SAVE_FAILED,
            severity=ActivitySeverity.ERROR,
            username=username,
            description="Tracker could not be saved to remote store",
            error_message=error_message,
        )

    @staticmethod
    def remote_save_suppressed(username: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.REMOTE_SAVE_SUPPRESSED,
            severity=ActivitySeverity.DEBUG,
            username=username,
            description="Remote save skipped after load",
        )

    @staticmethod
    def user_session(
        event_type: ActivityEventType,
        username: str,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=event_type,
            username=username,
            description=f"{event_type.value.replace('_', ' ').capitalize()}: {username}",
            is_user_action=True,
        )

    @staticmethod
    def auth_failed(username: str, reason: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.AUTH_FAILED,
            severity=ActivitySeverity.WARNING,
            username=username,
            description="Authentication failed",
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def data_exported(filename: str, username: Optional[str]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.DATA_EXPORTED,
            username=username,
            description=f"Data exported to {filename}",
            details={"filename": filename},
            is_user_action=True,
        )

    @staticmethod
    def data_imported(
        fields: list[str],
        username: Optional[str],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.DATA_IMPORTED,
            username=username,
            description=f"Imported {', '.join(fields) or 'nothing'}",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def import_rejected(error_message: str, username: Optional[str]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.IMPORT_REJECTED,
            severity=ActivitySeverity.WARNING,
            username=username,
            description="Import document rejected",
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def backup(
        event_type: ActivityEventType,
        forced: bool,
        error_message: Optional[str] = None,
    ) -> ActivityEvent:
        severity = {
            ActivityEventType.BACKUP_FAILED: ActivitySeverity.ERROR,
            ActivityEventType.BACKUP_SKIPPED: ActivitySeverity.DEBUG,
        }.get(event_type, ActivitySeverity.INFO)
        return ActivityEvent(
            event_type=event_type,
            severity=severity,
            description=f"Weekly backup email: {event_type.value.removeprefix('backup_')}",
            details={"forced": forced},
            error_message=error_message,
        )
