"""Notification services: sinks and the weekly backup summary."""

from src.services.notification.interface import (
    NotificationError,
    NotificationSinkInterface,
    NullNotificationSink,
)
from src.services.notification.smtp_service import SmtpNotificationSink
from src.services.notification.summary import (
    GUARD_CACHE_KEY,
    WeeklySummaryNotifier,
    build_summary_body,
    build_summary_lines,
)

__all__ = [
    "GUARD_CACHE_KEY",
    "NotificationError",
    "NotificationSinkInterface",
    "NullNotificationSink",
    "SmtpNotificationSink",
    "WeeklySummaryNotifier",
    "build_summary_body",
    "build_summary_lines",
]
