"""Services package."""

from src.services.storage import (
    ConnectionError,
    DuplicateError,
    GoogleSheetsClient,
    GoogleSheetsUserStore,
    InMemoryCache,
    InMemoryUserStore,
    JsonFileCache,
    LocalCacheInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
    UserStoreInterface,
)
from src.services.auth import (
    AuthError,
    AuthGate,
    AuthResult,
)
from src.services.notification import (
    NotificationError,
    NotificationSinkInterface,
    NullNotificationSink,
    SmtpNotificationSink,
    WeeklySummaryNotifier,
)

__all__ = [
    # Storage services
    "ConnectionError",
    "DuplicateError",
    "GoogleSheetsClient",
    "GoogleSheetsUserStore",
    "InMemoryCache",
    "InMemoryUserStore",
    "JsonFileCache",
    "LocalCacheInterface",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "UserStoreInterface",
    # Auth
    "AuthError",
    "AuthGate",
    "AuthResult",
    # Notification
    "NotificationError",
    "NotificationSinkInterface",
    "NullNotificationSink",
    "SmtpNotificationSink",
    "WeeklySummaryNotifier",
]
