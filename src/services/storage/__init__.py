"""
Storage Services Package

Provides abstract interfaces and concrete implementations for the local
cache and the remote per-user store. Google Sheets is the remote backend,
but it is designed to be swappable.
"""

from src.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    LocalCacheInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
    UserStoreInterface,
    normalize_username,
)
from src.services.storage.local_cache import InMemoryCache, JsonFileCache
from src.services.storage.memory import InMemoryUserStore
from src.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsUserStore,
)

__all__ = [
    # Interfaces
    "LocalCacheInterface",
    "UserStoreInterface",
    "normalize_username",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Local cache
    "InMemoryCache",
    "JsonFileCache",
    # Remote stores
    "InMemoryUserStore",
    "GoogleSheetsClient",
    "GoogleSheetsUserStore",
]
