"""
Abstract Storage Interfaces

DESIGN DECISION: We define abstract interfaces for both stores the
tracker talks to. This allows us to:
1. Swap Google Sheets for another document store later
2. Use in-memory storage for testing and offline use
3. Keep the ledger and sync logic decoupled from storage implementation

Two stores exist:
- LocalCacheInterface: on-device key-value storage. Synchronous, because
  local persistence must finish before any remote write is attempted.
- UserStoreInterface: remote per-user documents. Asynchronous, because
  remote calls run as detached tasks.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.models.ledger import TrackerSnapshot, UserRecord


class LocalCacheInterface(ABC):
    """
    Durable on-device key-value storage.

    Values are opaque strings (the tracker stores JSON text).
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageReadError: If the underlying storage cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store a value, replacing any previous one.

        Raises:
            StorageWriteError: If the value cannot be written
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""
        pass


class UserStoreInterface(ABC):
    """
    Remote document store holding one record per user.

    Usernames are case-insensitive; implementations store them lowercased.
    """

    @abstractmethod
    async def get_user(self, username: str) -> Optional[UserRecord]:
        """
        Fetch the full record for a user.

        Returns:
            The record if found, None otherwise

        Raises:
            StorageReadError: If the store cannot be read
        """
        pass

    @abstractmethod
    async def create_user(self, username: str, pin: str) -> None:
        """
        Create a new user record with no tracker data.

        Raises:
            DuplicateError: If the username already exists
            StorageWriteError: If the record cannot be written
        """
        pass

    @abstractmethod
    async def save_tracker(self, username: str, snapshot: TrackerSnapshot) -> None:
        """
        Replace the tracker data of a user.

        Read-modify-write: the stored PIN is preserved.

        Raises:
            StorageWriteError: If the record cannot be written
        """
        pass

    async def load_tracker(self, username: str) -> Optional[TrackerSnapshot]:
        """
        Fetch just the tracker data of a user.

        Returns:
            The snapshot, or None if the user or its tracker is absent
        """
        record = await self.get_user(username)
        return record.tracker if record else None


def normalize_username(username: str) -> str:
    """Canonical form used as the record key."""
    return username.strip().lower()


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Stored data could not be read or parsed."""
    pass


class StorageWriteError(StorageError):
    """Data could not be written."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
