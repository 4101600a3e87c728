"""In-memory user store, used when no remote store is configured and in tests."""

from typing import Optional

from src.models.ledger import TrackerSnapshot, UserRecord
from src.services.storage.interface import (
    DuplicateError,
    UserStoreInterface,
    normalize_username,
)


class InMemoryUserStore(UserStoreInterface):
    """Dict-backed user store with the same semantics as the remote one."""

    def __init__(self):
        self._records: dict[str, UserRecord] = {}

    async def get_user(self, username: str) -> Optional[UserRecord]:
        record = self._records.get(normalize_username(username))
        return record.model_copy(deep=True) if record else None

    async def create_user(self, username: str, pin: str) -> None:
        key = normalize_username(username)
        if key in self._records:
            raise DuplicateError(f"User already exists: {key}")
        self._records[key] = UserRecord(pin=pin, tracker=None)

    async def save_tracker(self, username: str, snapshot: TrackerSnapshot) -> None:
        key = normalize_username(username)
        existing = self._records.get(key) or UserRecord(pin="")
        self._records[key] = existing.model_copy(
            update={"tracker": snapshot.model_copy(deep=True)}
        )
