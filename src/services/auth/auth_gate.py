"""
Username + PIN authentication against the remote user store.

The gate only decides which remote document a session syncs to. It is
not a security boundary: PINs are compared as stored.

Failures are reported through AuthResult rather than raised, so callers
can show the message directly. The exception types still exist so the
reason is machine-checkable (AuthResult.error_type).
"""

from typing import Optional

from pydantic import BaseModel

from src.models.ledger import TrackerSnapshot
from src.services.storage.interface import (
    DuplicateError,
    UserStoreInterface,
    normalize_username,
)


class AuthError(Exception):
    """Base exception for authentication errors."""
    pass


class UserNotFoundError(AuthError):
    """No record exists for the username."""

    def __init__(self, username: str):
        self.username = username
        super().__init__("User not found")


class WrongPinError(AuthError):
    """The PIN does not match the stored one."""

    def __init__(self):
        super().__init__("Wrong PIN")


class UsernameTakenError(AuthError):
    """Registration attempted for an existing username."""

    def __init__(self, username: str):
        self.username = username
        super().__init__("Username already taken")


class InvalidPinError(AuthError):
    """PIN rejected before registration (too short)."""

    def __init__(self, min_length: int):
        self.min_length = min_length
        super().__init__(f"PIN must be at least {min_length} characters")


class AuthResult(BaseModel):
    """Outcome of a login or registration attempt."""

    success: bool
    username: Optional[str] = None
    data: Optional[TrackerSnapshot] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @classmethod
    def failed(cls, exc: AuthError) -> "AuthResult":
        return cls(success=False, error=str(exc), error_type=type(exc).__name__)


def validate_pin(pin: str, min_length: int = 4) -> None:
    """
    Caller-side PIN check run before register().

    Raises:
        InvalidPinError: If the PIN is shorter than min_length
    """
    if len(pin) < min_length:
        raise InvalidPinError(min_length)


class AuthGate:
    """Establishes sessions against a UserStoreInterface."""

    def __init__(self, store: UserStoreInterface):
        self._store = store

    async def login(self, username: str, pin: str) -> AuthResult:
        """
        Check credentials.

        On success, data holds the user's stored tracker (None if the
        user never saved one).

        Raises:
            StorageReadError: If the store cannot be read
        """
        key = normalize_username(username)
        record = await self._store.get_user(key)
        if record is None:
            return AuthResult.failed(UserNotFoundError(key))
        if record.pin != pin:
            return AuthResult.failed(WrongPinError())
        return AuthResult(success=True, username=key, data=record.tracker)

    async def register(self, username: str, pin: str) -> AuthResult:
        """
        Create a user with an empty tracker.

        PIN length is the caller's responsibility (see validate_pin).

        Raises:
            StorageReadError / StorageWriteError: If the store fails
        """
        key = normalize_username(username)
        existing = await self._store.get_user(key)
        if existing is not None:
            return AuthResult.failed(UsernameTakenError(key))
        try:
            await self._store.create_user(key, pin)
        except DuplicateError:
            return AuthResult.failed(UsernameTakenError(key))
        return AuthResult(success=True, username=key)
