"""Authentication services."""

from src.services.auth.auth_gate import (
    AuthError,
    AuthGate,
    AuthResult,
    InvalidPinError,
    UserNotFoundError,
    UsernameTakenError,
    WrongPinError,
    validate_pin,
)

__all__ = [
    "AuthError",
    "AuthGate",
    "AuthResult",
    "InvalidPinError",
    "UserNotFoundError",
    "UsernameTakenError",
    "WrongPinError",
    "validate_pin",
]
