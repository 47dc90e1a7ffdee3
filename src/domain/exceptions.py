"""
Domain exceptions - Tagged error type for the account lifecycle.

Every failing operation raises exactly one AccountError carrying an
ErrorKind and a safe, user-facing message. The transport layer maps the
kind to a status code in a single table; no subclass hierarchy is needed.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Kinds of expected account lifecycle failures."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"


class AccountError(Exception):
    """Expected failure of an account operation."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"AccountError({self.kind.value!r}, {self.message!r})"


class InvalidToken(Exception):
    """Signed token failed signature, expiry, or kind checks."""

    pass
