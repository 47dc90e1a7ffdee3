"""
Account entity - The persisted identity record of one user.

Holds credentials and login-security state. Instances are immutable;
the repository returns a fresh Account after every update.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Account:
    """Credentials and security state for a single user."""

    id: str
    email: str
    first_name: str
    password_hash: str
    last_name: str | None = None
    is_verified: bool = False
    reset_token_digest: str | None = None
    reset_token_expires_at: datetime | None = None
    failed_login_attempts: int = 0
    locked_until: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __repr__(self) -> str:
        # Credentials stay out of logs and tracebacks
        return f"Account(id={self.id!r}, email={self.email!r}, is_verified={self.is_verified})"


@dataclass(frozen=True)
class LoginResult:
    """Successful login: session token plus the account it belongs to."""

    token: str
    account: Account
