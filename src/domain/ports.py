"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Protocol

from .account import Account

# Fields an adapter must accept in AccountRepository.update()
UPDATABLE_FIELDS = frozenset(
    {
        "email",
        "first_name",
        "last_name",
        "password_hash",
        "is_verified",
        "reset_token_digest",
        "reset_token_expires_at",
        "failed_login_attempts",
        "locked_until",
    }
)


class AccountRepository(Protocol):
    """Port interface for account persistence."""

    def create(
        self,
        *,
        email: str,
        first_name: str,
        last_name: str | None,
        password_hash: str,
    ) -> Account | None:
        """
        Insert a new unverified account.

        The email UNIQUE constraint resolves concurrent registrations:
        the loser gets None instead of an exception.

        Args:
            email: Normalized email address
            first_name: Required first name
            last_name: Optional last name
            password_hash: bcrypt hashed password

        Returns:
            The created Account, or None if the email is already taken
        """
        ...

    def get_by_email(self, email: str) -> Account | None:
        """Return the account with this normalized email, if any."""
        ...

    def get_by_id(self, account_id: str) -> Account | None:
        """Return the account with this id, if any."""
        ...

    def consume_reset_token(
        self, digest: str, now: datetime, password_hash: str
    ) -> Account | None:
        """
        Atomically spend a reset token: set the new password hash and
        clear both reset fields.

        Matches only while reset_token_expires_at is after `now`. Of two
        concurrent calls with the same digest, at most one succeeds.

        Returns:
            The updated Account, or None if no live token has this digest
        """
        ...

    def update(self, account_id: str, changes: Mapping[str, Any]) -> Account | None:
        """
        Atomically apply field changes to one account.

        Args:
            account_id: Account identifier
            changes: Field name -> new value, keys from UPDATABLE_FIELDS

        Returns:
            The updated Account, or None if the id does not resolve

        Raises:
            AccountError: CONFLICT when a changed email is already taken
        """
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send(self, recipient: str, subject: str, body: str) -> None:
        """
        Deliver a message, or hand it off for delivery.

        Args:
            recipient: Recipient email address
            subject: Message subject
            body: HTML message body
        """
        ...
