"""
Account lifecycle service - Credential and session state transitions.

This module contains the core business logic for account management:
registration with email verification, login with brute-force lockout,
password reset through one-time secrets, and authenticated password and
profile changes.

Anti-enumeration rules
======================

- Login never distinguishes "unknown email" from "wrong password", and a
  dummy bcrypt comparison runs for unknown emails.
- Verify Email never distinguishes "bad token" from "account not found".
- Reset Password never distinguishes wrong, expired, or consumed secrets.

Only resend-verification and forgot-password reveal whether an email
exists (NOT_FOUND), matching the public contract.

Delivery
========

Emails go through the EmailSender port after state is persisted. A
delivery failure is logged and never fails the operation: the user can
always ask for another message.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from . import messages
from .account import Account, LoginResult
from .exceptions import AccountError, ErrorKind, InvalidToken
from .lockout import LockoutPolicy, LockoutVerdict
from .passwords import PasswordHasher
from .ports import AccountRepository, EmailSender
from .tokens import ResetTokenIssuer, TokenSigner, digest_reset_token, utcnow

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Strip whitespace and lowercase for consistent storage and lookup."""
    return email.strip().lower()


@dataclass
class AccountLifecycleService:
    """
    Domain service orchestrating account credentials and sessions.

    All configuration arrives through the injected collaborators; the
    service never reads the environment.
    """

    repository: AccountRepository
    email_sender: EmailSender
    tokens: TokenSigner
    hasher: PasswordHasher = field(default_factory=PasswordHasher)
    lockout: LockoutPolicy = field(default_factory=LockoutPolicy)
    reset_tokens: ResetTokenIssuer = field(default_factory=ResetTokenIssuer)
    frontend_url: str = "http://localhost:3000"
    clock: Callable[[], datetime] = utcnow

    def register(
        self,
        first_name: str,
        last_name: str | None,
        email: str,
        password: str,
    ) -> str:
        """
        Create an unverified account and send a verification link.

        Returns:
            Normalized email address

        Raises:
            AccountError: CONFLICT if the email is already registered
        """
        normalized_email = normalize_email(email)
        if self.repository.get_by_email(normalized_email) is not None:
            raise AccountError(ErrorKind.CONFLICT, messages.EMAIL_ALREADY_IN_USE)

        account = self.repository.create(
            email=normalized_email,
            first_name=first_name,
            last_name=last_name,
            password_hash=self.hasher.hash(password),
        )
        if account is None:
            # Lost a concurrent registration race on the UNIQUE constraint
            raise AccountError(ErrorKind.CONFLICT, messages.EMAIL_ALREADY_IN_USE)

        logger.info("Account registered: %s", account.id)
        self._send_verification(account.email)
        return account.email

    def resend_verification(self, email: str) -> None:
        """
        Send a fresh verification link to an unverified account.

        Raises:
            AccountError: NOT_FOUND for unknown emails,
                VALIDATION if the account is already verified
        """
        account = self.repository.get_by_email(normalize_email(email))
        if account is None:
            raise AccountError(ErrorKind.NOT_FOUND, messages.USER_NOT_FOUND)
        if account.is_verified:
            raise AccountError(ErrorKind.VALIDATION, messages.EMAIL_ALREADY_VERIFIED)

        self._send_verification(account.email)

    def verify_email(self, token: str) -> None:
        """
        Mark the account named by a verification token as verified.

        Check order is fixed: token validity, account existence, then
        already-verified. Replaying a used token yields the
        already-verified error, never success.

        Raises:
            AccountError: UNAUTHORIZED for bad/expired tokens or unknown
                accounts, VALIDATION if already verified
        """
        try:
            email = self.tokens.decode_verification_token(token)
        except InvalidToken as e:
            logger.warning("Rejected verification token: %s", e)
            raise AccountError(ErrorKind.UNAUTHORIZED, messages.INVALID_OR_EXPIRED_TOKEN) from None

        account = self.repository.get_by_email(email)
        if account is None:
            raise AccountError(ErrorKind.UNAUTHORIZED, messages.INVALID_OR_EXPIRED_TOKEN)
        if account.is_verified:
            raise AccountError(ErrorKind.VALIDATION, messages.EMAIL_ALREADY_VERIFIED)

        self._update(account.id, {"is_verified": True})
        logger.info("Account verified: %s", account.id)

    def login(self, email: str, password: str) -> LoginResult:
        """
        Authenticate with email and password and issue a session token.

        Steps short-circuit in order: lookup, verified check, lock check,
        lock expiry reset, password check, session issuance.

        Raises:
            AccountError: UNAUTHORIZED for unknown email, wrong password,
                unverified email, or locked account
        """
        account = self.repository.get_by_email(normalize_email(email))
        if account is None:
            self.hasher.burn(password)
            raise AccountError(ErrorKind.UNAUTHORIZED, messages.INVALID_CREDENTIALS)

        if not account.is_verified:
            raise AccountError(ErrorKind.UNAUTHORIZED, messages.EMAIL_NOT_VERIFIED)

        now = self.clock()
        decision = self.lockout.evaluate(
            account.failed_login_attempts, account.locked_until, now
        )
        if not decision.allowed:
            raise AccountError(
                ErrorKind.UNAUTHORIZED,
                messages.ACCOUNT_LOCKED.format(minutes=decision.remaining_minutes),
            )

        failed_attempts = account.failed_login_attempts
        if decision.verdict is LockoutVerdict.ALLOW_AND_RESET:
            logger.info("Lock expired for account: %s", account.id)
            failed_attempts = 0

        if not self.hasher.verify(password, account.password_hash):
            outcome = self.lockout.register_failure(failed_attempts, now)
            self._update(
                account.id,
                {
                    "failed_login_attempts": outcome.failed_login_attempts,
                    "locked_until": outcome.locked_until,
                },
            )
            if outcome.locked:
                logger.warning(
                    "Account locked after %d failed logins: %s",
                    outcome.failed_login_attempts,
                    account.id,
                )
                minutes = max(1, int(self.lockout.lock_duration.total_seconds() // 60))
                raise AccountError(
                    ErrorKind.UNAUTHORIZED, messages.ACCOUNT_LOCKED.format(minutes=minutes)
                )
            raise AccountError(ErrorKind.UNAUTHORIZED, messages.INVALID_CREDENTIALS)

        if account.failed_login_attempts or account.locked_until is not None:
            account = self._update(
                account.id, {"failed_login_attempts": 0, "locked_until": None}
            )

        token = self.tokens.issue_session_token(account.id)
        return LoginResult(token=token, account=account)

    def authenticate(self, token: str) -> str:
        """
        Resolve a session token to its account id.

        Raises:
            InvalidToken: bad signature, expired, or not a session token
        """
        return self.tokens.decode_session_token(token)

    def request_password_reset(self, email: str) -> None:
        """
        Store a reset-token digest and email the plaintext secret.

        Raises:
            AccountError: NOT_FOUND for unknown emails
        """
        account = self.repository.get_by_email(normalize_email(email))
        if account is None:
            raise AccountError(ErrorKind.NOT_FOUND, messages.USER_NOT_FOUND)

        reset = self.reset_tokens.issue(self.clock())
        self._update(
            account.id,
            {
                "reset_token_digest": reset.digest,
                "reset_token_expires_at": reset.expires_at,
            },
        )

        url = f"{self.frontend_url}/auth/reset-password?token={reset.plaintext}"
        self._dispatch(
            account.email,
            messages.RESET_PASSWORD_SUBJECT,
            messages.RESET_PASSWORD_BODY.format(url=url),
        )

    def reset_password(self, token: str, new_password: str) -> None:
        """
        Replace the password using a one-time reset secret.

        The secret is consumed atomically with the password change: both
        reset fields are cleared, and a concurrent second use fails.

        Raises:
            AccountError: UNAUTHORIZED for wrong, expired, or used secrets
        """
        account = self.repository.consume_reset_token(
            digest_reset_token(token), self.clock(), self.hasher.hash(new_password)
        )
        if account is None:
            raise AccountError(ErrorKind.UNAUTHORIZED, messages.INVALID_OR_EXPIRED_TOKEN)

        logger.info("Password reset for account: %s", account.id)

    def change_password(
        self, account_id: str, current_password: str, new_password: str
    ) -> None:
        """
        Change the password of an authenticated account.

        Raises:
            AccountError: NOT_FOUND if the account is gone,
                UNAUTHORIZED if the current password is wrong
        """
        account = self.repository.get_by_id(account_id)
        if account is None:
            raise AccountError(ErrorKind.NOT_FOUND, messages.USER_NOT_FOUND)
        if not self.hasher.verify(current_password, account.password_hash):
            raise AccountError(ErrorKind.UNAUTHORIZED, messages.INVALID_CURRENT_PASSWORD)

        self._update(account.id, {"password_hash": self.hasher.hash(new_password)})

    def update_profile(
        self,
        account_id: str,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> Account:
        """
        Change any subset of the profile fields.

        Omitted (None) fields are left untouched; an empty update returns
        the current record.

        Raises:
            AccountError: NOT_FOUND if the account is gone,
                CONFLICT if the new email is taken
        """
        changes: dict[str, Any] = {}
        if first_name is not None:
            changes["first_name"] = first_name
        if last_name is not None:
            changes["last_name"] = last_name
        if email is not None:
            changes["email"] = normalize_email(email)
        if password is not None:
            changes["password_hash"] = self.hasher.hash(password)

        if not changes:
            account = self.repository.get_by_id(account_id)
            if account is None:
                raise AccountError(ErrorKind.NOT_FOUND, messages.USER_NOT_FOUND)
            return account

        return self._update(account_id, changes)

    def _update(self, account_id: str, changes: dict[str, Any]) -> Account:
        account = self.repository.update(account_id, changes)
        if account is None:
            raise AccountError(ErrorKind.NOT_FOUND, messages.USER_NOT_FOUND)
        return account

    def _send_verification(self, email: str) -> None:
        token = self.tokens.issue_verification_token(email)
        url = f"{self.frontend_url}/auth/verify-email?token={token}"
        self._dispatch(
            email,
            messages.VERIFY_EMAIL_SUBJECT,
            messages.VERIFY_EMAIL_BODY.format(url=url),
        )

    def _dispatch(self, recipient: str, subject: str, body: str) -> None:
        try:
            self.email_sender.send(recipient, subject, body)
        except Exception:
            logger.exception("Email delivery failed: %s to %s", subject, recipient)
