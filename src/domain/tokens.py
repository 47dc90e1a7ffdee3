"""
Token primitives - signed session/verification tokens and reset secrets.

Session and verification tokens are HS256 JWTs carrying a `typ` claim,
so one kind never decodes as the other. Reset tokens are random secrets
of which only the SHA-256 digest is stored.
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from .exceptions import InvalidToken

SESSION = "session"
VERIFICATION = "verify"


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenSigner:
    """Issues and validates short-lived signed tokens."""

    secret: str
    algorithm: str = "HS256"
    session_ttl: timedelta = timedelta(hours=1)
    verification_ttl: timedelta = timedelta(hours=1)

    def issue_session_token(self, account_id: str, now: datetime | None = None) -> str:
        """Issue a session token whose subject is the account id."""
        return self._encode(SESSION, account_id, self.session_ttl, now)

    def issue_verification_token(self, email: str, now: datetime | None = None) -> str:
        """Issue an email verification token whose subject is the email."""
        return self._encode(VERIFICATION, email, self.verification_ttl, now)

    def decode_session_token(self, token: str) -> str:
        """Return the account id of a valid session token."""
        return self._decode(SESSION, token)

    def decode_verification_token(self, token: str) -> str:
        """Return the email of a valid verification token."""
        return self._decode(VERIFICATION, token)

    def _encode(self, kind: str, subject: str, ttl: timedelta, now: datetime | None) -> str:
        issued_at = now or utcnow()
        payload: dict[str, Any] = {
            "sub": subject,
            "typ": kind,
            "iat": issued_at,
            "exp": issued_at + ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def _decode(self, kind: str, token: str) -> str:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub", "typ"]},
            )
        except jwt.PyJWTError as e:
            raise InvalidToken(str(e)) from e

        if payload["typ"] != kind:
            raise InvalidToken(f"expected {kind} token, got {payload['typ']}")
        return str(payload["sub"])


def digest_reset_token(token: str) -> str:
    """Return the SHA-256 hex digest of a reset secret."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class ResetToken:
    """A freshly generated reset secret. Only `digest` may be persisted."""

    plaintext: str
    digest: str
    expires_at: datetime


@dataclass(frozen=True)
class ResetTokenIssuer:
    """Generates one-time password reset secrets."""

    ttl: timedelta = timedelta(hours=1)
    nbytes: int = 32

    def issue(self, now: datetime) -> ResetToken:
        """Generate a high-entropy secret with its digest and expiry."""
        plaintext = secrets.token_hex(self.nbytes)
        return ResetToken(
            plaintext=plaintext,
            digest=digest_reset_token(plaintext),
            expires_at=now + self.ttl,
        )
