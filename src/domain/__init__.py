"""
Domain layer - Pure business logic with zero framework imports.

This package contains the account credential and session lifecycle:
registration, email verification, login lockout, password reset and
profile changes. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .account import Account, LoginResult
from .exceptions import AccountError, ErrorKind, InvalidToken
from .lifecycle import AccountLifecycleService, normalize_email
from .lockout import LockoutDecision, LockoutPolicy, LockoutVerdict
from .passwords import PasswordHasher
from .ports import AccountRepository, EmailSender
from .tokens import ResetTokenIssuer, TokenSigner

__all__ = [
    "Account",
    "AccountError",
    "AccountLifecycleService",
    "AccountRepository",
    "EmailSender",
    "ErrorKind",
    "InvalidToken",
    "LockoutDecision",
    "LockoutPolicy",
    "LockoutVerdict",
    "LoginResult",
    "PasswordHasher",
    "ResetTokenIssuer",
    "TokenSigner",
    "normalize_email",
]
