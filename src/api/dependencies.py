"""
FastAPI dependencies - Dependency injection factories.

This module wires settings into the domain collaborators and provides
Depends() factories for injecting the lifecycle service and the
authenticated account id into routes.
"""

from datetime import timedelta

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.config.settings import Settings
from src.domain import messages
from src.domain.exceptions import AccountError, ErrorKind, InvalidToken
from src.domain.lifecycle import AccountLifecycleService
from src.domain.lockout import LockoutPolicy
from src.domain.passwords import PasswordHasher
from src.domain.ports import AccountRepository, EmailSender
from src.domain.tokens import ResetTokenIssuer, TokenSigner


def build_account_service(
    settings: Settings,
    repository: AccountRepository,
    email_sender: EmailSender,
) -> AccountLifecycleService:
    """
    Create the lifecycle service with configuration passed explicitly.

    Built once at startup: PasswordHasher pre-computes its dummy hash.
    """
    return AccountLifecycleService(
        repository=repository,
        email_sender=email_sender,
        tokens=TokenSigner(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            session_ttl=timedelta(seconds=settings.session_token_ttl_seconds),
            verification_ttl=timedelta(seconds=settings.verification_token_ttl_seconds),
        ),
        hasher=PasswordHasher(cost=settings.bcrypt_cost),
        lockout=LockoutPolicy(
            max_attempts=settings.max_failed_logins,
            lock_duration=timedelta(seconds=settings.lockout_seconds),
        ),
        reset_tokens=ResetTokenIssuer(ttl=timedelta(seconds=settings.reset_token_ttl_seconds)),
        frontend_url=settings.frontend_url.rstrip("/"),
    )


def get_account_service(request: Request) -> AccountLifecycleService:
    """
    Get the lifecycle service from app state.

    The service is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.account_service


# Bearer security scheme for OpenAPI documentation; missing headers are
# reported by get_current_account_id rather than FastAPI's default 403.
http_bearer = HTTPBearer(auto_error=False)


def get_current_account_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    service: AccountLifecycleService = Depends(get_account_service),
) -> str:
    """
    Resolve the Authorization: Bearer header to an account id.

    Raises:
        AccountError: UNAUTHORIZED "no token" when the header is absent,
            "token failed" when the token is malformed, expired, forged,
            or not a session token
    """
    if credentials is None or not credentials.credentials:
        raise AccountError(ErrorKind.UNAUTHORIZED, messages.NOT_AUTHORIZED_NO_TOKEN)

    try:
        return service.authenticate(credentials.credentials)
    except InvalidToken:
        raise AccountError(
            ErrorKind.UNAUTHORIZED, messages.NOT_AUTHORIZED_TOKEN_FAILED
        ) from None
