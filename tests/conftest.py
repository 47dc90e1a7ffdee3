"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- An in-memory AccountRepository fake with the same contract as the
  PostgreSQL adapter (unique email, atomic single-record updates)
- A controllable clock for lockout and expiry tests
- A lifecycle service wired to the fakes with a fast bcrypt cost
- A migrated PostgreSQL pool for integration and adversarial tests,
  skipped when the database is unreachable
"""

import dataclasses
import threading
import uuid
from collections.abc import Callable, Generator, Mapping
from datetime import datetime, timedelta
from typing import Any
from unittest.mock import Mock

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from src.adapters.repository.postgres import PostgresAccountRepository, run_migrations
from src.config.settings import get_settings
from src.domain import messages
from src.domain.account import Account
from src.domain.exceptions import AccountError, ErrorKind
from src.domain.lifecycle import AccountLifecycleService
from src.domain.lockout import LockoutPolicy
from src.domain.passwords import PasswordHasher
from src.domain.ports import UPDATABLE_FIELDS
from src.domain.tokens import ResetTokenIssuer, TokenSigner, utcnow

TEST_SECRET = "test-secret-key-with-enough-bytes-for-hs256"


class FakeClock:
    """Clock starting at the real current time that only moves when told."""

    def __init__(self) -> None:
        self.now = utcnow()

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class InMemoryAccountRepository:
    """AccountRepository fake backed by a dict, guarded by a lock."""

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}
        self._lock = threading.Lock()

    def create(
        self,
        *,
        email: str,
        first_name: str,
        last_name: str | None,
        password_hash: str,
    ) -> Account | None:
        with self._lock:
            if any(a.email == email for a in self._accounts.values()):
                return None
            now = utcnow()
            account = Account(
                id=str(uuid.uuid4()),
                email=email,
                first_name=first_name,
                last_name=last_name,
                password_hash=password_hash,
                created_at=now,
                updated_at=now,
            )
            self._accounts[account.id] = account
            return account

    def get_by_email(self, email: str) -> Account | None:
        with self._lock:
            return next((a for a in self._accounts.values() if a.email == email), None)

    def get_by_id(self, account_id: str) -> Account | None:
        with self._lock:
            return self._accounts.get(account_id)

    def consume_reset_token(
        self, digest: str, now: datetime, password_hash: str
    ) -> Account | None:
        with self._lock:
            for account in self._accounts.values():
                if (
                    account.reset_token_digest == digest
                    and account.reset_token_expires_at is not None
                    and account.reset_token_expires_at > now
                ):
                    updated = dataclasses.replace(
                        account,
                        password_hash=password_hash,
                        reset_token_digest=None,
                        reset_token_expires_at=None,
                        updated_at=utcnow(),
                    )
                    self._accounts[account.id] = updated
                    return updated
            return None

    def update(self, account_id: str, changes: Mapping[str, Any]) -> Account | None:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                return None
            new_email = changes.get("email")
            if new_email is not None and any(
                a.email == new_email and a.id != account_id for a in self._accounts.values()
            ):
                raise AccountError(ErrorKind.CONFLICT, messages.EMAIL_ALREADY_IN_USE)
            updated = dataclasses.replace(account, **changes, updated_at=utcnow())
            self._accounts[account_id] = updated
            return updated

    def all(self) -> list[Account]:
        with self._lock:
            return list(self._accounts.values())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def email_sender() -> Mock:
    return Mock()


@pytest.fixture
def tokens() -> TokenSigner:
    return TokenSigner(secret=TEST_SECRET)


@pytest.fixture
def hasher() -> PasswordHasher:
    # Minimum bcrypt cost keeps the suite fast
    return PasswordHasher(cost=4)


@pytest.fixture
def service(
    repository: InMemoryAccountRepository,
    email_sender: Mock,
    tokens: TokenSigner,
    hasher: PasswordHasher,
    clock: FakeClock,
) -> AccountLifecycleService:
    return AccountLifecycleService(
        repository=repository,
        email_sender=email_sender,
        tokens=tokens,
        hasher=hasher,
        lockout=LockoutPolicy(max_attempts=5, lock_duration=timedelta(minutes=30)),
        reset_tokens=ResetTokenIssuer(ttl=timedelta(hours=1)),
        frontend_url="http://frontend.test",
        clock=clock,
    )


def extract_token(body: str) -> str:
    """Return the token embedded in an email link."""
    return body.split("token=", 1)[1].split('"', 1)[0]


@pytest.fixture
def sent_token(email_sender: Mock) -> Callable[[], str]:
    """Token from the link in the most recent message sent."""

    def last() -> str:
        return extract_token(email_sender.send.call_args[0][2])

    return last


@pytest.fixture(scope="session")
def db_pool() -> Generator[ConnectionPool, None, None]:
    """Migrated connection pool; skips the test when PostgreSQL is down."""
    settings = get_settings()
    pool = ConnectionPool(conninfo=settings.database_url, min_size=1, max_size=10, open=False)
    try:
        pool.open(wait=True, timeout=5.0)
    except PoolTimeout:
        pool.close()
        pytest.skip(f"PostgreSQL not reachable at {settings.database_url}")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def pg_pool(db_pool: ConnectionPool) -> ConnectionPool:
    """Pool with an empty accounts table."""
    with db_pool.connection() as conn:
        conn.execute("DELETE FROM accounts")
        conn.commit()
    return db_pool


@pytest.fixture
def pg_repository(pg_pool: ConnectionPool) -> PostgresAccountRepository:
    return PostgresAccountRepository(pg_pool)
