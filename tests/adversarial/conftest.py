"""
Shared fixtures for adversarial tests.

Provides a lifecycle service on PostgreSQL and a helper for seeding
verified accounts, used by the race condition, brute force and timing
attack simulations.
"""

from datetime import timedelta
from unittest.mock import Mock

import pytest

from src.adapters.repository.postgres import PostgresAccountRepository
from src.domain.account import Account
from src.domain.lifecycle import AccountLifecycleService
from src.domain.lockout import LockoutPolicy
from src.domain.passwords import PasswordHasher
from src.domain.tokens import TokenSigner

# Production cost so bcrypt dominates timing like it does in deployment
ADVERSARIAL_BCRYPT_COST = 10


@pytest.fixture(scope="session")
def production_hasher() -> PasswordHasher:
    return PasswordHasher(cost=ADVERSARIAL_BCRYPT_COST)


@pytest.fixture
def pg_service(
    pg_repository: PostgresAccountRepository,
    email_sender: Mock,
    tokens: TokenSigner,
    production_hasher: PasswordHasher,
    clock,
) -> AccountLifecycleService:
    """Lifecycle service on PostgreSQL with production bcrypt cost."""
    return AccountLifecycleService(
        repository=pg_repository,
        email_sender=email_sender,
        tokens=tokens,
        hasher=production_hasher,
        lockout=LockoutPolicy(max_attempts=5, lock_duration=timedelta(minutes=30)),
        clock=clock,
    )


@pytest.fixture
def seed_verified(pg_repository: PostgresAccountRepository, production_hasher: PasswordHasher):
    """Create verified accounts sharing one password hash."""

    def seed(emails: list[str], password: str) -> list[Account]:
        password_hash = production_hasher.hash(password)
        accounts = []
        for email in emails:
            account = pg_repository.create(
                email=email, first_name="Victim", last_name=None, password_hash=password_hash
            )
            accounts.append(pg_repository.update(account.id, {"is_verified": True}))
        return accounts

    return seed
