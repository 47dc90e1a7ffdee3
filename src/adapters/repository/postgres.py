"""
PostgreSQL repository adapter - Implements AccountRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with parameterized SQL.

Consistency Design:
-------------------
1. **Email uniqueness**: enforced by the UNIQUE constraint on accounts.email.
   create() uses INSERT ... ON CONFLICT (email) DO NOTHING so a losing
   concurrent registration sees no row instead of an exception.

2. **Single-row atomic updates**: every mutation is one UPDATE ... RETURNING
   statement. No multi-statement transactions span a login attempt, so two
   concurrent failed logins may write the same counter value.

3. **Reset-token consumption**: one UPDATE guarded by digest and expiry
   (against the caller's clock). A concurrent second use finds the digest
   already cleared once the row lock is released, so a secret works once.
"""

import logging
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import UUID

from psycopg import errors, sql
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from src.domain import messages
from src.domain.account import Account
from src.domain.exceptions import AccountError, ErrorKind
from src.domain.ports import UPDATABLE_FIELDS

logger = logging.getLogger(__name__)

_COLUMNS = """
    id, email, first_name, last_name, password_hash, is_verified,
    reset_token_digest, reset_token_expires_at, failed_login_attempts,
    locked_until, created_at, updated_at
"""


def _parse_id(account_id: str) -> UUID | None:
    # Ids that are not UUIDs cannot exist; avoid a cast error from the server
    try:
        return UUID(account_id)
    except (TypeError, ValueError):
        return None


def _to_account(row: dict[str, Any] | None) -> Account | None:
    if row is None:
        return None
    return Account(**{**row, "id": str(row["id"])})


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def create(
        self,
        *,
        email: str,
        first_name: str,
        last_name: str | None,
        password_hash: str,
    ) -> Account | None:
        """Insert an unverified account; None if the email is taken."""
        query = f"""
            INSERT INTO accounts (email, first_name, last_name, password_hash)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (email) DO NOTHING
            RETURNING {_COLUMNS}
        """

        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(query, (email, first_name, last_name, password_hash))
            row = cursor.fetchone()
            conn.commit()
        return _to_account(row)

    def get_by_email(self, email: str) -> Account | None:
        return self._fetch_one(f"SELECT {_COLUMNS} FROM accounts WHERE email = %s", (email,))

    def get_by_id(self, account_id: str) -> Account | None:
        key = _parse_id(account_id)
        if key is None:
            return None
        return self._fetch_one(f"SELECT {_COLUMNS} FROM accounts WHERE id = %s", (key,))

    def consume_reset_token(
        self, digest: str, now: datetime, password_hash: str
    ) -> Account | None:
        """Set the new password and clear the token in one conditional UPDATE."""
        query = f"""
            UPDATE accounts
            SET password_hash = %s,
                reset_token_digest = NULL,
                reset_token_expires_at = NULL,
                updated_at = NOW()
            WHERE reset_token_digest = %s
              AND reset_token_expires_at > %s
            RETURNING {_COLUMNS}
        """

        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(query, (password_hash, digest, now))
            row = cursor.fetchone()
            conn.commit()
        return _to_account(row)

    def update(self, account_id: str, changes: Mapping[str, Any]) -> Account | None:
        """
        Apply field changes in a single UPDATE ... RETURNING statement.

        Raises:
            AccountError: CONFLICT when the new email violates uniqueness
            ValueError: for fields outside UPDATABLE_FIELDS
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        key = _parse_id(account_id)
        if key is None:
            return None
        if not changes:
            return self.get_by_id(account_id)

        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(name)) for name in changes
        )
        query = sql.SQL(
            "UPDATE accounts SET {assignments}, updated_at = NOW() "
            "WHERE id = %s RETURNING {columns}"
        ).format(assignments=assignments, columns=sql.SQL(_COLUMNS))

        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(query, (*changes.values(), key))
                row = cursor.fetchone()
                conn.commit()
        except errors.UniqueViolation:
            raise AccountError(ErrorKind.CONFLICT, messages.EMAIL_ALREADY_IN_USE) from None
        return _to_account(row)

    def ping(self) -> None:
        """Raise if the database is unreachable."""
        with self._pool.connection() as conn:
            conn.execute("SELECT 1")

    def _fetch_one(self, query: str, params: tuple[Any, ...]) -> Account | None:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(query, params)
            return _to_account(cursor.fetchone())


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            with pool.connection() as conn:
                conn.execute(sql_file.read_text())
            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
