"""
PostgreSQL repository adapter - Implements AccountRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Transaction Design:
-------------------
unit_of_work() checks a connection out of the pool and keeps it for the
whole block, so the account insert and the ledger insert share one
transaction. Nothing is committed unless commit() is called; leaving the
block any other way rolls back, so an account without its ledger head is
never visible to other connections.

Unique violations (SQLSTATE 23505) are translated to DuplicateKeyError.
The constraints cover soft-deleted rows too, which is how a previously
deleted email or nickname surfaces during registration.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg
from psycopg.errors import UniqueViolation
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from src.domain.exceptions import DuplicateKeyError, StorageError
from src.domain.models import Account, PointsLedger, Role, SocialProvider

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = """
    account_id, email, nickname, password_hash, role, verified,
    social_id, social_provider, created_at, updated_at, deleted_at
"""

_LEDGER_COLUMNS = "ledger_id, account_id, balance, created_at, updated_at, deleted_at"


def _account_from_row(row: dict[str, Any]) -> Account:
    return Account(
        account_id=row["account_id"],
        email=row["email"],
        nickname=row["nickname"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        verified=row["verified"],
        social_id=row["social_id"],
        social_provider=SocialProvider(row["social_provider"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        deleted_at=row["deleted_at"],
    )


def _ledger_from_row(row: dict[str, Any]) -> PointsLedger:
    return PointsLedger(
        ledger_id=row["ledger_id"],
        account_id=row["account_id"],
        balance=row["balance"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        deleted_at=row["deleted_at"],
    )


class PostgresUnitOfWork:
    """
    Implements UnitOfWork protocol over a single pooled connection.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, conn: psycopg.Connection) -> None:
        self._conn = conn
        self.committed = False

    def add_account(self, email: str, nickname: str, password_hash: str) -> Account:
        sql = f"""
            INSERT INTO accounts (email, nickname, password_hash)
            VALUES (%s, %s, %s)
            RETURNING {_ACCOUNT_COLUMNS}
        """
        return _account_from_row(self._insert(sql, (email, nickname, password_hash)))

    def add_points_ledger(self, account_id: int) -> PointsLedger:
        sql = f"""
            INSERT INTO points (account_id, balance)
            VALUES (%s, 0)
            RETURNING {_LEDGER_COLUMNS}
        """
        return _ledger_from_row(self._insert(sql, (account_id,)))

    def commit(self) -> None:
        try:
            self._conn.commit()
        except UniqueViolation as e:
            raise DuplicateKeyError(str(e)) from e
        except psycopg.Error as e:
            raise StorageError(str(e)) from e
        self.committed = True

    def rollback(self) -> None:
        self._conn.rollback()

    def _insert(self, sql: str, params: tuple) -> dict[str, Any]:
        try:
            with self._conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(sql, params)
                row = cursor.fetchone()
        except UniqueViolation as e:
            raise DuplicateKeyError(str(e)) from e
        except psycopg.Error as e:
            raise StorageError(str(e)) from e
        if row is None:
            raise StorageError("INSERT ... RETURNING produced no row")
        return row


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

    def find_active_by_email(self, email: str) -> Account | None:
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE email = %s AND deleted_at IS NULL"
        return self._fetch_account(sql, (email,))

    def find_active_by_nickname(self, nickname: str) -> Account | None:
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE nickname = %s AND deleted_at IS NULL"
        return self._fetch_account(sql, (nickname,))

    def find_active_by_id(self, account_id: int) -> Account | None:
        sql = (
            f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE account_id = %s AND deleted_at IS NULL"
        )
        return self._fetch_account(sql, (account_id,))

    def find_ledger(self, account_id: int) -> PointsLedger | None:
        sql = f"SELECT {_LEDGER_COLUMNS} FROM points WHERE account_id = %s AND deleted_at IS NULL"
        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(sql, (account_id,))
                row = cursor.fetchone()
        except psycopg.Error as e:
            raise StorageError(str(e)) from e
        return _ledger_from_row(row) if row is not None else None

    def mark_verified(self, email: str) -> bool:
        """
        Set the verified flag on the active account with this email.

        Setting it on an already verified account is a harmless no-op
        update; the flag never goes back to false.
        """
        sql = """
            UPDATE accounts
            SET verified = TRUE, updated_at = NOW()
            WHERE email = %s AND deleted_at IS NULL
        """
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (email,))
                conn.commit()
                return cursor.rowcount == 1
        except psycopg.Error as e:
            raise StorageError(str(e)) from e

    @contextmanager
    def unit_of_work(self) -> Iterator[PostgresUnitOfWork]:
        """
        Open a transaction spanning the accounts and points tables.

        Yields:
            PostgresUnitOfWork bound to one pooled connection
        """
        try:
            with self._pool.connection() as conn:
                uow = PostgresUnitOfWork(conn)
                try:
                    yield uow
                finally:
                    if not uow.committed:
                        conn.rollback()
        except psycopg.Error as e:
            raise StorageError(str(e)) from e

    def ping(self) -> None:
        try:
            with self._pool.connection() as conn:
                conn.execute("SELECT 1")
        except psycopg.Error as e:
            raise StorageError(str(e)) from e

    def _fetch_account(self, sql: str, params: tuple) -> Account | None:
        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(sql, params)
                row = cursor.fetchone()
        except psycopg.Error as e:
            raise StorageError(str(e)) from e
        return _account_from_row(row) if row is not None else None


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
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
