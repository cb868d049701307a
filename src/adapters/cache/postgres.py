"""
PostgreSQL code store adapter - Implements CodeStore protocol.

Entries live in the UNLOGGED ``verification_codes`` table. Expiry is
evaluated with database time (NOW()) so every API process sharing the
database agrees on when an entry dies, regardless of local clocks.
"""

import logging

import psycopg
from psycopg_pool import ConnectionPool

from src.domain.exceptions import CodeStoreError

logger = logging.getLogger(__name__)


class PostgresCodeStore:
    """
    Implements CodeStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """
        Store a value, replacing any previous one and restarting its window.

        Expired rows are purged in the same transaction.
        """
        upsert_sql = """
            INSERT INTO verification_codes (key, value, expires_at)
            VALUES (%s, %s, NOW() + %s * INTERVAL '1 second')
            ON CONFLICT (key) DO UPDATE
            SET value = EXCLUDED.value,
                expires_at = EXCLUDED.expires_at
        """
        purge_sql = "DELETE FROM verification_codes WHERE expires_at <= NOW()"

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(purge_sql)
                cursor.execute(upsert_sql, (key, value, ttl_seconds))
                conn.commit()
        except psycopg.Error as e:
            raise CodeStoreError(str(e)) from e

    def get(self, key: str) -> str | None:
        sql = "SELECT value FROM verification_codes WHERE key = %s AND expires_at > NOW()"
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (key,))
                row = cursor.fetchone()
        except psycopg.Error as e:
            raise CodeStoreError(str(e)) from e
        return row[0] if row is not None else None

    def delete(self, key: str) -> None:
        try:
            with self._pool.connection() as conn:
                conn.execute("DELETE FROM verification_codes WHERE key = %s", (key,))
                conn.commit()
        except psycopg.Error as e:
            raise CodeStoreError(str(e)) from e
