"""
Shared fixtures for adversarial tests.

Provides a PostgreSQL pool (skipped when the database is unreachable)
and a thread barrier helper for concurrency attacks.
"""

import threading
from collections.abc import Callable, Generator
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

import psycopg
import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import run_migrations
from src.config.settings import get_settings

T = TypeVar("T")


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for adversarial tests."""
    settings = get_settings()
    try:
        psycopg.connect(settings.database_url, connect_timeout=2).close()
    except psycopg.OperationalError as e:
        pytest.skip(f"PostgreSQL not reachable: {e}")

    pool = ConnectionPool(conninfo=settings.database_url, min_size=1, max_size=10, open=True)
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Empty all tables before a PostgreSQL-backed test."""
    with pool.connection() as conn:
        conn.execute("TRUNCATE points, accounts, verification_codes RESTART IDENTITY")
        conn.commit()
    yield


def _run_concurrently(attempts: list[Callable[[], T]]) -> list[T]:
    barrier = threading.Barrier(len(attempts))

    def gated(attempt: Callable[[], T]) -> T:
        barrier.wait()
        return attempt()

    with ThreadPoolExecutor(max_workers=len(attempts)) as executor:
        futures = [executor.submit(gated, attempt) for attempt in attempts]
        return [f.result() for f in futures]


@pytest.fixture
def run_concurrently() -> Callable[[list[Callable[[], T]]], list[T]]:
    """Release every attempt at the same instant and collect the results."""
    return _run_concurrently

