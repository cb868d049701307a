"""Repository adapters - Database implementations."""

from .memory import InMemoryAccountRepository, InMemoryUnitOfWork
from .postgres import PostgresAccountRepository, PostgresUnitOfWork, run_migrations

__all__ = [
    "InMemoryAccountRepository",
    "InMemoryUnitOfWork",
    "PostgresAccountRepository",
    "PostgresUnitOfWork",
    "run_migrations",
]
