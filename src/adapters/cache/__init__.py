"""Code store adapters - Ephemeral key/value implementations."""

from .memory import InMemoryCodeStore
from .postgres import PostgresCodeStore

__all__ = ["InMemoryCodeStore", "PostgresCodeStore"]
