"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from contextlib import AbstractContextManager
from typing import Protocol

from .models import Account, PointsLedger, TokenClaims


class UnitOfWork(Protocol):
    """
    Transactional scope over the account and points ledger tables.

    Entering the context begins the transaction. Leaving it without
    commit() rolls back, and an exception raised inside the block rolls
    back before propagating.
    """

    def add_account(self, email: str, nickname: str, password_hash: str) -> Account:
        """
        Insert an unverified member account.

        Raises:
            DuplicateKeyError: email or nickname collides with any stored row
            StorageError: any other storage failure
        """
        ...

    def add_points_ledger(self, account_id: int) -> PointsLedger:
        """
        Insert the ledger head (balance 0) for a new account.

        Raises:
            DuplicateKeyError: a ledger already exists for the account
            StorageError: any other storage failure
        """
        ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class AccountRepository(Protocol):
    """Port interface for account and points ledger persistence."""

    def find_active_by_email(self, email: str) -> Account | None:
        """Return the non-deleted account with this email, if any."""
        ...

    def find_active_by_nickname(self, nickname: str) -> Account | None:
        """Return the non-deleted account with this nickname, if any."""
        ...

    def find_active_by_id(self, account_id: int) -> Account | None: ...

    def find_ledger(self, account_id: int) -> PointsLedger | None: ...

    def mark_verified(self, email: str) -> bool:
        """
        Set verified=true on the non-deleted account with this email.

        Idempotent. Returns False when no such account exists.
        """
        ...

    def unit_of_work(self) -> AbstractContextManager[UnitOfWork]: ...

    def ping(self) -> None:
        """Raise if the store is unreachable."""
        ...


class CodeStore(Protocol):
    """
    Port interface for the shared ephemeral key/value store.

    set() is last-write-wins and restarts the expiry window. get() never
    extends or consumes the expiry.
    """

    def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    def get(self, key: str) -> str | None: ...

    def delete(self, key: str) -> None: ...


class NotificationSender(Protocol):
    """Port interface for outbound message delivery."""

    def send(self, to_address: str, subject: str, body: str) -> None:
        """
        Deliver a message.

        Raises:
            NotificationError: delivery failed or timed out
        """
        ...


class TokenSigner(Protocol):
    """Port interface for signed, self-verifying access credentials."""

    def sign(self, account_id: int, email: str) -> str: ...

    def verify(self, token: str) -> TokenClaims:
        """
        Raises:
            InvalidToken: bad signature, malformed or expired
        """
        ...
