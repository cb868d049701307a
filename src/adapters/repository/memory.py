"""
In-memory repository adapter - Implements AccountRepository protocol.

Process-local storage for development and tests. It mirrors the
PostgreSQL adapter's guarantees:

- email and nickname are unique across every row, soft-deleted included
- an insert claims its unique keys immediately, so a concurrent unit of
  work inserting the same key fails with DuplicateKeyError
- rows become visible only on commit; rollback releases claimed keys
"""

import itertools
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone

from src.domain.exceptions import DuplicateKeyError, StorageError
from src.domain.models import Account, PointsLedger


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryUnitOfWork:
    """Implements UnitOfWork protocol against an InMemoryAccountRepository."""

    def __init__(self, repository: "InMemoryAccountRepository") -> None:
        self._repository = repository
        self._accounts: list[Account] = []
        self._ledgers: list[PointsLedger] = []
        self._claimed_keys: set[tuple[str, str]] = set()
        self.committed = False
        self.closed = False

    def add_account(self, email: str, nickname: str, password_hash: str) -> Account:
        self._ensure_open()
        keys = {("email", email), ("nickname", nickname)}
        self._repository._claim(keys)
        self._claimed_keys |= keys

        now = _now()
        account = Account(
            account_id=self._repository._next_id("account"),
            email=email,
            nickname=nickname,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        self._accounts.append(account)
        return account

    def add_points_ledger(self, account_id: int) -> PointsLedger:
        self._ensure_open()
        key = {("ledger", str(account_id))}
        self._repository._claim(key)
        self._claimed_keys |= key

        now = _now()
        ledger = PointsLedger(
            ledger_id=self._repository._next_id("ledger"),
            account_id=account_id,
            balance=0,
            created_at=now,
            updated_at=now,
        )
        self._ledgers.append(ledger)
        return ledger

    def commit(self) -> None:
        self._ensure_open()
        self._repository._apply(self._accounts, self._ledgers)
        self.committed = True
        self.closed = True

    def rollback(self) -> None:
        if self.closed:
            return
        self._repository._release(self._claimed_keys)
        self._accounts.clear()
        self._ledgers.clear()
        self.closed = True

    def _ensure_open(self) -> None:
        if self.closed:
            raise StorageError("Unit of work is already closed")


class InMemoryAccountRepository:
    """
    Implements AccountRepository protocol with dictionaries.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Thread-safe: all shared state is guarded by one lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._accounts: dict[int, Account] = {}
        self._ledgers: dict[int, PointsLedger] = {}
        self._keys: set[tuple[str, str]] = set()
        self._counters = {"account": itertools.count(1), "ledger": itertools.count(1)}

    def find_active_by_email(self, email: str) -> Account | None:
        with self._lock:
            return next(
                (a for a in self._accounts.values() if a.email == email and a.is_active),
                None,
            )

    def find_active_by_nickname(self, nickname: str) -> Account | None:
        with self._lock:
            return next(
                (a for a in self._accounts.values() if a.nickname == nickname and a.is_active),
                None,
            )

    def find_active_by_id(self, account_id: int) -> Account | None:
        with self._lock:
            account = self._accounts.get(account_id)
        return account if account is not None and account.is_active else None

    def find_ledger(self, account_id: int) -> PointsLedger | None:
        with self._lock:
            return self._ledgers.get(account_id)

    def mark_verified(self, email: str) -> bool:
        with self._lock:
            for account in self._accounts.values():
                if account.email == email and account.is_active:
                    self._accounts[account.account_id] = replace(
                        account, verified=True, updated_at=_now()
                    )
                    return True
        return False

    def soft_delete(self, account_id: int) -> None:
        """Mark an account deleted. Its email and nickname stay reserved.

        Test and administration helper; not part of the AccountRepository port.
        """
        with self._lock:
            account = self._accounts[account_id]
            self._accounts[account_id] = replace(account, deleted_at=_now())

    def count_accounts(self) -> int:
        """Committed account rows, deleted included. Test helper."""
        with self._lock:
            return len(self._accounts)

    def count_ledgers(self) -> int:
        """Committed ledger rows. Test helper."""
        with self._lock:
            return len(self._ledgers)

    @contextmanager
    def unit_of_work(self) -> Iterator[InMemoryUnitOfWork]:
        uow = InMemoryUnitOfWork(self)
        try:
            yield uow
        finally:
            if not uow.committed:
                uow.rollback()

    def ping(self) -> None:
        pass

    def _next_id(self, kind: str) -> int:
        with self._lock:
            return next(self._counters[kind])

    def _claim(self, keys: set[tuple[str, str]]) -> None:
        with self._lock:
            taken = keys & self._keys
            if taken:
                raise DuplicateKeyError(f"duplicate key: {sorted(taken)}")
            self._keys |= keys

    def _release(self, keys: set[tuple[str, str]]) -> None:
        with self._lock:
            self._keys -= keys

    def _apply(self, accounts: list[Account], ledgers: list[PointsLedger]) -> None:
        with self._lock:
            for account in accounts:
                self._accounts[account.account_id] = account
            for ledger in ledgers:
                self._ledgers[ledger.account_id] = ledger
