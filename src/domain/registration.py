"""
Registration domain service - Account creation with verification.

This module contains the core business logic for signing up: input checks,
uniqueness checks, atomic creation of an account and its points ledger
head, and issuing the email verification code.

Account Lifecycle
=================

States:
- UNREGISTERED: No active account for the email
- CREATED_UNVERIFIED: Account and ledger committed, verified=false
- VERIFIED: Correct code submitted before expiry, verified=true

Transitions (forward-only):
    UNREGISTERED -> CREATED_UNVERIFIED   (register)
    CREATED_UNVERIFIED -> VERIFIED       (verify)

Ordering within register():
    pre-checks -> transactional insert -> commit -> code issuance

The pre-checks are a check-then-act window. The storage unique constraints
are the real guard: a duplicate surfacing inside the unit of work is
reported as "restore required", since it means the key belongs to a row
the pre-checks cannot see (soft-deleted) or to a racing registration.
"""

import logging
from dataclasses import dataclass, field

from . import messages
from .exceptions import CodeStoreError, DuplicateKeyError, NotificationError, StorageError
from .models import RegisteredAccount
from .passwords import PasswordHasher
from .ports import AccountRepository
from .results import ErrorKind, Failure, Result, Success
from .verification import ORIGIN_SIGN_UP, VerificationCodeIssuer

logger = logging.getLogger(__name__)


@dataclass
class RegistrationService:
    """
    Domain service for account registration.

    Orchestrates the registration flow: email normalization, uniqueness
    checks, password hashing, the account + ledger unit of work, and the
    verification code.
    """

    repository: AccountRepository
    code_issuer: VerificationCodeIssuer
    hasher: PasswordHasher = field(default_factory=PasswordHasher)

    def register(
        self,
        email: str,
        nickname: str,
        password: str,
        password_confirm: str,
        origin_page: str = ORIGIN_SIGN_UP,
    ) -> Result[RegisteredAccount]:
        """
        Register a new account and send its verification code.

        Args:
            email: Account email (will be normalized)
            nickname: Public nickname
            password: Plaintext password (will be hashed)
            password_confirm: Must equal password
            origin_page: Selects the verification email wording

        Returns:
            Success(RegisteredAccount) or a Failure. A Failure of kind
            INTERNAL after the commit means the account exists but the
            verification code could not be delivered.
        """
        if password != password_confirm:
            return Failure(ErrorKind.VALIDATION, messages.PASSWORD_MISMATCH)
        if not self.hasher.accepts(password):
            return Failure(ErrorKind.VALIDATION, messages.PASSWORD_TOO_LONG)

        normalized_email = self._normalize_email(email)

        try:
            if self.repository.find_active_by_email(normalized_email) is not None:
                return Failure(ErrorKind.CONFLICT, messages.EMAIL_TAKEN)
            if self.repository.find_active_by_nickname(nickname) is not None:
                return Failure(ErrorKind.CONFLICT, messages.NICKNAME_TAKEN)
        except StorageError:
            logger.exception("Uniqueness pre-check failed for %s", normalized_email)
            return Failure(ErrorKind.INTERNAL, messages.STORAGE_ERROR)

        password_hash = self.hasher.hash(password)

        try:
            with self.repository.unit_of_work() as uow:
                account = uow.add_account(normalized_email, nickname, password_hash)
                ledger = uow.add_points_ledger(account.account_id)
                uow.commit()
        except DuplicateKeyError:
            logger.info(
                "Storage-level duplicate for %s / %s; restore required", normalized_email, nickname
            )
            return Failure(ErrorKind.CONFLICT, messages.RESTORE_REQUIRED)
        except StorageError:
            logger.exception("Registration transaction failed for %s", normalized_email)
            return Failure(ErrorKind.INTERNAL, messages.STORAGE_ERROR)

        logger.info("Account %s created for %s", account.account_id, normalized_email)

        # Account stays committed even if delivery fails
        try:
            self.code_issuer.issue(account.email, origin_page)
        except (NotificationError, CodeStoreError):
            logger.exception("Verification code delivery failed for %s", account.email)
            return Failure(ErrorKind.INTERNAL, messages.NOTIFICATION_SEND_FAILED)

        return Success(
            RegisteredAccount(
                email=account.email,
                nickname=account.nickname,
                role=account.role,
                point_balance=ledger.balance,
            )
        )

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()
