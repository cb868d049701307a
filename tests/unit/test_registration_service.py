"""
Unit tests for RegistrationService domain logic.

Tests domain logic with mocked ports and in-memory adapters to verify:
- Validation order and fail-fast behavior
- Email normalization
- Password hashing
- Account + ledger atomicity
- Storage-level duplicate handling (restore required)
- Verification code issuance after commit
"""

import re
from unittest.mock import MagicMock, Mock

import bcrypt
import pytest

from src.adapters.repository.memory import InMemoryAccountRepository, InMemoryUnitOfWork
from src.domain import messages
from src.domain.exceptions import CodeStoreError, DuplicateKeyError, NotificationError, StorageError
from src.domain.models import Role
from src.domain.passwords import PasswordHasher
from src.domain.registration import RegistrationService
from src.domain.results import ErrorKind, Failure, Success
from src.domain.verification import VerificationCodeIssuer


def register_default(service: RegistrationService, **overrides):
    args = {
        "email": "a@x.com",
        "nickname": "az",
        "password": "p1",
        "password_confirm": "p1",
        "origin_page": "sign-up",
    }
    args.update(overrides)
    return service.register(**args)


class TestValidationOrder:
    """Tests for fail-fast validation before any write."""

    def test_password_mismatch_is_validation_error(self, registration_service) -> None:
        """Mismatched confirmation returns VALIDATION with the catalog message."""
        result = register_default(registration_service, password_confirm="p2")

        assert result == Failure(ErrorKind.VALIDATION, messages.PASSWORD_MISMATCH)

    def test_password_mismatch_never_touches_store(self) -> None:
        """No lookup, no unit of work and no code on password mismatch."""
        repo = Mock()
        issuer = Mock()
        service = RegistrationService(repository=repo, code_issuer=issuer)

        register_default(service, password_confirm="different")

        repo.find_active_by_email.assert_not_called()
        repo.unit_of_work.assert_not_called()
        issuer.issue.assert_not_called()

    def test_password_mismatch_creates_no_account(
        self, registration_service, repository: InMemoryAccountRepository
    ) -> None:
        register_default(registration_service, password_confirm="nope")

        assert repository.count_accounts() == 0
        assert repository.count_ledgers() == 0

    def test_email_taken_is_conflict(self, registration_service) -> None:
        assert isinstance(register_default(registration_service), Success)

        result = register_default(registration_service, nickname="other")

        assert result == Failure(ErrorKind.CONFLICT, messages.EMAIL_TAKEN)

    def test_nickname_taken_is_conflict(self, registration_service) -> None:
        assert isinstance(register_default(registration_service), Success)

        result = register_default(registration_service, email="b@x.com")

        assert result == Failure(ErrorKind.CONFLICT, messages.NICKNAME_TAKEN)

    def test_email_checked_before_nickname(self, registration_service) -> None:
        """When both collide, the email conflict is reported."""
        register_default(registration_service)

        result = register_default(registration_service)

        assert result == Failure(ErrorKind.CONFLICT, messages.EMAIL_TAKEN)

    def test_precheck_storage_failure_is_internal(self) -> None:
        repo = Mock()
        repo.find_active_by_email.side_effect = StorageError("connection refused")
        service = RegistrationService(repository=repo, code_issuer=Mock())

        result = register_default(service)

        assert result == Failure(ErrorKind.INTERNAL, messages.STORAGE_ERROR)


class TestEmailNormalization:
    """Tests for email normalization."""

    def test_normalize_email_strips_and_lowercases(
        self, registration_service, repository: InMemoryAccountRepository
    ) -> None:
        result = register_default(registration_service, email="  User@Example.COM  ")

        assert isinstance(result, Success)
        assert result.value.email == "user@example.com"
        assert repository.find_active_by_email("user@example.com") is not None

    def test_differently_cased_email_is_taken(self, registration_service) -> None:
        register_default(registration_service, email="a@x.com")

        result = register_default(registration_service, email="A@X.COM", nickname="other")

        assert result == Failure(ErrorKind.CONFLICT, messages.EMAIL_TAKEN)


class TestPasswordHashing:
    """Tests for password hashing."""

    def test_password_is_hashed_with_bcrypt(
        self, registration_service, repository: InMemoryAccountRepository
    ) -> None:
        register_default(registration_service, password="secret123", password_confirm="secret123")

        account = repository.find_active_by_email("a@x.com")
        assert account.password_hash != "secret123"
        assert re.match(r"^\$2[aby]\$", account.password_hash)
        assert bcrypt.checkpw(b"secret123", account.password_hash.encode())

    def test_configured_cost_factor_is_used(self, repository, code_store, sender) -> None:
        service = RegistrationService(
            repository=repository,
            code_issuer=VerificationCodeIssuer(code_store=code_store, sender=sender),
            hasher=PasswordHasher(rounds=5),
        )

        register_default(service)

        password_hash = repository.find_active_by_email("a@x.com").password_hash
        assert int(password_hash.split("$")[2]) == 5

    def test_default_cost_factor_at_least_10(self) -> None:
        assert PasswordHasher().rounds >= 10


class TestSuccessfulRegistration:
    """Tests for the committed account + ledger pair."""

    def test_returns_account_summary(self, registration_service) -> None:
        result = register_default(registration_service)

        assert isinstance(result, Success)
        assert result.value.email == "a@x.com"
        assert result.value.nickname == "az"
        assert result.value.role is Role.MEMBER
        assert result.value.point_balance == 0

    def test_creates_one_account_and_one_ledger(
        self, registration_service, repository: InMemoryAccountRepository
    ) -> None:
        register_default(registration_service)

        account = repository.find_active_by_email("a@x.com")
        assert account is not None
        assert account.verified is False
        assert repository.count_accounts() == 1
        assert repository.count_ledgers() == 1
        assert repository.find_ledger(account.account_id).balance == 0

    def test_sends_code_to_normalized_email(self, registration_service, sender) -> None:
        register_default(registration_service, email=" A@X.COM ")

        assert len(sender.messages) == 1
        assert sender.messages[0].to_address == "a@x.com"


class TestAtomicity:
    """Account and ledger appear together or not at all."""

    def test_ledger_failure_rolls_back_account(
        self,
        registration_service,
        repository: InMemoryAccountRepository,
        sender,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A mid-transaction ledger failure leaves no account behind."""

        def failing_ledger(self, account_id):
            raise StorageError("disk full")

        monkeypatch.setattr(InMemoryUnitOfWork, "add_points_ledger", failing_ledger)

        result = register_default(registration_service)

        assert result == Failure(ErrorKind.INTERNAL, messages.STORAGE_ERROR)
        assert repository.count_accounts() == 0
        assert repository.count_ledgers() == 0
        assert repository.find_active_by_email("a@x.com") is None
        assert sender.messages == []

    def test_rolled_back_keys_can_be_registered_again(
        self,
        registration_service,
        repository: InMemoryAccountRepository,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        original = InMemoryUnitOfWork.add_points_ledger

        def failing_ledger(self, account_id):
            raise StorageError("transient")

        monkeypatch.setattr(InMemoryUnitOfWork, "add_points_ledger", failing_ledger)
        register_default(registration_service)
        monkeypatch.setattr(InMemoryUnitOfWork, "add_points_ledger", original)

        result = register_default(registration_service)

        assert isinstance(result, Success)
        assert repository.count_accounts() == 1

    def test_unit_of_work_committed_once(self) -> None:
        """Orchestrator inserts account then ledger, then commits."""
        repo = MagicMock()
        repo.find_active_by_email.return_value = None
        repo.find_active_by_nickname.return_value = None
        uow = repo.unit_of_work.return_value.__enter__.return_value
        uow.add_account.return_value = Mock(
            account_id=7, email="a@x.com", nickname="az", role=Role.MEMBER
        )
        uow.add_points_ledger.return_value = Mock(balance=0)
        service = RegistrationService(
            repository=repo, code_issuer=Mock(), hasher=PasswordHasher(rounds=4)
        )

        register_default(service)

        uow.add_points_ledger.assert_called_once_with(7)
        uow.commit.assert_called_once()


class TestStorageLevelDuplicates:
    """Duplicates that slip past the pre-checks."""

    def test_soft_deleted_email_requires_restore(
        self, registration_service, repository: InMemoryAccountRepository
    ) -> None:
        register_default(registration_service)
        account = repository.find_active_by_email("a@x.com")
        repository.soft_delete(account.account_id)

        result = register_default(registration_service, nickname="fresh")

        assert result == Failure(ErrorKind.CONFLICT, messages.RESTORE_REQUIRED)
        assert repository.count_accounts() == 1
        assert repository.count_ledgers() == 1

    def test_duplicate_key_in_transaction_is_restore_conflict(self) -> None:
        repo = MagicMock()
        repo.find_active_by_email.return_value = None
        repo.find_active_by_nickname.return_value = None
        uow = repo.unit_of_work.return_value.__enter__.return_value
        uow.add_account.side_effect = DuplicateKeyError("accounts_email_key")
        issuer = Mock()
        service = RegistrationService(
            repository=repo, code_issuer=issuer, hasher=PasswordHasher(rounds=4)
        )

        result = register_default(service)

        assert result == Failure(ErrorKind.CONFLICT, messages.RESTORE_REQUIRED)
        uow.commit.assert_not_called()
        issuer.issue.assert_not_called()


class TestNotificationAfterCommit:
    """Code delivery happens after commit and never undoes the account."""

    def test_send_failure_keeps_account(
        self, repository: InMemoryAccountRepository, code_store
    ) -> None:
        failing_sender = Mock()
        failing_sender.send.side_effect = NotificationError("smtp timeout")
        service = RegistrationService(
            repository=repository,
            code_issuer=VerificationCodeIssuer(code_store=code_store, sender=failing_sender),
            hasher=PasswordHasher(rounds=4),
        )

        result = register_default(service)

        assert result == Failure(ErrorKind.INTERNAL, messages.NOTIFICATION_SEND_FAILED)
        assert repository.find_active_by_email("a@x.com") is not None
        assert repository.count_ledgers() == 1

    def test_code_store_failure_keeps_account(self, repository: InMemoryAccountRepository) -> None:
        issuer = Mock()
        issuer.issue.side_effect = CodeStoreError("cache down")
        service = RegistrationService(
            repository=repository, code_issuer=issuer, hasher=PasswordHasher(rounds=4)
        )

        result = register_default(service)

        assert result == Failure(ErrorKind.INTERNAL, messages.NOTIFICATION_SEND_FAILED)
        assert repository.count_accounts() == 1

    def test_issue_called_with_origin_page(self, repository: InMemoryAccountRepository) -> None:
        issuer = Mock()
        service = RegistrationService(
            repository=repository, code_issuer=issuer, hasher=PasswordHasher(rounds=4)
        )

        register_default(service, origin_page="password-update")

        issuer.issue.assert_called_once_with("a@x.com", "password-update")


class TestPasswordLength:
    """bcrypt reads at most 72 bytes; longer passwords are rejected up front."""

    def test_password_over_72_bytes_is_validation_error(
        self, registration_service, repository: InMemoryAccountRepository
    ) -> None:
        long_password = "p" * 80

        result = register_default(
            registration_service, password=long_password, password_confirm=long_password
        )

        assert result == Failure(ErrorKind.VALIDATION, messages.PASSWORD_TOO_LONG)
        assert repository.count_accounts() == 0

    def test_limit_counts_utf8_bytes(self, registration_service) -> None:
        """25 three-byte characters are 75 bytes."""
        long_password = "한" * 25

        result = register_default(
            registration_service, password=long_password, password_confirm=long_password
        )

        assert result == Failure(ErrorKind.VALIDATION, messages.PASSWORD_TOO_LONG)

    def test_password_of_exactly_72_bytes_accepted(self, registration_service) -> None:
        password = "p" * 72

        result = register_default(
            registration_service, password=password, password_confirm=password
        )

        assert isinstance(result, Success)

    def test_long_password_never_reaches_hasher(self) -> None:
        repo = Mock()
        hasher = Mock(spec=PasswordHasher)
        hasher.accepts.return_value = False
        service = RegistrationService(repository=repo, code_issuer=Mock(), hasher=hasher)

        register_default(service, password="x" * 80, password_confirm="x" * 80)

        hasher.hash.assert_not_called()
        repo.find_active_by_email.assert_not_called()
