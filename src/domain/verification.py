"""
Email verification - Code issuance and code verification.

Verification Code Lifecycle
===========================

1. Registration (or a password update) asks VerificationCodeIssuer to issue
   a code for an email address.
2. The issuer draws a 4-digit code, stores it under ``verified:<email>``
   with a 300-second expiry (overwriting any previous code and restarting
   the window), then mails it using wording chosen by the origin page.
3. VerificationService compares a submitted code against the stored one.
   On a match the account's verified flag is set and the code is deleted,
   so the same code cannot be replayed.

Expiry is enforced by the code store alone; a read never extends it.
"""

import logging
import secrets
from dataclasses import dataclass

from . import messages
from .exceptions import CodeStoreError, StorageError
from .models import VerifiedEmail
from .ports import AccountRepository, CodeStore, NotificationSender
from .results import ErrorKind, Failure, Result, Success

logger = logging.getLogger(__name__)

CODE_TTL_SECONDS = 300
CODE_MIN = 1000
CODE_MAX = 9999

ORIGIN_SIGN_UP = "sign-up"
ORIGIN_PASSWORD_UPDATE = "password-update"

_WORDING = {
    ORIGIN_SIGN_UP: (
        "[Forum] Sign-up verification code",
        "Your 4-digit verification code: {code}\n\n"
        "Hello. This is the verification email for signing up to the forum.\n"
        "Please enter the code above. It is valid for 5 minutes.",
    ),
    ORIGIN_PASSWORD_UPDATE: (
        "[Forum] Password change verification code",
        "Your 4-digit verification code: {code}\n\n"
        "Hello. This is the verification email for changing your forum password.\n"
        "Please enter the code above. It is valid for 5 minutes.",
    ),
}


def verification_key(email: str) -> str:
    """Code store key for an email address."""
    return f"verified:{email}"


def generate_verification_code() -> int:
    """
    Draw a verification code uniformly from 1000-9999 inclusive.

    Uses secrets module for cryptographic randomness.
    """
    return CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1)


def compose_message(origin_page: str, code: int) -> tuple[str, str] | None:
    """
    Select subject and body for an origin page.

    Returns None when the origin page has no wording.
    """
    wording = _WORDING.get(origin_page)
    if wording is None:
        return None
    subject, body = wording
    return subject, body.format(code=code)


@dataclass
class VerificationCodeIssuer:
    """Generates, stores and delivers verification codes."""

    code_store: CodeStore
    sender: NotificationSender
    ttl_seconds: int = CODE_TTL_SECONDS

    def issue(self, email: str, origin_page: str) -> int:
        """
        Issue a fresh code for an email address.

        Returns:
            The stored code

        Raises:
            CodeStoreError: the code could not be stored
            NotificationError: the message could not be delivered
        """
        code = generate_verification_code()
        self.code_store.set(verification_key(email), str(code), self.ttl_seconds)

        message = compose_message(origin_page, code)
        if message is None:
            logger.warning(
                "No message wording for origin page %r; nothing sent to %s", origin_page, email
            )
            return code

        subject, body = message
        self.sender.send(email, subject, body)
        logger.info("Verification code sent to %s (origin=%s)", email, origin_page)
        return code


@dataclass
class VerificationService:
    """Consumes verification codes and marks accounts verified."""

    repository: AccountRepository
    code_store: CodeStore

    def verify(self, email: str, submitted_code: int | str) -> Result[VerifiedEmail]:
        """
        Verify an email address with a submitted code.

        Args:
            email: Email the code was sent to (will be normalized)
            submitted_code: Code entered by the user, compared numerically

        Returns:
            Success(VerifiedEmail) or a Failure describing why not
        """
        normalized_email = email.strip().lower()
        key = verification_key(normalized_email)

        try:
            stored_code = self.code_store.get(key)
        except CodeStoreError:
            logger.exception("Code store read failed for %s", normalized_email)
            return Failure(ErrorKind.INTERNAL, messages.STORAGE_ERROR)

        if stored_code is None:
            return Failure(ErrorKind.VALIDATION, messages.NO_PENDING_VERIFICATION)

        if not _codes_match(submitted_code, stored_code):
            return Failure(ErrorKind.VALIDATION, messages.WRONG_CODE)

        try:
            updated = self.repository.mark_verified(normalized_email)
        except StorageError:
            logger.exception("Failed to mark %s verified", normalized_email)
            return Failure(ErrorKind.INTERNAL, messages.STORAGE_ERROR)

        if not updated:
            return Failure(ErrorKind.NOT_FOUND, messages.NO_SUCH_ACCOUNT)

        try:
            self.code_store.delete(key)
        except CodeStoreError:
            # The code still expires on its own
            logger.exception("Failed to invalidate verification code for %s", normalized_email)

        logger.info("Email verified: %s", normalized_email)
        return Success(VerifiedEmail(email=normalized_email))


def _codes_match(submitted: int | str, stored: str) -> bool:
    try:
        return int(submitted) == int(stored)
    except ValueError:
        return False

