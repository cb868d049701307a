"""
Session domain service - Login and access token resolution.

No server-side session is kept. An access token is self-verifying: its
signature and expiry are checked at use time by the TokenSigner.
"""

import logging
from dataclasses import dataclass, field

from . import messages
from .exceptions import InvalidToken, StorageError
from .models import AccessToken, Account
from .passwords import PasswordHasher
from .ports import AccountRepository, TokenSigner
from .results import ErrorKind, Failure, Result, Success

logger = logging.getLogger(__name__)


@dataclass
class SessionService:
    """Issues access tokens and resolves them back to accounts."""

    repository: AccountRepository
    signer: TokenSigner
    hasher: PasswordHasher = field(default_factory=PasswordHasher)

    def login(self, email: str, password: str) -> Result[AccessToken]:
        """
        Check credentials and verification state, then mint a token.

        Soft-deleted accounts are not found. Unknown email and wrong
        password are reported as different failures.
        """
        normalized_email = email.strip().lower()

        try:
            account = self.repository.find_active_by_email(normalized_email)
        except StorageError:
            logger.exception("Account lookup failed for %s", normalized_email)
            return Failure(ErrorKind.INTERNAL, messages.STORAGE_ERROR)

        if account is None:
            return Failure(ErrorKind.NOT_FOUND, messages.NO_SUCH_ACCOUNT)

        if not self.hasher.verify(password, account.password_hash):
            return Failure(ErrorKind.AUTH, messages.WRONG_CREDENTIALS)

        if not account.verified:
            return Failure(ErrorKind.AUTH, messages.EMAIL_NOT_VERIFIED)

        token = self.signer.sign(account.account_id, account.email)
        logger.info("Access token issued for account %s", account.account_id)
        return Success(AccessToken(access_token=token))

    def authenticate(self, token: str) -> Result[Account]:
        """Resolve a bearer token to its active account."""
        try:
            claims = self.signer.verify(token)
        except InvalidToken:
            return Failure(ErrorKind.AUTH, messages.INVALID_TOKEN)

        try:
            account = self.repository.find_active_by_id(claims.account_id)
        except StorageError:
            logger.exception("Account lookup failed for id %s", claims.account_id)
            return Failure(ErrorKind.INTERNAL, messages.STORAGE_ERROR)

        if account is None or account.email != claims.email:
            return Failure(ErrorKind.AUTH, messages.INVALID_TOKEN)
        return Success(account)
