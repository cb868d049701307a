"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for account registration,
email verification and login. It defines its own port interfaces for
infrastructure abstraction, keeping web and database frameworks out.
"""

from .exceptions import (
    AccountError,
    CodeStoreError,
    DuplicateKeyError,
    InvalidToken,
    NotificationError,
    StorageError,
)
from .models import (
    AccessToken,
    Account,
    PointsLedger,
    RegisteredAccount,
    Role,
    SocialProvider,
    TokenClaims,
    VerifiedEmail,
)
from .passwords import PasswordHasher
from .ports import AccountRepository, CodeStore, NotificationSender, TokenSigner, UnitOfWork
from .registration import RegistrationService
from .results import ErrorKind, Failure, Result, Success
from .session import SessionService
from .verification import VerificationCodeIssuer, VerificationService

__all__ = [
    "AccessToken",
    "Account",
    "AccountError",
    "AccountRepository",
    "CodeStore",
    "CodeStoreError",
    "DuplicateKeyError",
    "ErrorKind",
    "Failure",
    "InvalidToken",
    "NotificationError",
    "NotificationSender",
    "PasswordHasher",
    "PointsLedger",
    "RegisteredAccount",
    "RegistrationService",
    "Result",
    "Role",
    "SessionService",
    "SocialProvider",
    "StorageError",
    "Success",
    "TokenClaims",
    "TokenSigner",
    "UnitOfWork",
    "VerificationCodeIssuer",
    "VerificationService",
    "VerifiedEmail",
]
