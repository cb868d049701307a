"""
Domain exceptions - Semantic error types raised by adapters.

Adapters translate infrastructure failures into these exceptions so the
domain services can convert them into Failure results without knowing
which driver or transport produced them.
"""


class AccountError(Exception):
    """Base class for account domain errors."""

    pass


class StorageError(AccountError):
    """Account or ledger storage failed."""

    pass


class DuplicateKeyError(StorageError):
    """A storage-level unique constraint rejected an insert."""

    pass


class CodeStoreError(AccountError):
    """Ephemeral code store could not be read or written."""

    pass


class NotificationError(AccountError):
    """Message delivery failed or timed out."""

    pass


class InvalidToken(AccountError):
    """Access token has a bad signature, is malformed or has expired."""

    pass
