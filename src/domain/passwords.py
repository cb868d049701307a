"""
Password hashing - bcrypt with a configurable work factor.

bcrypt only reads the first 72 bytes of its input; newer releases reject
anything longer. Callers check ``accepts()`` before hashing.
"""

from dataclasses import dataclass

import bcrypt

MAX_PASSWORD_BYTES = 72


@dataclass(frozen=True)
class PasswordHasher:
    """One-way salted password hashing (bcrypt)."""

    rounds: int = 10

    def accepts(self, password: str) -> bool:
        """True when the UTF-8 encoded password fits bcrypt's input limit."""
        return len(password.encode()) <= MAX_PASSWORD_BYTES

    def hash(self, password: str) -> str:
        """Hash with a fresh random salt. Never returns the plaintext."""
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        """Over-long passwords never match."""
        if not self.accepts(password):
            return False
        # bcrypt.checkpw compares in constant time
        return bcrypt.checkpw(password.encode(), password_hash.encode())
