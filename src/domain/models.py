"""
Domain models - Accounts, points ledger heads and operation payloads.

Plain dataclasses shared by the services, the ports and the adapters.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    """Account role. New accounts are ordinary members."""

    MEMBER = "member"
    ADMIN = "admin"


class SocialProvider(str, Enum):
    """Login provider an account was created with."""

    NATIVE = "native"
    GOOGLE = "google"
    KAKAO = "kakao"
    NAVER = "naver"


@dataclass(frozen=True)
class Account:
    """Persisted account row."""

    account_id: int
    email: str
    nickname: str
    password_hash: str
    role: Role = Role.MEMBER
    verified: bool = False
    social_id: str | None = None
    social_provider: SocialProvider = SocialProvider.NATIVE
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None


@dataclass(frozen=True)
class PointsLedger:
    """Per-account running balance, created together with its account."""

    ledger_id: int
    account_id: int
    balance: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None


@dataclass(frozen=True)
class RegisteredAccount:
    email: str
    nickname: str
    role: Role
    point_balance: int


@dataclass(frozen=True)
class VerifiedEmail:
    email: str


@dataclass(frozen=True)
class AccessToken:
    access_token: str


@dataclass(frozen=True)
class TokenClaims:
    """Claims recovered from a valid access token."""

    account_id: int
    email: str
