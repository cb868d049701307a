"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory repository and code store with a controllable clock
- A recording notification sender
- A FastAPI app wired to in-memory adapters, and its test client
"""

import re
import threading
from collections.abc import Generator
from dataclasses import dataclass

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.cache.memory import InMemoryCodeStore
from src.adapters.repository.memory import InMemoryAccountRepository
from src.adapters.tokens.signer import JwtTokenSigner
from src.api.v1 import router
from src.domain.passwords import PasswordHasher
from src.domain.registration import RegistrationService
from src.domain.session import SessionService
from src.domain.verification import VerificationCodeIssuer, VerificationService

# bcrypt's minimum cost keeps the suite fast
TEST_BCRYPT_ROUNDS = 4
TEST_JWT_SECRET = "test-secret"


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class SentMessage:
    to_address: str
    subject: str
    body: str

    @property
    def code(self) -> int:
        match = re.search(r"\b(\d{4})\b", self.body)
        assert match is not None, f"No code in body: {self.body!r}"
        return int(match.group(1))


class RecordingSender:
    """NotificationSender that keeps every message in memory."""

    def __init__(self) -> None:
        self.messages: list[SentMessage] = []
        self._lock = threading.Lock()

    def send(self, to_address: str, subject: str, body: str) -> None:
        with self._lock:
            self.messages.append(SentMessage(to_address, subject, body))

    def last_code_for(self, email: str) -> int:
        for message in reversed(self.messages):
            if message.to_address == email:
                return message.code
        raise AssertionError(f"No message sent to {email}")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def code_store(clock: FakeClock) -> InMemoryCodeStore:
    return InMemoryCodeStore(clock=clock)


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def signer() -> JwtTokenSigner:
    return JwtTokenSigner(secret=TEST_JWT_SECRET, expires_minutes=5)


@pytest.fixture
def registration_service(
    repository: InMemoryAccountRepository,
    code_store: InMemoryCodeStore,
    sender: RecordingSender,
    hasher: PasswordHasher,
) -> RegistrationService:
    return RegistrationService(
        repository=repository,
        code_issuer=VerificationCodeIssuer(code_store=code_store, sender=sender),
        hasher=hasher,
    )


@pytest.fixture
def verification_service(
    repository: InMemoryAccountRepository, code_store: InMemoryCodeStore
) -> VerificationService:
    return VerificationService(repository=repository, code_store=code_store)


@pytest.fixture
def session_service(
    repository: InMemoryAccountRepository, signer: JwtTokenSigner, hasher: PasswordHasher
) -> SessionService:
    return SessionService(repository=repository, signer=signer, hasher=hasher)


@pytest.fixture
def memory_app(
    repository: InMemoryAccountRepository,
    code_store: InMemoryCodeStore,
    sender: RecordingSender,
    hasher: PasswordHasher,
    signer: JwtTokenSigner,
) -> FastAPI:
    """FastAPI app with v1 routes and in-memory collaborators in app.state."""
    test_app = FastAPI()
    test_app.include_router(router, prefix="/v1")
    test_app.state.repository = repository
    test_app.state.code_store = code_store
    test_app.state.notification_sender = sender
    test_app.state.password_hasher = hasher
    test_app.state.token_signer = signer
    test_app.state.code_ttl_seconds = 300
    return test_app


@pytest.fixture
def memory_client(memory_app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(memory_app) as client:
        yield client
