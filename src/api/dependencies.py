"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting domain services
into routes. The shared collaborators (repository, code store, notification
sender, hasher, token signer) are created once in the application lifespan
and stored in app.state; services are cheap wrappers built per request.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.api.errors import http_error
from src.domain import messages
from src.domain.models import Account
from src.domain.passwords import PasswordHasher
from src.domain.ports import AccountRepository, CodeStore, NotificationSender, TokenSigner
from src.domain.registration import RegistrationService
from src.domain.results import ErrorKind, Failure
from src.domain.session import SessionService
from src.domain.verification import VerificationCodeIssuer, VerificationService


def get_repository(request: Request) -> AccountRepository:
    """Account repository from app state."""
    return request.app.state.repository


def get_code_store(request: Request) -> CodeStore:
    return request.app.state.code_store


def get_notification_sender(request: Request) -> NotificationSender:
    return request.app.state.notification_sender


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_token_signer(request: Request) -> TokenSigner:
    return request.app.state.token_signer


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repository, hasher and code issuer.
    """
    code_issuer = VerificationCodeIssuer(
        code_store=get_code_store(request),
        sender=get_notification_sender(request),
        ttl_seconds=request.app.state.code_ttl_seconds,
    )
    return RegistrationService(
        repository=get_repository(request),
        code_issuer=code_issuer,
        hasher=get_password_hasher(request),
    )


def get_verification_service(request: Request) -> VerificationService:
    return VerificationService(
        repository=get_repository(request),
        code_store=get_code_store(request),
    )


def get_session_service(request: Request) -> SessionService:
    return SessionService(
        repository=get_repository(request),
        signer=get_token_signer(request),
        hasher=get_password_hasher(request),
    )


# Bearer scheme for OpenAPI documentation; missing headers are handled below
http_bearer = HTTPBearer(auto_error=False)


def get_current_account(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    service: SessionService = Depends(get_session_service),
) -> Account:
    """
    Resolve the calling account from its bearer token.

    Runs before any protected handler; unauthenticated calls are rejected
    with 401 and never reach the handler.
    """
    if credentials is None:
        raise http_error(Failure(ErrorKind.AUTH, messages.INVALID_TOKEN))

    result = service.authenticate(credentials.credentials)
    if isinstance(result, Failure):
        raise http_error(result)
    return result.value
