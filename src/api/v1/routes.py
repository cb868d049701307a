"""
API v1 routes.

Defines REST endpoints for account registration, email verification,
login and the current account's profile.
"""

from fastapi import APIRouter, Depends, Header, status

from src.api.dependencies import (
    get_current_account,
    get_registration_service,
    get_session_service,
    get_verification_service,
)
from src.api.errors import http_error
from src.api.models import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    ProfileResponse,
    RegisterRequest,
    RegisterResponse,
    VerifyRequest,
    VerifyResponse,
)
from src.domain.models import Account
from src.domain.registration import RegistrationService
from src.domain.results import Failure
from src.domain.session import SessionService
from src.domain.verification import ORIGIN_SIGN_UP, VerificationService

router = APIRouter(tags=["v1"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Password mismatch or too long"},
        409: {
            "model": ErrorResponse,
            "description": "Email or nickname taken, or restore required",
        },
        422: {"description": "Validation error"},
        500: {"model": ErrorResponse, "description": "Verification email could not be sent"},
    },
    summary="Register a new account",
    description="Create an account and its points ledger. "
    "A 4-digit verification code is sent to the email address.",
)
def register(
    request_data: RegisterRequest,
    x_source_page: str = Header(ORIGIN_SIGN_UP, alias="X-Source-Page"),
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse:
    """
    Register a new account.

    - **email**: Account email
    - **nickname**: Public nickname
    - **password** / **passwordConfirm**: Must match

    The `X-Source-Page` header selects the verification email wording.
    """
    result = service.register(
        request_data.email,
        request_data.nickname,
        request_data.password,
        request_data.password_confirm,
        x_source_page,
    )
    if isinstance(result, Failure):
        raise http_error(result)

    account = result.value
    return RegisterResponse(
        email=account.email,
        nickname=account.nickname,
        role=account.role.value,
        point_balance=account.point_balance,
    )


@router.post(
    "/verify",
    response_model=VerifyResponse,
    responses={
        400: {"model": ErrorResponse, "description": "No pending verification or wrong code"},
        404: {"model": ErrorResponse, "description": "No such account"},
        422: {"description": "Validation error"},
    },
    summary="Verify email with code",
    description="Submit the 4-digit code received by email to verify the account.",
)
def verify(
    request_data: VerifyRequest,
    service: VerificationService = Depends(get_verification_service),
) -> VerifyResponse:
    result = service.verify(request_data.email, request_data.submitted_code)
    if isinstance(result, Failure):
        raise http_error(result)
    return VerifyResponse(verified_email=result.value.email)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Wrong credentials or email not verified"},
        404: {"model": ErrorResponse, "description": "No such account"},
        422: {"description": "Validation error"},
    },
    summary="Log in",
    description="Exchange email and password for a signed access token.",
)
def login(
    request_data: LoginRequest,
    service: SessionService = Depends(get_session_service),
) -> LoginResponse:
    result = service.login(request_data.email, request_data.password)
    if isinstance(result, Failure):
        raise http_error(result)
    return LoginResponse(access_token=result.value.access_token)


@router.get(
    "/users/me",
    response_model=ProfileResponse,
    responses={401: {"model": ErrorResponse, "description": "Missing, invalid or expired token"}},
    summary="Current account profile",
)
def my_profile(account: Account = Depends(get_current_account)) -> ProfileResponse:
    return ProfileResponse(
        account_id=account.account_id,
        email=account.email,
        nickname=account.nickname,
        role=account.role.value,
        created_at=account.created_at,
    )
