"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Wire names are camelCase; Python attributes are snake_case.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RegisterRequest(_CamelModel):
    """Request model for account registration."""

    email: EmailStr
    nickname: str = Field(..., min_length=1, max_length=30, description="Public nickname")
    password: str = Field(..., min_length=1, description="Account password")
    password_confirm: str = Field(
        ..., alias="passwordConfirm", min_length=1, description="Must equal password"
    )


class RegisterResponse(_CamelModel):
    """Response model for successful registration."""

    email: str
    nickname: str
    role: str
    point_balance: int = Field(..., alias="pointBalance")


class VerifyRequest(_CamelModel):
    """Request model for email verification."""

    email: EmailStr
    submitted_code: int = Field(
        ...,
        alias="submittedCode",
        ge=0,
        le=9999,
        description="4-digit verification code from the email",
    )


class VerifyResponse(_CamelModel):
    """Response model for successful verification."""

    verified_email: str = Field(..., alias="verifiedEmail")


class LoginRequest(_CamelModel):
    """Request model for login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(_CamelModel):
    """Response model for successful login."""

    access_token: str = Field(..., alias="accessToken")


class ProfileResponse(_CamelModel):
    """Response model for the current account's profile."""

    account_id: int = Field(..., alias="accountId")
    email: str
    nickname: str
    role: str
    created_at: datetime | None = Field(None, alias="createdAt")


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
