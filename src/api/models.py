"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from typing import Any

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.domain.ports import EmailSendStatus, RegistrationStatus, UserRecord
from src.domain.registration import MAX_PASSWORD_BYTES


def check_password_bytes(value: str) -> str:
    if len(value.encode()) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


class RegisterRequest(BaseModel):
    """Request model for user registration."""

    email: EmailStr
    password: str = Field(..., min_length=8, description="User password (8 characters to 72 bytes)")

    @field_validator("password")
    @classmethod
    def _limit_password_bytes(cls, value: str) -> str:
        return check_password_bytes(value)


class RegisterResponse(BaseModel):
    """Response model for successful registration."""

    message: str
    email: str
    email_status: EmailSendStatus


class RegistrationStatusResponse(BaseModel):
    """Response model for registration confirmation."""

    status: RegistrationStatus
    message: str


class LoginRequest(BaseModel):
    """Request model for local login."""

    username: str = Field(..., min_length=1, description="Email address")
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def _limit_password_bytes(cls, value: str) -> str:
        return check_password_bytes(value)


class UserView(BaseModel):
    """Public view of a user. Never carries credentials or tokens."""

    id: int
    email: str
    confirmed: bool

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserView":
        return cls(id=user.id, email=user.email, confirmed=user.confirmed)


class UserResponse(BaseModel):
    user: UserView


class MessageResponse(BaseModel):
    message: str


class ValidationErrorItem(BaseModel):
    """Field-level validation failure."""

    value: Any = None
    msg: str
    param: str
    location: str


class ValidationErrorResponse(BaseModel):
    errors: list[ValidationErrorItem]


class ErrorBody(BaseModel):
    kind: str
    status: int
    message: str
    detail: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: ErrorBody
