"""
Pydantic schemas for authentication and user accounts.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from marketing_api.auth.models import UserRole

# bcrypt only uses the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def _check_password_bytes(v: str) -> str:
    if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return v


class TokenClaims(BaseModel):
    """Claims carried by a verified access token.

    ``sub``, ``email`` and ``role`` are kept as received; the auth gate's
    payload accessor is responsible for checking them.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    sub: str | None = Field(None, description="Subject (user ID)")
    email: str | None = Field(None, description="User email")
    role: str | None = Field(None, description="User role")
    iat: datetime = Field(..., description="Issued at time")
    exp: datetime = Field(..., description="Expiration time")


class RegisterRequest(BaseModel):
    """Registration request body."""

    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=8)

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, v: str) -> str:
        return _check_password_bytes(v)

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("full_name must not be blank")
        return v


class LoginRequest(BaseModel):
    """Login request body."""

    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, v: str) -> str:
        return _check_password_bytes(v)


class UserResponse(BaseModel):
    """Public view of a user account."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="User ID")
    full_name: str = Field(..., description="Display name")
    email: str = Field(..., description="User email")
    role: UserRole = Field(..., description="User role")


class LoginResponse(BaseModel):
    """Login response with the access token."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="Bearer", description="Token type")
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    user: UserResponse = Field(..., description="Authenticated user")
