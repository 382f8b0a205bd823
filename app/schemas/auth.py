"""Request/response schemas for auth endpoints."""

from pydantic import EmailStr, Field, field_validator

from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from app.models.user import Role
from app.schemas.common import CamelModel, MessageResponse


class RegisterRequest(CamelModel):
    """New account details. role defaults to 'user'."""

    username: str = Field(..., max_length=USERNAME_MAX_LEN, description="Username")
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
        description="Password",
    )
    role: Role = Field(default=Role.USER, description="user or admin")

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < USERNAME_MIN_LEN:
            raise ValueError("username must not be empty")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v


class LoginRequest(CamelModel):
    """Credentials for login. Missing fields are rejected as bad credentials, not bad input."""

    username: str | None = Field(default=None, description="Username")
    password: str | None = Field(default=None, description="Password")


class ChangePasswordRequest(CamelModel):
    old_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class TokenResponse(MessageResponse):
    """JWT access token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")


class CurrentUser(CamelModel):
    """Authenticated identity (id, username, role) decoded from the bearer token."""

    id: int
    username: str
    role: Role


class WelcomeResponse(MessageResponse):
    user: CurrentUser
