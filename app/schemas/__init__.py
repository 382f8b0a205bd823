"""Pydantic request/response schemas."""

from app.schemas.auth import (
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    WelcomeResponse,
)
from app.schemas.common import CamelModel, MessageResponse
from app.schemas.health import HealthResponse
from app.schemas.image import (
    ImageListResponse,
    ImageOut,
    ImageUploadResponse,
    SortField,
    SortOrder,
)

__all__ = [
    "CamelModel",
    "ChangePasswordRequest",
    "CurrentUser",
    "HealthResponse",
    "ImageListResponse",
    "ImageOut",
    "ImageUploadResponse",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "SortField",
    "SortOrder",
    "TokenResponse",
    "WelcomeResponse",
]
