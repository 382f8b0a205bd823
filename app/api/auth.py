"""Register/login/change-password routes and the auth dependencies (get_current_user, require_role)."""

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.errors import ForbiddenError, UnauthenticatedError
from app.core.security import InvalidTokenError, decode_access_token
from app.models.user import Role
from app.schemas.auth import (
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
)
from app.schemas.common import MessageResponse
from app.services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter()
security = HTTPBearer(auto_error=False)

NO_TOKEN_MESSAGE = "Access denied. No token provided. Please login to continue!"
INVALID_TOKEN_MESSAGE = "Access denied. Invalid or expired token. Please login again!"


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> CurrentUser:
    """
    Dependency: require a valid Bearer JWT and return the identity it carries.

    Stateless: the token's signature and expiry decide; the database is not consulted.
    Raises 401 if the token is missing, invalid, expired, or lacks identity claims.
    """
    if credentials is None or not credentials.credentials:
        logger.debug("Request rejected: no bearer token")
        raise UnauthenticatedError(NO_TOKEN_MESSAGE)
    try:
        payload = decode_access_token(credentials.credentials)
    except InvalidTokenError:
        logger.debug("Request rejected: token failed verification")
        raise UnauthenticatedError(INVALID_TOKEN_MESSAGE)
    try:
        return CurrentUser(
            id=payload.get("userId"),
            username=payload.get("username"),
            role=payload.get("role"),
        )
    except ValidationError:
        logger.debug("Request rejected: token missing identity claims")
        raise UnauthenticatedError(INVALID_TOKEN_MESSAGE)


def require_role(role: Role) -> Callable[[CurrentUser], CurrentUser]:
    """Build a dependency that runs after get_current_user and raises 403 unless the user holds role."""

    def check_role(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        if current_user.role != role:
            logger.info(
                "User id=%s with role %s refused; %s required",
                current_user.id,
                current_user.role.value,
                role.value,
            )
            raise ForbiddenError(f"Access denied! {role.value.capitalize()} rights required.")
        return current_user

    return check_role


require_admin = require_role(Role.ADMIN)


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Create an account. The response never contains password data."""
    user = auth_service.register_user(db, body)
    return MessageResponse(
        message=f"User with username {user.username} and email {user.email} registered successfully!",
    )


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """
    Authenticate with username and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <accessToken>
    """
    token = auth_service.login_user(db, body)
    return TokenResponse(message="Logged in successfully!", access_token=token)


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Change the authenticated user's password; oldPassword must match the stored one."""
    auth_service.change_password(db, current_user, body)
    return MessageResponse(message="Password changed successfully!")
