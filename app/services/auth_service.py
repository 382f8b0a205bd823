"""Registration, login and password change over the users table."""

import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import (
    ConflictError,
    InternalError,
    InvalidInputError,
    NotFoundError,
    UnauthenticatedError,
)
from app.core.security import create_access_token, hash_password, verify_password
from app.models.user import User
from app.schemas.auth import ChangePasswordRequest, CurrentUser, LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

DUPLICATE_USER_MESSAGE = "User with this username or email already exists!"
INVALID_CREDENTIALS_MESSAGE = "Invalid username or password."


def register_user(db: Session, body: RegisterRequest) -> User:
    """
    Create a user with a hashed password.

    A username collision and an email collision are reported identically.
    Raises ConflictError on duplicates and InternalError on database failure.
    """
    try:
        existing = (
            db.query(User)
            .filter(or_(User.username == body.username, User.email == body.email))
            .first()
        )
    except SQLAlchemyError as e:
        logger.exception("Registration lookup failed")
        raise InternalError() from e
    if existing is not None:
        raise ConflictError(DUPLICATE_USER_MESSAGE)

    user = User(
        username=body.username,
        email=body.email,
        password_hash=hash_password(body.password),
        role=body.role.value,
    )
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError as e:
        # Lost a race with a concurrent registration for the same username/email.
        db.rollback()
        raise ConflictError(DUPLICATE_USER_MESSAGE) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Registration insert failed")
        raise InternalError() from e

    logger.info("Registered user id=%s role=%s", user.id, user.role)
    return user


def login_user(db: Session, body: LoginRequest) -> str:
    """Check credentials and return a signed access token carrying userId, username and role."""
    if not body.username or not body.password:
        logger.info("Login rejected: missing username or password")
        raise UnauthenticatedError(INVALID_CREDENTIALS_MESSAGE)

    try:
        user = db.query(User).filter(User.username == body.username.strip()).first()
    except SQLAlchemyError as e:
        logger.exception("Login lookup failed")
        raise InternalError() from e

    if user is None:
        logger.info("Login rejected: unknown username")
        raise UnauthenticatedError(INVALID_CREDENTIALS_MESSAGE)
    if not verify_password(body.password, user.password_hash):
        logger.info("Login rejected: wrong password for user id=%s", user.id)
        raise UnauthenticatedError(INVALID_CREDENTIALS_MESSAGE)

    return create_access_token(
        {"userId": user.id, "username": user.username, "role": user.role}
    )


def change_password(db: Session, current_user: CurrentUser, body: ChangePasswordRequest) -> None:
    """
    Replace the current user's password hash.

    Stops without writing when the new password equals the old one or the old
    password does not match the stored hash.
    """
    if body.old_password == body.new_password:
        raise InvalidInputError("New password must be different! Please try again.")

    try:
        user = db.get(User, current_user.id)
    except SQLAlchemyError as e:
        logger.exception("Password change lookup failed")
        raise InternalError() from e
    if user is None:
        raise NotFoundError("User not found!")

    if not verify_password(body.old_password, user.password_hash):
        logger.info("Password change rejected: wrong old password for user id=%s", user.id)
        raise UnauthenticatedError("Old password is not correct! Please try again.")

    user.password_hash = hash_password(body.new_password)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Password change update failed")
        raise InternalError() from e
    logger.info("Password changed for user id=%s", user.id)
