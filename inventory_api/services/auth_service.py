from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventory_api.core.constants import DEFAULT_ROLE, GENERIC_LOGIN_ERROR
from inventory_api.core.errors import AuthenticationError, ConflictError
from inventory_api.core.security import (
    INACTIVE_USER_MESSAGE,
    NO_TOKEN_MESSAGE,
    PasswordHasher,
    TokenService,
    get_bearer_token,
)
from inventory_api.models.user import User
from inventory_api.schemas.auth import ProfileUpdate, RegisterRequest

logger = logging.getLogger(__name__)

DISABLED_ACCOUNT_MESSAGE = "Your account has been disabled. Please contact administrator."


def find_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.execute(select(User).where(User.email == email.strip().lower())).scalars().first()


def _commit_user(db: Session, user: User, conflict_message: str) -> User:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(conflict_message) from exc
    db.refresh(user)
    return user


def register_user(
    db: Session,
    hasher: PasswordHasher,
    tokens: TokenService,
    payload: RegisterRequest,
) -> tuple[User, str]:
    existing = (
        db.execute(
            select(User).where(or_(User.email == payload.email, User.username == payload.username))
        )
        .scalars()
        .all()
    )
    if any(user.email == payload.email for user in existing):
        raise ConflictError("Email is already registered")
    if existing:
        raise ConflictError("Username is already taken")

    user = User(
        username=payload.username,
        email=payload.email,
        password_hash=hasher.hash(payload.password),
        role=payload.role or DEFAULT_ROLE,
        is_active=True,
    )
    db.add(user)
    _commit_user(db, user, "Username or email is already registered")
    logger.info("Registered user id=%s username=%s", user.id, user.username)
    return user, tokens.issue(user.id)


def authenticate_user(
    db: Session,
    hasher: PasswordHasher,
    tokens: TokenService,
    email: str,
    password: str,
) -> tuple[User, str]:
    user = find_user_by_email(db, email)
    if user is None:
        logger.warning("Login failed: unknown email")
        raise AuthenticationError(GENERIC_LOGIN_ERROR)
    if not user.is_active:
        logger.warning("Login rejected for disabled user id=%s", user.id)
        raise AuthenticationError(DISABLED_ACCOUNT_MESSAGE)
    if not hasher.verify(password, user.password_hash):
        logger.warning("Login failed: bad password for user id=%s", user.id)
        raise AuthenticationError(GENERIC_LOGIN_ERROR)
    return user, tokens.issue(user.id)


def _taken_by_other(db: Session, column, value, user_id: int) -> bool:
    found = db.execute(select(User.id).where(column == value, User.id != user_id)).first()
    return found is not None


def update_profile(db: Session, user: User, payload: ProfileUpdate) -> User:
    changes = {}
    if payload.email and payload.email != user.email:
        if _taken_by_other(db, User.email, payload.email, user.id):
            raise ConflictError("This email is already registered by another user")
        changes["email"] = payload.email
    if payload.username and payload.username != user.username:
        if _taken_by_other(db, User.username, payload.username, user.id):
            raise ConflictError("This username is already taken by another user")
        changes["username"] = payload.username

    if not changes:
        return user

    for field_name, value in changes.items():
        setattr(user, field_name, value)
    return _commit_user(db, user, "Username or email is already registered")


def resolve_bearer_user(db: Session, tokens: TokenService, authorization: Optional[str]) -> User:
    token = get_bearer_token(authorization)
    if not token:
        raise AuthenticationError(NO_TOKEN_MESSAGE)

    user_id = tokens.user_id_from(token)
    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise AuthenticationError(INACTIVE_USER_MESSAGE)
    return user


__all__ = [
    "DISABLED_ACCOUNT_MESSAGE",
    "authenticate_user",
    "find_user_by_email",
    "register_user",
    "resolve_bearer_user",
    "update_profile",
]
