from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from inventory_api.core.errors import AuthorizationError
from inventory_api.core.security import PasswordHasher, TokenService
from inventory_api.database.session import get_db
from inventory_api.models.user import User
from inventory_api.services.auth_service import resolve_bearer_user


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    return resolve_bearer_user(db, tokens, authorization)


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise AuthorizationError("Access denied. Admin privileges required.")
    return user


__all__ = [
    "get_current_user",
    "get_db",
    "get_password_hasher",
    "get_token_service",
    "require_admin",
]
