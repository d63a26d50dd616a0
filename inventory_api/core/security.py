from __future__ import annotations

import logging
import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from inventory_api.config import Settings
from inventory_api.core.errors import AuthenticationError

logger = logging.getLogger(__name__)

NO_TOKEN_MESSAGE = "Access denied. No token provided."
INVALID_TOKEN_MESSAGE = "Invalid token."
EXPIRED_TOKEN_MESSAGE = "Token expired."
INACTIVE_USER_MESSAGE = "Invalid token. User not found or inactive."

_BCRYPT_MAX_BYTES = 72
_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


def parse_duration(value: str) -> timedelta:
    """Parse ``"7d"``, ``"12h"``, ``"30m"``, ``"45s"`` or bare seconds."""
    match = _DURATION_PATTERN.match(str(value))
    if not match:
        raise ValueError("Invalid duration: {!r}".format(value))
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit.lower()]: int(amount)})


def get_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class PasswordHasher:
    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")

    def verify(self, password: str, password_hash: Optional[str]) -> bool:
        if not password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
        except ValueError:
            return False


class TokenService:
    def __init__(self, secret: str, algorithm: str = "HS256", expires_in: timedelta = timedelta(days=7)):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_in = expires_in

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        secret = settings.JWT_SECRET
        if not secret:
            if settings.is_production:
                raise RuntimeError("JWT_SECRET must be set in production.")
            logger.warning("JWT_SECRET is not set; using an ephemeral secret for this process.")
            secret = secrets.token_urlsafe(32)
        return cls(
            secret=secret,
            algorithm=settings.JWT_ALGORITHM,
            expires_in=parse_duration(settings.JWT_EXPIRES_IN),
        )

    def issue(self, user_id: int, *, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + self.expires_in,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> dict:
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError(EXPIRED_TOKEN_MESSAGE) from exc
        except jwt.PyJWTError as exc:
            raise AuthenticationError(INVALID_TOKEN_MESSAGE) from exc

    def user_id_from(self, token: str) -> int:
        payload = self.decode(token)
        try:
            return int(payload["sub"])
        except (TypeError, ValueError) as exc:
            raise AuthenticationError(INVALID_TOKEN_MESSAGE) from exc


__all__ = [
    "EXPIRED_TOKEN_MESSAGE",
    "INACTIVE_USER_MESSAGE",
    "INVALID_TOKEN_MESSAGE",
    "NO_TOKEN_MESSAGE",
    "PasswordHasher",
    "TokenService",
    "get_bearer_token",
    "parse_duration",
]
