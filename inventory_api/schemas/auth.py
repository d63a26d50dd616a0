import re
from datetime import datetime
from typing import Literal, Optional

from pydantic import ConfigDict, EmailStr, Field, field_validator

from inventory_api.schemas.common import CamelModel, RequestModel

USERNAME_PATTERN = r"^[A-Za-z0-9_]+$"
_PASSWORD_RULE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def _normalize_email(value):
    if value is None:
        return None
    return str(value).strip().lower()


class RegisterRequest(RequestModel):
    username: str = Field(min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    role: Literal["user", "admin"] = "user"

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value):
        return _normalize_email(value)

    @field_validator("password")
    @classmethod
    def password_strength(cls, value):
        if not _PASSWORD_RULE.match(value):
            raise ValueError(
                "Password must contain at least one lowercase letter, one uppercase letter, and one number"
            )
        return value


class LoginRequest(RequestModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value):
        return _normalize_email(value)


class ProfileUpdate(RequestModel):
    username: Optional[str] = Field(None, min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    email: Optional[EmailStr] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value):
        return _normalize_email(value)


class UserRead(CamelModel):
    id: int
    username: str
    email: str
    role: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


__all__ = ["LoginRequest", "ProfileUpdate", "RegisterRequest", "UserRead"]
