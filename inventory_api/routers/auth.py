from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from inventory_api.core.security import PasswordHasher, TokenService
from inventory_api.dependencies import get_current_user, get_db, get_password_hasher, get_token_service
from inventory_api.models.user import User
from inventory_api.schemas.auth import LoginRequest, ProfileUpdate, RegisterRequest, UserRead
from inventory_api.services.auth_service import authenticate_user, register_user, update_profile

router = APIRouter(prefix="/auth", tags=["Auth"])


def serialize_user(user: User) -> dict:
    return UserRead.model_validate(user).model_dump(by_alias=True, mode="json")


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
):
    user, token = register_user(db, hasher, tokens, payload)
    return {
        "status": "success",
        "message": "User registered successfully",
        "user": serialize_user(user),
        "token": token,
    }


@router.post("/login")
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
):
    user, token = authenticate_user(db, hasher, tokens, payload.email, payload.password)
    return {
        "status": "success",
        "message": "Login successful",
        "user": serialize_user(user),
        "token": token,
    }


@router.get("/profile")
def get_profile(current_user: User = Depends(get_current_user)):
    return {
        "status": "success",
        "message": "Profile retrieved successfully",
        "user": serialize_user(current_user),
    }


@router.put("/profile")
def put_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = update_profile(db, current_user, payload)
    return {
        "status": "success",
        "message": "Profile updated successfully",
        "user": serialize_user(user),
    }


__all__ = ["router"]
