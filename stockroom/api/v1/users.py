"""Admin user management: list users and apply partial updates."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from stockroom.api.v1.auth import require_admin
from stockroom.core.database import get_db
from stockroom.schemas.auth import (
    CurrentIdentity,
    UserPublic,
    UserResponse,
    UsersListResponse,
    UserUpdateRequest,
)
from stockroom.services import users as user_service

router = APIRouter()


@router.get("", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[CurrentIdentity, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all users (admin only), newest first."""
    users = user_service.list_users(db)
    return UsersListResponse(users=[UserPublic.model_validate(u) for u in users])


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    body: UserUpdateRequest,
    _admin: Annotated[CurrentIdentity, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """
    Partially update a user (admin only). Only fields present in the body change;
    a password in the body is validated and hashed like on creation.
    """
    user = user_service.get_user(db, user_id)
    changes = body.model_dump(exclude_unset=True)
    user = user_service.update_user(db, user, changes)
    return UserResponse(message="User updated successfully", user=UserPublic.model_validate(user))
