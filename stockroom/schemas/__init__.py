"""Pydantic request/response schemas."""

from stockroom.schemas.auth import (
    AdminCreateUserRequest,
    AuthResponse,
    ChangePasswordRequest,
    CurrentIdentity,
    Envelope,
    ErrorResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserPublic,
    UserResponse,
    UsersListResponse,
    UserUpdateRequest,
)
from stockroom.schemas.health import HealthResponse

__all__ = [
    "AdminCreateUserRequest",
    "AuthResponse",
    "ChangePasswordRequest",
    "CurrentIdentity",
    "Envelope",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "RegisterRequest",
    "TokenResponse",
    "UserPublic",
    "UserResponse",
    "UsersListResponse",
    "UserUpdateRequest",
]
