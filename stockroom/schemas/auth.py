"""Request/response schemas for auth and user endpoints."""

import re
from datetime import datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from stockroom.core.errors import WeakCredential
from stockroom.core.roles import DEFAULT_ROLE, Role
from stockroom.core.security import check_password_strength

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[+]?[\d\s\-()]{10,}$")

NAME_MIN_LEN = 2
NAME_MAX_LEN = 50
PROFILE_FIELD_MAX_LEN = 50


def _validate_email(value: str) -> str:
    email = value.strip().lower()
    if not EMAIL_RE.match(email):
        raise ValueError("Invalid email format")
    return email


def _validate_password(value: str) -> str:
    try:
        check_password_strength(value)
    except WeakCredential as e:
        raise ValueError(e.message) from e
    return value


def _validate_name(value: str) -> str:
    name = value.strip()
    if len(name) < NAME_MIN_LEN:
        raise ValueError(f"Name must be at least {NAME_MIN_LEN} characters long")
    if len(name) > NAME_MAX_LEN:
        raise ValueError(f"Name cannot exceed {NAME_MAX_LEN} characters")
    return name


def _validate_phone(value: str) -> str | None:
    phone = value.strip()
    if not phone:
        return None
    if not PHONE_RE.match(phone):
        raise ValueError("Please provide a valid phone number")
    return phone


def _validate_profile_field(value: str) -> str | None:
    value = value.strip()
    if not value:
        return None
    if len(value) > PROFILE_FIELD_MAX_LEN:
        raise ValueError(f"Value cannot exceed {PROFILE_FIELD_MAX_LEN} characters")
    return value


Email = Annotated[str, AfterValidator(_validate_email)]
Password = Annotated[str, AfterValidator(_validate_password)]
Name = Annotated[str, AfterValidator(_validate_name)]
Phone = Annotated[str, AfterValidator(_validate_phone)]
ProfileField = Annotated[str, AfterValidator(_validate_profile_field)]


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class LoginRequest(CamelModel):
    """Credentials for login. Only presence is checked; a mismatch is a 401."""

    email: Email = Field(..., description="Account email")
    password: str = Field(..., min_length=1, description="Password")


class RegisterRequest(CamelModel):
    """Public self-registration. role defaults to 'user'."""

    name: Name
    email: Email
    password: Password
    role: Role = DEFAULT_ROLE
    department: ProfileField | None = None
    position: ProfileField | None = None
    phone_number: Phone | None = None

    @field_validator("role", mode="before")
    @classmethod
    def default_empty_role(cls, v: object) -> object:
        return DEFAULT_ROLE if v in (None, "") else v


class AdminCreateUserRequest(CamelModel):
    """Admin-created account; role is mandatory."""

    name: Name
    email: Email
    password: Password
    role: Role
    department: ProfileField | None = None
    position: ProfileField | None = None
    phone_number: Phone | None = None


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: Password


class UserUpdateRequest(CamelModel):
    """Partial update (admin). Only fields present in the body are applied."""

    name: Name | None = None
    email: Email | None = None
    password: Password | None = None
    role: Role | None = None
    department: ProfileField | None = None
    position: ProfileField | None = None
    phone_number: Phone | None = None
    is_active: bool | None = None
    email_verified: bool | None = None
    profile_picture: str | None = None
    timezone: str | None = Field(default=None, min_length=1, max_length=64)
    language: Literal["fr", "en", "es"] | None = None


class UserPublic(CamelModel):
    """Externally visible user representation (never includes the password hash)."""

    id: str
    name: str
    email: str
    role: str
    department: str | None = None
    position: str | None = None
    phone_number: str | None = None
    is_active: bool
    email_verified: bool
    profile_picture: str | None = None
    timezone: str
    language: str
    last_login: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Envelope(CamelModel):
    """Every response carries success and an optional message."""

    success: bool = True
    message: str | None = None


class AuthResponse(Envelope):
    """Token plus user, returned by login and register."""

    token: str
    user: UserPublic


class UserResponse(Envelope):
    user: UserPublic


class UsersListResponse(Envelope):
    """Response for GET /users (admin only)."""

    users: list[UserPublic]


class TokenResponse(Envelope):
    token: str


class ErrorResponse(Envelope):
    success: bool = False
    errors: list[str] | None = None


class CurrentIdentity(BaseModel):
    """Authenticated caller (from the bearer token) for dependency injection."""

    id: str
    role: str
    email: str
