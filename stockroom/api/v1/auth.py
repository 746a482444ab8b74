"""Auth endpoints and dependencies (get_current_identity, require_policy)."""

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.orm import Session

from stockroom.core.database import get_db
from stockroom.core.errors import AuthenticationError, ExpiredToken, InvalidToken
from stockroom.core.roles import ADMIN_ONLY, Policy, authorize
from stockroom.core.security import (
    TokenIdentity,
    issue_access_token,
    refresh_access_token,
    verify_access_token,
)
from stockroom.models.user import User
from stockroom.schemas.auth import (
    AdminCreateUserRequest,
    AuthResponse,
    ChangePasswordRequest,
    CurrentIdentity,
    Envelope,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserPublic,
    UserResponse,
)
from stockroom.services import users as user_service

logger = logging.getLogger(__name__)

router = APIRouter()
security = HTTPBearer(auto_error=False)


def _identity_for(user: User) -> TokenIdentity:
    return TokenIdentity(id=user.id, role=user.role, email=user.email)


def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> CurrentIdentity:
    """
    Dependency: require a valid Bearer JWT and return the caller's identity.

    Missing header, invalid token and expired token are logged separately but
    all produce the same 401. No database lookup: tokens stay valid until expiry.
    """
    if credentials is None:
        logger.debug("Rejected request: no bearer token")
        raise AuthenticationError("No token provided")
    try:
        identity = verify_access_token(credentials.credentials)
    except ExpiredToken:
        logger.debug("Rejected request: expired token")
        raise
    except InvalidToken:
        logger.debug("Rejected request: invalid token")
        raise
    return CurrentIdentity(id=identity.id, role=identity.role, email=identity.email)


def require_policy(policy: Policy) -> Callable[..., CurrentIdentity]:
    """Build a dependency that authenticates, then applies an RBAC policy (403 on denial)."""

    def dependency(
        identity: Annotated[CurrentIdentity, Depends(get_current_identity)],
    ) -> CurrentIdentity:
        authorize(identity.role, policy)
        return identity

    return dependency


require_admin = require_policy(ADMIN_ONLY)


async def admin_create_user_body(
    request: Request,
    _admin: Annotated[CurrentIdentity, Depends(require_admin)],
) -> AdminCreateUserRequest:
    """
    Parse the create-user body only after require_admin has passed, so a
    caller without the admin role gets 401/403 even for a malformed body.
    """
    raw = await request.body()
    try:
        return AdminCreateUserRequest.model_validate_json(raw)
    except SchemaValidationError as e:
        errors = [{**err, "loc": ("body", *err["loc"])} for err in e.errors()]
        raise RequestValidationError(errors) from e


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """Public self-registration. Returns a token so the client is logged in immediately."""
    user = user_service.create_user(
        db,
        name=body.name,
        email=body.email,
        password=body.password,
        role=body.role,
        department=body.department,
        position=body.position,
        phone_number=body.phone_number,
    )
    token = issue_access_token(_identity_for(user))
    return AuthResponse(
        message="User registered successfully",
        token=token,
        user=UserPublic.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """
    Authenticate with email and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <token>
    """
    user = user_service.authenticate(db, body.email, body.password)
    token = issue_access_token(_identity_for(user))
    return AuthResponse(
        message="Login successful",
        token=token,
        user=UserPublic.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
def me(
    identity: Annotated[CurrentIdentity, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Return the current user's profile."""
    user = user_service.get_user(db, identity.id)
    return UserResponse(user=UserPublic.model_validate(user))


@router.post(
    "/admin/create-user",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
def admin_create_user(
    body: Annotated[AdminCreateUserRequest, Depends(admin_create_user_body)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Create an account with any role (admin only)."""
    user = user_service.create_user(
        db,
        name=body.name,
        email=body.email,
        password=body.password,
        role=body.role,
        department=body.department,
        position=body.position,
        phone_number=body.phone_number,
    )
    return UserResponse(
        message="User created successfully",
        user=UserPublic.model_validate(user),
    )


@router.post("/change-password", response_model=Envelope)
def change_password(
    body: ChangePasswordRequest,
    identity: Annotated[CurrentIdentity, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> Envelope:
    """Change the caller's password. Previously issued tokens remain valid."""
    user = user_service.get_user(db, identity.id)
    user_service.change_password(db, user, body.current_password, body.new_password)
    return Envelope(message="Password updated successfully")


@router.post("/refresh-token", response_model=TokenResponse)
def refresh_token(
    identity: Annotated[CurrentIdentity, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """Re-issue a token with a fresh expiry; requires a currently valid token."""
    user = user_service.get_user(db, identity.id)
    token = refresh_access_token(_identity_for(user))
    return TokenResponse(message="Token refreshed successfully", token=token)
