"""User lifecycle: creation, partial update, authentication and password changes.

Every path that accepts a plaintext password goes through set_password, so
strength validation and hashing happen in exactly one place.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stockroom.core.errors import (
    AuthenticationError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from stockroom.core.roles import DEFAULT_ROLE, Role
from stockroom.core.security import check_password_strength, hash_password, verify_password
from stockroom.models.user import User

logger = logging.getLogger(__name__)

# Fields a partial update may touch besides the password.
UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "email",
        "role",
        "department",
        "position",
        "phone_number",
        "is_active",
        "email_verified",
        "profile_picture",
        "timezone",
        "language",
    }
)

# Columns that cannot be cleared to null.
REQUIRED_FIELDS = frozenset(
    {"name", "email", "password", "role", "is_active", "email_verified", "timezone", "language"}
)


def set_password(user: User, plain_password: str) -> None:
    """Validate strength and store only the bcrypt hash on user. Raises WeakCredential."""
    check_password_strength(plain_password)
    user.password_hash = hash_password(plain_password)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user(db: Session, user_id: str) -> User:
    """Return the user with user_id or raise NotFoundError."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.desc(), User.email).all()


def _is_email_conflict(error: IntegrityError) -> bool:
    # sqlite: "UNIQUE constraint failed: users.email"
    # postgres: duplicate key value violates unique constraint "ix_users_email"
    detail = str(error.orig).lower()
    return ("unique" in detail or "duplicate" in detail) and "email" in detail


def _commit_or_conflict(db: Session) -> None:
    """Commit; a unique-email violation becomes ConflictError, any other integrity error InternalError."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if _is_email_conflict(e):
            raise ConflictError(cause=e) from e
        raise InternalError("Integrity error while saving user", cause=e) from e


def create_user(
    db: Session,
    *,
    name: str,
    email: str,
    password: str,
    role: Role | str = DEFAULT_ROLE,
    department: str | None = None,
    position: str | None = None,
    phone_number: str | None = None,
) -> User:
    """
    Create and persist a user with a hashed password.

    Raises WeakCredential before any hashing, ConflictError if the email is taken.
    The pre-check is advisory; the unique index decides concurrent races.
    """
    check_password_strength(password)
    if get_user_by_email(db, email) is not None:
        raise ConflictError()

    user = User(
        name=name,
        email=normalize_email(email),
        role=Role(role).value,
        department=department,
        position=position,
        phone_number=phone_number,
    )
    set_password(user, password)
    db.add(user)
    _commit_or_conflict(db)
    db.refresh(user)
    logger.info("Created user %s with role %s", user.email, user.role)
    return user


def update_user(db: Session, user: User, changes: dict[str, Any]) -> User:
    """
    Apply a partial update. A "password" key is hashed via set_password.
    Raises ValidationError for unknown fields or nulls in required fields.
    """
    unknown = set(changes) - UPDATABLE_FIELDS - {"password"}
    if unknown:
        raise ValidationError(errors=[f"Unknown field: {f}" for f in sorted(unknown)])
    nulled = sorted(f for f, v in changes.items() if v is None and f in REQUIRED_FIELDS)
    if nulled:
        raise ValidationError(errors=[f"{f} cannot be null" for f in nulled])

    if "password" in changes:
        set_password(user, changes["password"])
    for field, value in changes.items():
        if field == "password":
            continue
        if field == "role" and value is not None:
            value = Role(value).value
        if field == "email" and value is not None:
            value = normalize_email(value)
        setattr(user, field, value)

    _commit_or_conflict(db)
    db.refresh(user)
    logger.info("Updated user %s (fields: %s)", user.email, ", ".join(sorted(changes)))
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """
    Check credentials and stamp last_login. Raises AuthenticationError on unknown
    email or wrong password (same message for both).
    """
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    user.last_login = datetime.now(UTC)
    db.commit()
    db.refresh(user)
    logger.info("User %s logged in at %s", user.email, user.last_login.isoformat())
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    """Replace the password after verifying the current one. Raises AuthenticationError on mismatch."""
    if not verify_password(current_password, user.password_hash):
        raise AuthenticationError("Current password is incorrect")
    set_password(user, new_password)
    db.commit()
    logger.info("Password changed for user %s", user.email)
