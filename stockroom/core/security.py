"""Password hashing and JWT creation/verification for authentication."""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from stockroom.core.config import settings
from stockroom.core.errors import ExpiredToken, HashingError, InvalidToken, WeakCredential

# Min/max lengths for password validation. bcrypt only reads the first 72 bytes.
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128

REQUIRED_CLAIMS = ("sub", "role", "email", "exp", "iat")


@dataclass(frozen=True)
class TokenIdentity:
    """Identity carried inside an access token."""

    id: str
    role: str
    email: str


def check_password_strength(plain_password: str | None) -> None:
    """Raise WeakCredential unless the password meets the minimum strength."""
    if not plain_password or len(plain_password) < PASSWORD_MIN_LEN:
        raise WeakCredential()
    if len(plain_password) > PASSWORD_MAX_LEN:
        raise WeakCredential(f"Password cannot exceed {PASSWORD_MAX_LEN} characters")


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
        return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")
    except (ValueError, TypeError) as e:
        raise HashingError("Error hashing password", cause=e) from e


def verify_password(plain_password: str, hashed: str) -> bool:
    """
    Verify a plain password against a stored hash.

    Returns False on mismatch. Raises HashingError if the stored hash is unusable.
    """
    pw_bytes = (plain_password or "").encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError) as e:
        raise HashingError(cause=e) from e


def is_password_hash(value: str | None) -> bool:
    """True if value looks like a bcrypt hash ($2a$, $2b$ or $2y$, 60 chars)."""
    return bool(value) and len(value) == 60 and value[:4] in ("$2a$", "$2b$", "$2y$")


def issue_access_token(identity: TokenIdentity, now: datetime | None = None) -> str:
    """Create a signed JWT carrying id, role and email; expires after JWT_EXPIRE_MINUTES."""
    now = now or datetime.now(UTC)
    expire = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": identity.id,
        "id": identity.id,
        "role": identity.role,
        "email": identity.email,
        "iat": now,
        "exp": expire,
        # Tokens minted within the same second must still differ.
        "jti": uuid.uuid4().hex,
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


def verify_access_token(token: str) -> TokenIdentity:
    """
    Decode and validate a JWT and return its identity.
    Raises ExpiredToken past expiry and InvalidToken for anything else wrong.
    No revocation check: a token stays valid until it expires.
    """
    secret = settings.JWT_SECRET.get_secret_value()
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": list(REQUIRED_CLAIMS)},
        )
    except jwt.ExpiredSignatureError as e:
        raise ExpiredToken(cause=e) from e
    except jwt.PyJWTError as e:
        raise InvalidToken(cause=e) from e

    sub, role, email = payload.get("sub"), payload.get("role"), payload.get("email")
    if not all(isinstance(v, str) and v for v in (sub, role, email)):
        raise InvalidToken("Invalid token payload")
    return TokenIdentity(id=sub, role=role, email=email)


def refresh_access_token(identity: TokenIdentity) -> str:
    """
    Re-issue a token with a fresh expiry.

    identity must come from a token that verify_access_token accepted; an expired
    token cannot be refreshed.
    """
    return issue_access_token(identity)
