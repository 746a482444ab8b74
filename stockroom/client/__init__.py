"""Client-side session handling: auth API client, session store and route guards."""

from stockroom.client.api import AuthApiClient
from stockroom.client.errors import (
    AuthClientError,
    EmailInUse,
    InvalidCredential,
    InvalidEmail,
    WeakPassword,
    describe_error,
)
from stockroom.client.guard import GuardDecision, GuardOutcome, guard_public_route, guard_route
from stockroom.client.session import Session, SessionStatus, SessionStore, SessionUser
from stockroom.client.storage import FileStorage, KeyValueStorage, MemoryStorage

__all__ = [
    "AuthApiClient",
    "AuthClientError",
    "EmailInUse",
    "FileStorage",
    "GuardDecision",
    "GuardOutcome",
    "InvalidCredential",
    "InvalidEmail",
    "KeyValueStorage",
    "MemoryStorage",
    "Session",
    "SessionStatus",
    "SessionStore",
    "SessionUser",
    "WeakPassword",
    "describe_error",
    "guard_public_route",
    "guard_route",
]
