"""Client-side auth state machine: LOADING -> UNAUTHENTICATED <-> AUTHENTICATED."""

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from stockroom.client.api import AuthApiClient
from stockroom.client.errors import AuthClientError, InvalidCredential, InvalidEmail, WeakPassword
from stockroom.client.storage import KeyValueStorage

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_MIN_LEN = 6

# Storage keys
USER_KEY = "currentUser"
ROLE_KEY = "userRole"
USER_ID_KEY = "userId"
TOKEN_KEY = "authToken"
STORAGE_KEYS = (USER_KEY, ROLE_KEY, USER_ID_KEY, TOKEN_KEY)


class SessionStatus(str, Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class SessionUser:
    id: str
    email: str
    name: str | None = None

    @classmethod
    def from_payload(cls, user: dict[str, Any]) -> "SessionUser":
        return cls(id=str(user["id"]), email=user["email"], name=user.get("name"))


@dataclass(frozen=True)
class Session:
    """Immutable snapshot; user, role and token are set only when AUTHENTICATED."""

    status: SessionStatus
    user: SessionUser | None = None
    role: str | None = None
    token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED


LOADING = Session(SessionStatus.LOADING)
SIGNED_OUT = Session(SessionStatus.UNAUTHENTICATED)

Listener = Callable[[Session], None]


def _check_email(email: str) -> None:
    if not email or not EMAIL_RE.match(email.strip()):
        raise InvalidEmail("Invalid email format")


class SessionStore:
    """
    Holds the current Session, persists it through storage and notifies
    subscribers on every transition. Starts in LOADING until initialize().
    """

    def __init__(self, api: AuthApiClient, storage: KeyValueStorage) -> None:
        self._api = api
        self._storage = storage
        self._session = LOADING
        self._listeners: list[Listener] = []

    def get_session(self) -> Session:
        return self._session

    def subscribe(self, on_change: Listener) -> Callable[[], None]:
        """Register on_change; returns a function that unsubscribes it."""
        self._listeners.append(on_change)

        def unsubscribe() -> None:
            if on_change in self._listeners:
                self._listeners.remove(on_change)

        return unsubscribe

    def _set(self, session: Session) -> None:
        self._session = session
        for listener in list(self._listeners):
            listener(session)

    def _persist(self, session: Session) -> None:
        user = session.user
        self._storage.set(USER_KEY, json.dumps({"id": user.id, "email": user.email, "name": user.name}))
        self._storage.set(ROLE_KEY, session.role or "")
        self._storage.set(USER_ID_KEY, user.id)
        self._storage.set(TOKEN_KEY, session.token or "")

    def _clear_storage(self) -> None:
        for key in STORAGE_KEYS:
            self._storage.remove(key)

    def _sign_in(self, token: str, user: dict[str, Any]) -> Session:
        session = Session(
            SessionStatus.AUTHENTICATED,
            user=SessionUser.from_payload(user),
            role=user.get("role"),
            token=token,
        )
        self._persist(session)
        self._set(session)
        return session

    async def initialize(self) -> Session:
        """
        Restore a persisted session and confirm it with the server. Anything
        missing, unreadable or rejected clears storage and ends UNAUTHENTICATED.
        """
        token = self._storage.get(TOKEN_KEY)
        stored_user = self._storage.get(USER_KEY)
        if not token or not stored_user or not self._storage.get(USER_ID_KEY):
            self._clear_storage()
            self._set(SIGNED_OUT)
            return self._session

        try:
            json.loads(stored_user)
            body = await self._api.me(token)
            return self._sign_in(token, body["user"])
        except (AuthClientError, ValueError, KeyError, TypeError) as e:
            logger.warning("Could not restore session: %s", e)
            self._clear_storage()
            self._set(SIGNED_OUT)
            return self._session

    async def login(self, email: str, password: str) -> Session:
        """Resolve to AUTHENTICATED or raise InvalidEmail / InvalidCredential."""
        _check_email(email)
        if not password:
            raise InvalidCredential("Password is required")
        body = await self._api.login(email.strip(), password)
        return self._sign_in(body["token"], body["user"])

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        role: str | None = None,
        **profile: Any,
    ) -> Session:
        """
        Create an account and sign in. Raises InvalidEmail, WeakPassword or
        EmailInUse; profile keys (department, position, phoneNumber) pass through.
        """
        _check_email(email)
        if not password or len(password) < PASSWORD_MIN_LEN:
            raise WeakPassword("Password must be at least 6 characters long")
        fields: dict[str, Any] = {"name": name, "email": email.strip(), "password": password, **profile}
        if role:
            fields["role"] = role
        body = await self._api.register(fields)
        return self._sign_in(body["token"], body["user"])

    async def logout(self) -> Session:
        """Forget the session locally; server tokens are stateless and not revoked."""
        self._clear_storage()
        self._set(SIGNED_OUT)
        return self._session
