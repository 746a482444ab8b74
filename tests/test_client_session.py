"""Tests for the client session store and route guards, driven against the real app over ASGI."""

import asyncio
import json
import os
import tempfile
import unittest

import httpx

from stockroom.client.api import AuthApiClient
from stockroom.client.errors import (
    AuthClientError,
    EmailInUse,
    InvalidCredential,
    InvalidEmail,
    WeakPassword,
    describe_error,
)
from stockroom.client.guard import GuardOutcome, guard_public_route, guard_route
from stockroom.client.session import (
    LOADING,
    ROLE_KEY,
    SIGNED_OUT,
    TOKEN_KEY,
    USER_ID_KEY,
    USER_KEY,
    Session,
    SessionStatus,
    SessionStore,
    SessionUser,
)
from stockroom.client.storage import FileStorage, MemoryStorage
from stockroom.core.config import settings
from stockroom.core.database import engine
from stockroom.main import app
from stockroom.models import Base

BASE_URL = f"http://testserver{settings.API_V1_PREFIX}"


def _api() -> AuthApiClient:
    return AuthApiClient(BASE_URL, transport=httpx.ASGITransport(app=app))


def _signed_in(role: str) -> Session:
    return Session(
        SessionStatus.AUTHENTICATED,
        user=SessionUser(id="u-1", email="a@x.com"),
        role=role,
        token="t",
    )


class SessionTestCase(unittest.TestCase):
    def setUp(self) -> None:
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        self.storage = MemoryStorage()
        self.store = SessionStore(_api(), self.storage)


class TestSessionLifecycle(SessionTestCase):
    def test_starts_loading(self) -> None:
        self.assertIs(self.store.get_session().status, SessionStatus.LOADING)

    def test_initialize_without_persisted_session(self) -> None:
        session = asyncio.run(self.store.initialize())
        self.assertIs(session.status, SessionStatus.UNAUTHENTICATED)

    def test_register_then_logout(self) -> None:
        seen: list[SessionStatus] = []
        self.store.subscribe(lambda s: seen.append(s.status))

        session = asyncio.run(self.store.register("Alice", "a@x.com", "secret1", department="IT"))
        self.assertTrue(session.is_authenticated)
        self.assertEqual(session.role, "user")
        self.assertEqual(session.user.email, "a@x.com")
        self.assertEqual(self.storage.get(ROLE_KEY), "user")
        self.assertEqual(self.storage.get(TOKEN_KEY), session.token)
        self.assertEqual(json.loads(self.storage.get(USER_KEY))["email"], "a@x.com")

        session = asyncio.run(self.store.logout())
        self.assertIs(session.status, SessionStatus.UNAUTHENTICATED)
        for key in (USER_KEY, ROLE_KEY, USER_ID_KEY, TOKEN_KEY):
            self.assertIsNone(self.storage.get(key))
        self.assertEqual(
            seen, [SessionStatus.AUTHENTICATED, SessionStatus.UNAUTHENTICATED]
        )

    def test_login_and_restore_in_new_store(self) -> None:
        asyncio.run(self.store.register("Alice", "a@x.com", "secret1", role="manager"))
        asyncio.run(self.store.logout())
        session = asyncio.run(self.store.login("a@x.com", "secret1"))
        self.assertEqual(session.role, "manager")

        restored = SessionStore(_api(), self.storage)
        session = asyncio.run(restored.initialize())
        self.assertTrue(session.is_authenticated)
        self.assertEqual(session.user.name, "Alice")
        self.assertEqual(session.role, "manager")

    def test_restore_with_rejected_token_clears_storage(self) -> None:
        self.storage.set(USER_KEY, json.dumps({"id": "u-1", "email": "a@x.com"}))
        self.storage.set(ROLE_KEY, "admin")
        self.storage.set(USER_ID_KEY, "u-1")
        self.storage.set(TOKEN_KEY, "forged-token")
        session = asyncio.run(self.store.initialize())
        self.assertIs(session.status, SessionStatus.UNAUTHENTICATED)
        self.assertIsNone(self.storage.get(TOKEN_KEY))
        self.assertIsNone(self.storage.get(ROLE_KEY))

    def test_unsubscribe(self) -> None:
        calls: list[Session] = []
        unsubscribe = self.store.subscribe(calls.append)
        unsubscribe()
        asyncio.run(self.store.initialize())
        self.assertEqual(calls, [])


class TestSessionErrors(SessionTestCase):
    def test_invalid_email_rejected_locally(self) -> None:
        with self.assertRaises(InvalidEmail):
            asyncio.run(self.store.login("not-an-email", "secret1"))
        with self.assertRaises(InvalidEmail):
            asyncio.run(self.store.register("Alice", "nope", "secret1"))

    def test_missing_or_short_password(self) -> None:
        with self.assertRaises(InvalidCredential):
            asyncio.run(self.store.login("a@x.com", ""))
        with self.assertRaises(WeakPassword):
            asyncio.run(self.store.register("Alice", "a@x.com", "123"))

    def test_wrong_credentials(self) -> None:
        asyncio.run(self.store.register("Alice", "a@x.com", "secret1"))
        asyncio.run(self.store.logout())
        with self.assertRaises(InvalidCredential) as ctx:
            asyncio.run(self.store.login("a@x.com", "wrong"))
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertIs(self.store.get_session().status, SessionStatus.UNAUTHENTICATED)

    def test_email_in_use(self) -> None:
        asyncio.run(self.store.register("Alice", "a@x.com", "secret1"))
        other = SessionStore(_api(), MemoryStorage())
        with self.assertRaises(EmailInUse):
            asyncio.run(other.register("Alicia", "a@x.com", "secret1"))

    def test_server_validation_error_maps_to_typed_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400,
                json={
                    "success": False,
                    "message": "Validation error",
                    "errors": ["Invalid email format"],
                },
            )

        api = AuthApiClient(BASE_URL, transport=httpx.MockTransport(handler))
        with self.assertRaises(InvalidEmail):
            asyncio.run(SessionStore(api, MemoryStorage()).register("Alice", "a@x.com", "secret1"))

    def test_network_failure_is_generic_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        api = AuthApiClient(BASE_URL, transport=httpx.MockTransport(handler))
        with self.assertRaises(AuthClientError) as ctx:
            asyncio.run(SessionStore(api, MemoryStorage()).login("a@x.com", "secret1"))
        self.assertEqual(ctx.exception.code, "auth/unknown")


class TestDescribeError(unittest.TestCase):
    def test_known_codes_are_localized(self) -> None:
        self.assertEqual(describe_error(EmailInUse()), "Cet e-mail est déjà utilisé.")
        self.assertEqual(describe_error(EmailInUse(), "en"), "This email is already in use.")
        self.assertEqual(describe_error(InvalidCredential(), "en"), "Invalid email or password.")

    def test_unknown_codes_fall_back(self) -> None:
        self.assertEqual(describe_error(AuthClientError("boom")), "Échec de l'opération. Veuillez réessayer.")
        self.assertEqual(describe_error(RuntimeError("x"), "en"), "Something went wrong. Please try again.")
        self.assertEqual(describe_error(WeakPassword(), "de"), describe_error(WeakPassword(), "fr"))


class TestGuardRoute(unittest.TestCase):
    def test_loading(self) -> None:
        self.assertIs(guard_route(LOADING, "/users").outcome, GuardOutcome.LOADING)

    def test_unauthenticated_redirects_with_origin(self) -> None:
        decision = guard_route(SIGNED_OUT, "/materials")
        self.assertIs(decision.outcome, GuardOutcome.REDIRECT)
        self.assertEqual(decision.redirect_to, "/login")
        self.assertEqual(decision.from_path, "/materials")

    def test_role_not_in_allowed_set_is_denied(self) -> None:
        for role in ("user", "support", "manager"):
            decision = guard_route(_signed_in(role), "/users")
            self.assertIs(decision.outcome, GuardOutcome.DENIED)
            self.assertEqual(decision.required_roles, ["admin"])

    def test_allowed(self) -> None:
        for path in ("/", "/materials", "/categories"):
            for role in ("user", "support", "manager", "admin"):
                self.assertIs(guard_route(_signed_in(role), path).outcome, GuardOutcome.ALLOW)
        self.assertIs(guard_route(_signed_in("admin"), "/roles").outcome, GuardOutcome.ALLOW)

    def test_unknown_role_is_denied_everywhere(self) -> None:
        self.assertIs(guard_route(_signed_in("guest"), "/").outcome, GuardOutcome.DENIED)

    def test_unknown_path(self) -> None:
        self.assertIs(guard_route(_signed_in("admin"), "/nowhere").outcome, GuardOutcome.NOT_FOUND)


class TestGuardPublicRoute(unittest.TestCase):
    def test_signed_out_sees_login(self) -> None:
        self.assertIs(guard_public_route(SIGNED_OUT).outcome, GuardOutcome.ALLOW)

    def test_signed_in_returns_to_origin_or_home(self) -> None:
        decision = guard_public_route(_signed_in("user"), "/materials")
        self.assertEqual((decision.outcome, decision.redirect_to), (GuardOutcome.REDIRECT, "/materials"))
        self.assertEqual(guard_public_route(_signed_in("user")).redirect_to, "/")
        self.assertEqual(guard_public_route(_signed_in("user"), "/login").redirect_to, "/")


class TestFileStorage(unittest.TestCase):
    def test_persists_across_instances(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "nested", "session.json")
            FileStorage(path).set(TOKEN_KEY, "abc")
            self.assertEqual(FileStorage(path).get(TOKEN_KEY), "abc")
            FileStorage(path).remove(TOKEN_KEY)
            self.assertIsNone(FileStorage(path).get(TOKEN_KEY))

    def test_corrupt_file_reads_as_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "session.json")
            with open(path, "w", encoding="utf-8") as fh:
                fh.write("{not json")
            self.assertIsNone(FileStorage(path).get(TOKEN_KEY))


if __name__ == "__main__":
    unittest.main()
