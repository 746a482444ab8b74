"""Async HTTP client for the auth endpoints."""

import logging
from typing import Any

import httpx

from stockroom.client.errors import (
    AuthClientError,
    EmailInUse,
    InvalidCredential,
    InvalidEmail,
    WeakPassword,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 30.0


def _error_for(response: httpx.Response, on_unauthorized: type[AuthClientError]) -> AuthClientError:
    """Map an error envelope to a typed client error."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    message = body.get("message") if isinstance(body, dict) else None
    details = " ".join(body.get("errors") or []) if isinstance(body, dict) else ""
    message = message or response.reason_phrase
    status = response.status_code

    if status == 401:
        return on_unauthorized(message, status)
    if status == 409:
        return EmailInUse(message, status)
    if status == 400:
        text = f"{message} {details}".lower()
        if "email" in text:
            return InvalidEmail(message, status)
        if "password" in text:
            return WeakPassword(message, status)
    return AuthClientError(message, status)


class AuthApiClient:
    """
    Thin wrapper over the /auth endpoints. Returns decoded JSON envelopes and
    raises AuthClientError subclasses on failure.

    transport is injectable (e.g. httpx.MockTransport or httpx.ASGITransport).
    """

    def __init__(
        self,
        base_url: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT_SEC,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        self._timeout = timeout

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        json: dict[str, Any] | None = None,
        on_unauthorized: type[AuthClientError] = AuthClientError,
    ) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.request(method, url, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Auth request %s %s failed: %s", method, path, e)
            raise AuthClientError(f"Auth server unreachable: {e}") from e

        if response.is_success:
            return response.json()
        raise _error_for(response, on_unauthorized)

    async def login(self, email: str, password: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/auth/login",
            json={"email": email, "password": password},
            on_unauthorized=InvalidCredential,
        )

    async def register(self, fields: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/auth/register", json=fields)

    async def me(self, token: str) -> dict[str, Any]:
        return await self._request("GET", "/auth/me", token=token)

    async def refresh_token(self, token: str) -> dict[str, Any]:
        return await self._request("POST", "/auth/refresh-token", token=token)

    async def change_password(self, token: str, current_password: str, new_password: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/auth/change-password",
            token=token,
            json={"currentPassword": current_password, "newPassword": new_password},
            on_unauthorized=InvalidCredential,
        )

    async def create_user(self, token: str, fields: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/auth/admin/create-user", token=token, json=fields)
