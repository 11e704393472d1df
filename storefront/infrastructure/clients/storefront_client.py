"""Async HTTP client for the storefront auth API.

Tokens returned by signup/login/refresh are written to every configured
storage and attached to each outgoing request. A 401 on any other endpoint
triggers one shared refresh; concurrent callers wait on the same in-flight
refresh instead of starting their own, and each original request is replayed
at most once.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable

import httpx

from .token_storage import StoredTokens, TokenStorageSet


logger = logging.getLogger(__name__)

SIGNUP_PATH = "/auth/signup"
LOGIN_PATH = "/auth/login"
LOGOUT_PATH = "/auth/logout"
REFRESH_PATH = "/auth/refresh-token"
PROFILE_PATH = "/auth/profile"

ACCESS_HEADER = "Authorization"
REFRESH_HEADER = "X-Refresh-Token"

_NO_REFRESH_PATHS = {SIGNUP_PATH, LOGIN_PATH, REFRESH_PATH}
_BODY_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


class SessionExpiredError(RuntimeError):
    pass


class StorefrontClient:
    def __init__(
        self,
        *,
        base_url: str,
        storage: TokenStorageSet,
        on_logout: Callable[[], Awaitable[None] | None] | None = None,
        degraded_body_tokens: bool = False,
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._storage = storage
        self._on_logout = on_logout
        self._degraded_body_tokens = degraded_body_tokens
        self._http = httpx.AsyncClient(base_url=base_url, timeout=timeout_seconds, transport=transport)
        self._refresh_task: asyncio.Task[str] | None = None
        self.logged_in = not storage.read().is_empty

    async def __aenter__(self) -> StorefrontClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def signup(self, *, name: str, email: str, password: str) -> dict[str, Any]:
        response = await self._http.post(SIGNUP_PATH, json={"name": name, "email": email, "password": password})
        response.raise_for_status()
        return self._store_session(response.json())

    async def login(self, *, email: str, password: str) -> dict[str, Any]:
        response = await self._http.post(LOGIN_PATH, json={"email": email, "password": password})
        response.raise_for_status()
        return self._store_session(response.json())

    async def logout(self) -> None:
        try:
            response = await self.request("POST", LOGOUT_PATH, json={})
            if response.status_code >= 400:
                logger.info("storefront_client: logout_rejected status=%s", response.status_code)
        finally:
            self._end_session()

    async def get_profile(self) -> dict[str, Any]:
        response = await self.request("GET", PROFILE_PATH)
        response.raise_for_status()
        return response.json()["user"]

    async def refresh(self) -> str:
        """Return a fresh access token, joining a refresh already in flight."""
        task = self._refresh_task
        if task is None:
            task = asyncio.create_task(self._refresh_access_token())
            task.add_done_callback(self._release_refresh_task)
            self._refresh_task = task
        return await asyncio.shield(task)

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        response, sent_token = await self._send(method, url, json=json, params=params)
        if response.status_code != 401 or self._path_of(url) in _NO_REFRESH_PATHS:
            return response

        stored_token = self._storage.read().access_token
        if stored_token and stored_token != sent_token:
            # Another caller refreshed while this request was in flight.
            access_token = stored_token
        else:
            try:
                access_token = await self.refresh()
            except SessionExpiredError:
                return response

        # Replay once; a second 401 is returned to the caller as-is.
        response, _ = await self._send(method, url, json=json, params=params, access_token=access_token)
        return response

    async def _send(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        access_token: str | None = None,
    ) -> tuple[httpx.Response, str | None]:
        tokens = self._storage.read()
        access_token = access_token or tokens.access_token

        headers: dict[str, str] = {}
        if access_token:
            headers[ACCESS_HEADER] = f"Bearer {access_token}"
        if tokens.refresh_token:
            headers[REFRESH_HEADER] = tokens.refresh_token

        method = method.upper()
        if self._degraded_body_tokens and access_token and method in _BODY_METHODS:
            if json is None:
                json = {}
            if isinstance(json, dict) and "access_token" not in json:
                json = {**json, "access_token": access_token}

        response = await self._http.request(method, url, json=json, params=params, headers=headers)
        return response, access_token

    async def _refresh_access_token(self) -> str:
        tokens = self._storage.read()
        if not tokens.refresh_token:
            if self.logged_in:
                await self._expire_session(reason="missing_refresh_token")
            raise SessionExpiredError("No refresh token available.")

        try:
            response = await self._http.post(REFRESH_PATH, json={}, headers={REFRESH_HEADER: tokens.refresh_token})
        except httpx.HTTPError as exc:
            await self._expire_session(reason=type(exc).__name__)
            raise SessionExpiredError("Refresh request failed.") from exc

        access_token = None
        if response.status_code == 200:
            access_token = response.json().get("access_token")
        if not access_token:
            await self._expire_session(reason=f"status_{response.status_code}")
            raise SessionExpiredError("Refresh was rejected.")

        self._storage.update_access_token(access_token)
        logger.info("storefront_client: access_token_refreshed")
        return access_token

    def _release_refresh_task(self, task: asyncio.Task[str]) -> None:
        if self._refresh_task is task:
            self._refresh_task = None

    async def _expire_session(self, *, reason: str) -> None:
        logger.warning("storefront_client: session_expired reason=%s", reason)
        self._end_session()
        if self._on_logout is not None:
            result = self._on_logout()
            if inspect.isawaitable(result):
                await result

    def _end_session(self) -> None:
        self._storage.clear()
        self._http.cookies.clear()
        self.logged_in = False

    def _store_session(self, payload: dict[str, Any]) -> dict[str, Any]:
        self._storage.write(
            StoredTokens(
                access_token=payload.get("access_token"),
                refresh_token=payload.get("refresh_token"),
            )
        )
        self.logged_in = True
        return payload.get("user") or {}

    @staticmethod
    def _path_of(url: str) -> str:
        return httpx.URL(url).path
