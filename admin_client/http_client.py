"""
Authenticated HTTP client for the admin REST API.

Every request carries the stored access token as a Bearer credential. When a request is
rejected with 401, the client refreshes the token once for all concurrently failing requests:
the first one issues the refresh call, the others wait on it, and each of them is replayed
exactly once with the new token. If the refresh fails, stored credentials are erased, every
waiting request fails with AuthenticationRequired and the on_logout hook fires.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

import httpx

from admin_client.config import (
    API_BASE_URL,
    LOGIN_PATH,
    MAX_PENDING_REFRESH,
    REFRESH_PATH,
    REFRESH_TIMEOUT,
    REQUEST_TIMEOUT,
)
from admin_client.errors import AuthenticationRequired, RefreshQueueFull
from admin_client.token_store import CredentialStore, TokenPair

logger = logging.getLogger(__name__)


@dataclass
class ApiRequest:
    """Outbound request descriptor. Rebuilt into an httpx.Request on every attempt."""

    method: str
    path: str
    params: dict[str, Any] | None = None
    json: Any = None
    data: dict[str, Any] | None = None
    files: dict[str, Any] | None = None
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class RefreshState:
    """State of one refresh cycle. Replaced by a fresh instance when the cycle settles."""

    in_flight: bool = False
    waiters: list[asyncio.Future] = field(default_factory=list)


class AuthenticatedRequestClient:
    def __init__(
        self,
        store: CredentialStore,
        *,
        base_url: str = API_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
        refresh_timeout: float = REFRESH_TIMEOUT,
        max_pending: int = MAX_PENDING_REFRESH,
        login_path: str = LOGIN_PATH,
        refresh_path: str = REFRESH_PATH,
        on_logout: Callable[[], None] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._store = store
        self._refresh_timeout = refresh_timeout
        self._max_pending = max_pending
        self._exempt_paths = {_normalize_path(login_path), _normalize_path(refresh_path)}
        self._refresh_path = refresh_path
        self.on_logout = on_logout
        self._refresh = RefreshState()
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @property
    def store(self) -> CredentialStore:
        return self._store

    @property
    def refresh_in_flight(self) -> bool:
        return self._refresh.in_flight

    @property
    def pending_count(self) -> int:
        """Requests currently waiting on the in-flight refresh."""
        return len(self._refresh.waiters)

    async def __aenter__(self) -> "AuthenticatedRequestClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def send(self, request: ApiRequest) -> httpx.Response:
        """
        Send request with the current access token. Returns the response unchanged unless it is
        a 401 on a non-exempt endpoint, in which case the token is refreshed and the request is
        replayed once; the replay's response is returned whatever its status.
        Raises AuthenticationRequired when the refresh fails, RefreshQueueFull when too many
        requests are already waiting. Transport errors propagate.
        """
        sent_token = self._store.access_token
        response = await self._dispatch(request, sent_token)
        if response.status_code != 401 or self.is_exempt(request.path):
            return response

        current_token = self._store.access_token
        if current_token and current_token != sent_token and not self._refresh.in_flight:
            # Token was refreshed after this request went out; replay without another refresh
            logger.debug("401 on %s %s with a superseded token; replaying", request.method, request.path)
            return await self._dispatch(request, current_token)

        logger.debug("401 on %s %s; token refresh required", request.method, request.path)
        access_token = await self._await_fresh_token()
        return await self._dispatch(request, access_token)

    async def get(self, path: str, *, params: dict[str, Any] | None = None, headers: dict[str, str] | None = None):
        return await self.send(ApiRequest("GET", path, params=params, headers=dict(headers or {})))

    async def post(self, path: str, *, json: Any = None, data=None, files=None, params=None, headers=None):
        return await self.send(
            ApiRequest("POST", path, params=params, json=json, data=data, files=files, headers=dict(headers or {}))
        )

    async def put(self, path: str, *, json: Any = None, params=None, headers=None):
        return await self.send(ApiRequest("PUT", path, params=params, json=json, headers=dict(headers or {})))

    async def patch(self, path: str, *, json: Any = None, params=None, headers=None):
        return await self.send(ApiRequest("PATCH", path, params=params, json=json, headers=dict(headers or {})))

    async def delete(self, path: str, *, params=None, headers=None):
        return await self.send(ApiRequest("DELETE", path, params=params, headers=dict(headers or {})))

    def is_exempt(self, path: str) -> bool:
        """Login and refresh endpoints never go through refresh/retry."""
        return _normalize_path(path) in self._exempt_paths

    async def _dispatch(self, request: ApiRequest, access_token: str | None) -> httpx.Response:
        headers = dict(request.headers)
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        http_request = self._http.build_request(
            request.method,
            request.path,
            params=request.params,
            json=request.json,
            data=request.data,
            files=request.files,
            headers=headers,
        )
        return await self._http.send(http_request)

    async def _await_fresh_token(self) -> str:
        state = self._refresh
        if state.in_flight:
            if self._max_pending and len(state.waiters) >= self._max_pending:
                raise RefreshQueueFull(f"{len(state.waiters)} requests already waiting on token refresh")
            waiter = asyncio.get_running_loop().create_future()
            state.waiters.append(waiter)
            logger.debug("Refresh in flight; queued request (%d waiting)", len(state.waiters))
            try:
                return await waiter
            finally:
                # A cancelled waiter must not keep its slot
                if waiter in state.waiters:
                    state.waiters.remove(waiter)

        # Set before the first await so concurrent 401s queue instead of refreshing again
        state.in_flight = True
        try:
            tokens = await self._request_new_tokens()
            self._store.save_tokens(tokens)
        except AuthenticationRequired as e:
            self._store.clear()
            self._release(error=str(e))
            logger.warning("Token refresh failed (%s); credentials cleared", e)
            if self.on_logout is not None:
                self.on_logout()
            raise
        except BaseException:
            self._release(error="Token refresh was interrupted")
            raise
        self._release(access_token=tokens.access_token)
        logger.info("Access token refreshed")
        return tokens.access_token

    async def _request_new_tokens(self) -> TokenPair:
        """POST the stored refresh token. Any failure becomes AuthenticationRequired."""
        refresh_token = self._store.refresh_token
        if not refresh_token:
            raise AuthenticationRequired("No refresh token stored")
        try:
            r = await self._http.post(
                self._refresh_path,
                json={"refreshToken": refresh_token},
                timeout=self._refresh_timeout,
            )
        except httpx.HTTPError as e:
            raise AuthenticationRequired(f"Refresh request failed: {e.__class__.__name__}") from e
        if not r.is_success:
            raise AuthenticationRequired(f"Refresh rejected with status {r.status_code}")
        try:
            return TokenPair.from_response_body(r.json())
        except ValueError as e:
            raise AuthenticationRequired(f"Invalid refresh response: {e}") from e

    def _release(self, access_token: str | None = None, error: str | None = None) -> None:
        """End the refresh cycle and wake waiters in the order they queued."""
        waiters = list(self._refresh.waiters)
        self._refresh = RefreshState()
        for waiter in waiters:
            if waiter.done():
                continue
            if error is not None:
                waiter.set_exception(AuthenticationRequired(error))
            else:
                waiter.set_result(access_token)


def _normalize_path(path: str) -> str:
    return path.split("?", 1)[0].rstrip("/") or "/"
