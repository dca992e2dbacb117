"""
Request Gateway - Outbound HTTP wrapper that attaches and polices credentials.

Every call to the remote authority goes through one httpx.AsyncClient bound
to the configured base origin:

- A request hook reads the access token from the CredentialStore at send
  time and sets `Authorization: Bearer <token>` (or removes the header).
- A 401 on a call that carried a credential ends the session: the store is
  cleared, subscribers are told to navigate to the login path, and
  SessionExpiredError is raised to the caller.
- Token refresh is single-flight: concurrent callers share one request.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional
import httpx
from session_auth.exceptions import SessionExpiredError, TransportFailureError
from session_auth.sdk.store import CredentialStore

logger = logging.getLogger(__name__)

# Receives the path the host UI should navigate to
SessionEndedCallback = Callable[[str], Any]

BEARER_PREFIX = "Bearer "
REFRESH_PATH = "/auth/refresh"


class RequestGateway:
    """
    Credential-aware HTTP client for a single base origin.

    Example:
        gateway = RequestGateway(store, base_url="http://localhost:3000/api")
        gateway.subscribe(lambda path: router.push(path))

        response = await gateway.request("GET", "/auth/verify")
    """

    def __init__(
        self,
        store: CredentialStore,
        base_url: str,
        timeout: float = 10.0,
        login_path: str = "/",
        refresh_on_unauthorized: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the gateway.

        Args:
            store: Source of the access and refresh tokens
            base_url: Base origin every path is joined to
            timeout: Per-request timeout in seconds
            login_path: Unauthenticated entry point passed to subscribers
            refresh_on_unauthorized: Try one token refresh and replay on 401
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self._store = store
        self._login_path = login_path
        self._refresh_on_unauthorized = refresh_on_unauthorized
        self._subscribers: List[SessionEndedCallback] = []
        self._refresh_task: Optional[asyncio.Task] = None
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
            event_hooks={"request": [self._attach_credentials]},
        )

    @property
    def base_url(self) -> str:
        return str(self._client.base_url)

    @property
    def refreshing(self) -> bool:
        """True while a token refresh request is in flight."""
        return self._refresh_task is not None and not self._refresh_task.done()

    async def __aenter__(self) -> "RequestGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # Subscribers

    def subscribe(self, callback: SessionEndedCallback) -> Callable[[], None]:
        """
        Register a callback for forced session ends.

        Args:
            callback: Called with the login path after the store is cleared

        Returns:
            Function that removes the callback
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify_session_ended(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self._login_path)
            except Exception:
                logger.exception("Session-ended subscriber failed")

    # Hooks

    async def _attach_credentials(self, request: httpx.Request) -> None:
        token = self._store.get_access_token()
        if token:
            request.headers["Authorization"] = f"{BEARER_PREFIX}{token}"
        elif "Authorization" in request.headers:
            del request.headers["Authorization"]

    @staticmethod
    def _sent_token(request: httpx.Request) -> Optional[str]:
        header = request.headers.get("Authorization", "")
        if header.startswith(BEARER_PREFIX):
            return header[len(BEARER_PREFIX):] or None
        return None

    def _end_session(self, sent_token: str) -> bool:
        """
        Clear the store if it still holds the token the failed request used.

        A token that was already cleared or replaced (by a concurrent 401,
        a refresh or a new login) is left alone, so several concurrent 401s
        produce exactly one clear and one notification.

        Returns:
            True if this call ended the session
        """
        if self._store.get_access_token() != sent_token:
            logger.debug("401 for a token that is no longer current, ignoring")
            return False

        logger.warning("Received 401 for the current credential, ending session")
        self._store.clear()
        self._notify_session_ended()
        return True

    # Requests

    async def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """
        Send a request and return the 2xx response.

        Args:
            method: HTTP method
            path: Path relative to the base origin
            **kwargs: Passed to httpx (json, params, headers, ...)

        Returns:
            Response with a 2xx status

        Raises:
            SessionExpiredError: 401 on a call that carried a credential
            httpx.HTTPStatusError: Any other non-2xx status
            TransportFailureError: Network error or timeout
        """
        return await self._send(method, path, kwargs, allow_refresh=self._refresh_on_unauthorized)

    async def get(self, path: str, **kwargs) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def _send(
        self,
        method: str,
        path: str,
        kwargs: Dict[str, Any],
        allow_refresh: bool = False,
        is_refresh: bool = False,
    ) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.warning(f"{method} {path} failed: {e!r}")
            raise TransportFailureError(f"Request to {path} failed", cause=e) from e

        if response.status_code == 401 and not is_refresh:
            sent_token = self._sent_token(response.request)
            if sent_token is not None:
                if allow_refresh and await self._recover(sent_token):
                    return await self._send(method, path, kwargs)

                self._end_session(sent_token)
                try:
                    response.raise_for_status()
                except httpx.HTTPStatusError as e:
                    raise SessionExpiredError() from e

        if response.is_error:
            logger.info(f"{method} {path} returned {response.status_code}")
        response.raise_for_status()
        return response

    async def _recover(self, sent_token: str) -> bool:
        """
        Get a usable token after a 401 so the request can be replayed once.

        Returns:
            True if a different current token is now available
        """
        current = self._store.get_access_token()
        if current and current != sent_token:
            return True
        if current != sent_token or not self._store.get_refresh_token():
            return False

        try:
            await self.refresh()
        except SessionExpiredError:
            return False
        return self._store.has_token()

    # Refresh

    async def refresh(self) -> str:
        """
        Trade the stored refresh token for a new access token.

        Concurrent callers share the same in-flight request. A failure of
        the refresh call itself never starts another refresh.

        Returns:
            New access token (already persisted)

        Raises:
            SessionExpiredError: No refresh token, or the authority refused it
            TransportFailureError: Network error (session kept, caller may retry)
        """
        if self._refresh_task is None or self._refresh_task.done():
            task = asyncio.ensure_future(self._do_refresh())
            task.add_done_callback(self._refresh_finished)
            self._refresh_task = task
        else:
            logger.debug("Joining in-flight token refresh")
        return await asyncio.shield(self._refresh_task)

    def _refresh_finished(self, task: asyncio.Task) -> None:
        if self._refresh_task is task:
            self._refresh_task = None

    async def _do_refresh(self) -> str:
        refresh_token = self._store.get_refresh_token()
        if not refresh_token:
            logger.info("No refresh token available")
            self._expire_refresh(None)
            raise SessionExpiredError("No refresh token available")

        try:
            response = await self._send(
                "POST",
                REFRESH_PATH,
                {"json": {"refreshToken": refresh_token}},
                is_refresh=True,
            )
        except httpx.HTTPStatusError as e:
            logger.warning(f"Token refresh rejected with status {e.response.status_code}")
            self._expire_refresh(refresh_token)
            raise SessionExpiredError("Token refresh failed") from e

        try:
            token = response.json()["token"]
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Token refresh returned a malformed body: {e!r}")
            self._expire_refresh(refresh_token)
            raise SessionExpiredError("Token refresh failed") from e

        if not isinstance(token, str) or not token:
            self._expire_refresh(refresh_token)
            raise SessionExpiredError("Token refresh failed")

        self._store.set_access_token(token)
        logger.info("Access token refreshed")
        return token

    def _expire_refresh(self, refresh_token: Optional[str]) -> None:
        """End the session after a failed refresh, unless it already changed."""
        if self._store.get_refresh_token() != refresh_token:
            return
        if self._store.clear():
            self._notify_session_ended()
