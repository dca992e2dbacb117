"""
HTTP Authentication Adapter - Implements AuthenticationPort over the RequestGateway.

Remote contract:
    POST /auth/login    {email, password}        -> {token, refreshToken?, user}
    POST /auth/signup   {email, password, name}  -> {token, refreshToken?, user}
    POST /auth/logout                            -> 2xx
    GET  /auth/verify                            -> 2xx
    POST /auth/refresh  {refreshToken}           -> {token}
"""

import logging
from typing import Any, Optional
import httpx
from session_auth.domain.profile import UserProfile
from session_auth.exceptions import AuthRejectedError, TransportFailureError
from session_auth.ports.auth_port import AuthenticationPort, AuthResponse
from session_auth.sdk.gateway import RequestGateway

logger = logging.getLogger(__name__)


class HTTPAuthAdapter(AuthenticationPort):
    """
    JSON-over-HTTP remote authority.

    Maps transport and status failures onto the package error taxonomy:
    non-2xx -> AuthRejectedError (with the server's message when present),
    unparsable body -> TransportFailureError. SessionExpiredError and
    TransportFailureError from the gateway pass through unchanged.
    """

    def __init__(self, gateway: RequestGateway):
        """
        Initialize HTTP auth adapter.

        Args:
            gateway: Gateway that attaches credentials and handles 401s
        """
        self._gateway = gateway

    @staticmethod
    def _body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text or None

    @classmethod
    def _rejected(cls, error: httpx.HTTPStatusError, default: str) -> AuthRejectedError:
        body = cls._body(error.response)
        message = default
        if isinstance(body, dict) and isinstance(body.get("message"), str) and body["message"]:
            message = body["message"]
        return AuthRejectedError(message, status_code=error.response.status_code, body=body)

    async def _exchange(self, path: str, payload: dict, default_error: str) -> AuthResponse:
        try:
            response = await self._gateway.post(path, json=payload)
        except httpx.HTTPStatusError as e:
            raise self._rejected(e, default_error) from e

        try:
            return AuthResponse.from_dict(response.json())
        except ValueError as e:
            logger.error(f"Malformed response from {path}: {e}")
            raise TransportFailureError("Malformed response from server", cause=e) from e

    async def login(self, email: str, password: str) -> AuthResponse:
        return await self._exchange(
            "/auth/login",
            {"email": email, "password": password},
            "Login failed. Please try again.",
        )

    async def signup(self, email: str, password: str, name: str = "") -> AuthResponse:
        return await self._exchange(
            "/auth/signup",
            {"email": email, "password": password, "name": name},
            "Signup failed. Please try again.",
        )

    async def logout(self) -> None:
        try:
            await self._gateway.post("/auth/logout")
        except httpx.HTTPStatusError as e:
            raise self._rejected(e, "Logout failed") from e

    async def verify(self) -> Optional[UserProfile]:
        try:
            response = await self._gateway.get("/auth/verify")
        except httpx.HTTPStatusError as e:
            raise self._rejected(e, "Session verification failed") from e

        body = self._body(response)
        if isinstance(body, dict) and isinstance(body.get("user"), dict):
            return UserProfile.from_dict(body["user"])
        return None

    async def refresh(self) -> str:
        return await self._gateway.refresh()
