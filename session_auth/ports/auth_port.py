"""
Authentication Port - Interface for the remote authority that issues credentials.

Implementations:
- HTTPAuthAdapter: JSON over HTTP through the RequestGateway
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional
from session_auth.domain.profile import UserProfile


@dataclass
class AuthResponse:
    """Successful login/signup exchange."""
    token: str
    user: UserProfile
    refresh_token: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthResponse":
        """
        Parse `{token, refreshToken?, user}`.

        Raises:
            ValueError: If the body is not an object or misses token/user
        """
        if not isinstance(data, dict):
            raise ValueError("response body is not an object")

        token = data.get("token")
        if not isinstance(token, str) or not token:
            raise ValueError("response has no token")
        if "user" not in data:
            raise ValueError("response has no user")

        return cls(
            token=token,
            user=UserProfile.from_dict(data["user"]),
            refresh_token=data.get("refreshToken") or None,
        )


class AuthenticationPort(ABC):
    """Port: Exchange credentials with the remote authority."""

    @abstractmethod
    async def login(self, email: str, password: str) -> AuthResponse:
        """
        Log in with email and password.

        Returns:
            Issued token, optional refresh token and user profile

        Raises:
            AuthRejectedError: Credentials declined
            TransportFailureError: Network failure or malformed body
        """
        pass

    @abstractmethod
    async def signup(self, email: str, password: str, name: str = "") -> AuthResponse:
        """
        Create an account and log in.

        Raises:
            AuthRejectedError: Signup declined (e.g. duplicate email)
            TransportFailureError: Network failure or malformed body
        """
        pass

    @abstractmethod
    async def logout(self) -> None:
        """Invalidate the current session remotely (best effort)."""
        pass

    @abstractmethod
    async def verify(self) -> Optional[UserProfile]:
        """
        Check that the current token is still accepted.

        Returns:
            Fresh profile when the backend sends one, else None

        Raises:
            SessionAuthError: Any failure means the token is not valid
        """
        pass

    @abstractmethod
    async def refresh(self) -> str:
        """
        Trade the refresh token for a new access token.

        Returns:
            The new access token
        """
        pass
