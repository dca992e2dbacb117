"""
Credential Domain Model - Access token plus optional refresh token.
"""

from dataclasses import dataclass
from typing import Optional
from datetime import datetime, timezone
import jwt


@dataclass(frozen=True)
class Credential:
    """
    Credential entity - identifies a session to the remote authority.

    Domain rules:
    - access_token is opaque and non-empty
    - repr never shows token values
    - expiry is only known when the access token is a JWT with an exp claim
    """
    access_token: str
    refresh_token: Optional[str] = None

    def __post_init__(self):
        if not self.access_token:
            raise ValueError("access_token must be a non-empty string")

    def __repr__(self) -> str:
        return (
            f"Credential(access_token=<{len(self.access_token)} chars>, "
            f"refresh_token={'<set>' if self.refresh_token else None})"
        )

    @property
    def expires_at(self) -> Optional[datetime]:
        """
        Expiry from the token's exp claim.

        The signature is not checked; the client only reads the claim.
        Returns None for opaque tokens or tokens without exp.
        """
        try:
            claims = jwt.decode(
                self.access_token,
                options={"verify_signature": False, "verify_exp": False},
            )
        except jwt.InvalidTokenError:
            return None

        exp = claims.get("exp")
        if not isinstance(exp, (int, float)):
            return None
        return datetime.fromtimestamp(exp, tz=timezone.utc)

    def is_expired(self, leeway: int = 0) -> bool:
        """
        Check the exp claim against the current time.

        Args:
            leeway: Seconds subtracted from the expiry

        Returns:
            True if the token carries an exp claim that has passed
        """
        expires_at = self.expires_at
        if expires_at is None:
            return False
        return datetime.now(timezone.utc).timestamp() >= expires_at.timestamp() - leeway
