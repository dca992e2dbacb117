"""
User Profile Domain Model - The signed-in user as returned by the backend.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional


@dataclass
class UserProfile:
    """
    UserProfile entity - the user record stored next to the credential.

    Domain rules:
    - Lifecycle is paired with the access token (cleared together)
    - Unknown backend fields are kept in `extra` and survive a round trip
    """
    user_id: Optional[Any] = None
    email: Optional[str] = None
    name: Optional[str] = None

    # Any additional backend fields
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        """Name to show in the UI, falling back to the email local part."""
        if self.name:
            return self.name
        if self.email:
            return self.email.split("@", 1)[0]
        return ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the backend shape."""
        data = dict(self.extra)
        data["id"] = self.user_id
        data["email"] = self.email
        data["name"] = self.name
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        """Deserialize from a backend user object."""
        if not isinstance(data, dict):
            raise ValueError(f"user profile must be an object, got {type(data).__name__}")

        extra = {
            k: v for k, v in data.items()
            if k not in ("id", "user_id", "email", "name")
        }
        return cls(
            user_id=data.get("id", data.get("user_id")),
            email=data.get("email"),
            name=data.get("name"),
            extra=extra,
        )
