"""
Session Domain Model - Client-local belief about authentication status.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, Optional
from enum import Enum
from session_auth.domain.profile import UserProfile
from session_auth.exceptions import InvalidTransitionError


class SessionStatus(Enum):
    """Session lifecycle states."""
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


ALLOWED_TRANSITIONS: Dict[SessionStatus, FrozenSet[SessionStatus]] = {
    SessionStatus.UNAUTHENTICATED: frozenset({
        SessionStatus.AUTHENTICATING,
        SessionStatus.AUTHENTICATED,     # token written by another controller
        SessionStatus.UNAUTHENTICATED,
    }),
    SessionStatus.AUTHENTICATING: frozenset({
        SessionStatus.AUTHENTICATED,
        SessionStatus.FAILED,
        SessionStatus.UNAUTHENTICATED,
    }),
    SessionStatus.AUTHENTICATED: frozenset({
        SessionStatus.AUTHENTICATED,     # profile refreshed by verify
        SessionStatus.UNAUTHENTICATED,
    }),
    SessionStatus.FAILED: frozenset({
        SessionStatus.AUTHENTICATING,
        SessionStatus.AUTHENTICATED,     # verified a token stored by another controller
        SessionStatus.FAILED,            # error cleared
        SessionStatus.UNAUTHENTICATED,
    }),
}


def can_transition(current: SessionStatus, target: SessionStatus) -> bool:
    """Check a transition against the table."""
    return target in ALLOWED_TRANSITIONS[current]


@dataclass(frozen=True)
class SessionState:
    """
    Immutable snapshot of the session.

    Domain rules:
    - profile is only set while AUTHENTICATED
    - error is only set while FAILED
    - error_detail keeps the underlying exception for diagnostics
    """
    status: SessionStatus = SessionStatus.UNAUTHENTICATED
    profile: Optional[UserProfile] = None
    error: Optional[str] = None
    error_detail: Optional[BaseException] = field(default=None, compare=False)

    @property
    def is_authenticated(self) -> bool:
        return self.status == SessionStatus.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self.status == SessionStatus.AUTHENTICATING

    def transition(
        self,
        target: SessionStatus,
        profile: Optional[UserProfile] = None,
        error: Optional[str] = None,
        error_detail: Optional[BaseException] = None,
    ) -> "SessionState":
        """
        Build the next state.

        Raises:
            InvalidTransitionError: If the table does not allow the move
        """
        if not can_transition(self.status, target):
            raise InvalidTransitionError(self.status.value, target.value)

        if target == SessionStatus.AUTHENTICATED:
            return SessionState(status=target, profile=profile)
        if target == SessionStatus.FAILED:
            return SessionState(status=target, error=error, error_detail=error_detail)
        return SessionState(status=target)

    def without_error(self) -> "SessionState":
        """Same status, error message removed."""
        return replace(self, error=None, error_detail=None)

    def to_dict(self):
        """Serialize for display (error_detail omitted)."""
        return {
            "status": self.status.value,
            "profile": self.profile.to_dict() if self.profile else None,
            "error": self.error,
            "is_authenticated": self.is_authenticated,
        }
