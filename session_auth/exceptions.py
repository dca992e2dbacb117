"""
Session Auth Exceptions - Error taxonomy for the client session layer.

Every error raised by this package inherits from SessionAuthError so callers
can catch one type. None of them are fatal to the process; the worst outcome
is a forced return to the unauthenticated state.
"""

from typing import Any, Dict, Optional


class SessionAuthError(Exception):
    """Base exception for all session-auth errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dict for display or diagnostics."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(SessionAuthError):
    """Client-side form validation failed. Never reaches the network."""

    def __init__(self, errors: Dict[str, str], message: str = "Please fix the highlighted fields"):
        super().__init__(message, code="VALIDATION_FAILED", details={"errors": dict(errors)})
        self.errors = dict(errors)


class AuthRejectedError(SessionAuthError):
    """The remote authority declined the submitted credentials."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(
            message,
            code="AUTH_REJECTED",
            details={"status_code": status_code, "body": body},
        )
        self.status_code = status_code


class SessionExpiredError(SessionAuthError):
    """A 401 was observed on an authenticated call; the session was ended."""

    def __init__(self, message: str = "Your session has expired. Please log in again."):
        super().__init__(message, code="SESSION_EXPIRED")


class TransportFailureError(SessionAuthError):
    """Network failure or a response body that could not be parsed."""

    def __init__(self, message: str = "Could not reach the server", cause: Optional[BaseException] = None):
        super().__init__(
            message,
            code="TRANSPORT_FAILURE",
            details={"cause": repr(cause) if cause else None},
        )


class StorageCorruptError(SessionAuthError):
    """Persisted data could not be decoded. Degraded to an absent value."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            f"Stored value for '{key}' is corrupt: {reason}",
            code="STORAGE_CORRUPT",
            details={"key": key},
        )


class OperationInProgressError(SessionAuthError):
    """Another login/signup/verify is already pending on this controller."""

    def __init__(self, operation: str, pending: str):
        super().__init__(
            f"Cannot start {operation}: {pending} is already in progress",
            code="OPERATION_IN_PROGRESS",
            details={"operation": operation, "pending": pending},
        )


class InvalidTransitionError(SessionAuthError):
    """A session state change outside the transition table was requested."""

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Illegal session transition: {current} -> {target}",
            code="INVALID_TRANSITION",
            details={"from": current, "to": target},
        )
