"""
Domain Models - Pure entities and rules.

No network or storage dependencies. Domain logic only.
"""

from session_auth.domain.credential import Credential
from session_auth.domain.profile import UserProfile
from session_auth.domain.session import SessionState, SessionStatus, ALLOWED_TRANSITIONS
from session_auth.domain.validation import (
    ValidationResult,
    is_valid_email,
    is_valid_password,
    password_feedback,
    passwords_match,
    validate_login_form,
    validate_signup_form,
)

__all__ = [
    "Credential",
    "UserProfile",
    "SessionState",
    "SessionStatus",
    "ALLOWED_TRANSITIONS",
    "ValidationResult",
    "is_valid_email",
    "is_valid_password",
    "password_feedback",
    "passwords_match",
    "validate_login_form",
    "validate_signup_form",
]
