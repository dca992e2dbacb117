"""
Form Validation - Pure checks run before any credential leaves the client.

Login and signup deliberately use different password rules: login only asks
for a non-empty password of at least 6 characters, signup asks for the full
strength rule set. Both are part of the observable behaviour.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'

MIN_PASSWORD_LENGTH = 8
MIN_LOGIN_PASSWORD_LENGTH = 6

# (predicate, feedback) in display order
PASSWORD_RULES = (
    (lambda p: len(p) >= MIN_PASSWORD_LENGTH, f"At least {MIN_PASSWORD_LENGTH} characters"),
    (lambda p: re.search(r"[A-Z]", p) is not None, "1 uppercase letter"),
    (lambda p: re.search(r"[a-z]", p) is not None, "1 lowercase letter"),
    (lambda p: re.search(r"[0-9]", p) is not None, "1 number"),
    (lambda p: any(c in SPECIAL_CHARACTERS for c in p), "1 special character"),
)


@dataclass
class ValidationResult:
    """Field name -> error message. A missing key means the field is fine."""
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self):
        return {"is_valid": self.is_valid, "errors": dict(self.errors)}


def is_valid_email(email: str) -> bool:
    """local-part@domain.tld shape check."""
    return bool(EMAIL_PATTERN.fullmatch(email or ""))


def is_valid_password(password: str) -> bool:
    """
    Full strength rule: length >= 8, an uppercase letter, a lowercase
    letter, a digit and one of SPECIAL_CHARACTERS.
    """
    return all(rule(password or "") for rule, _ in PASSWORD_RULES)


def password_feedback(password: str) -> List[str]:
    """Descriptions of the unmet strength rules, in display order."""
    return [message for rule, message in PASSWORD_RULES if not rule(password or "")]


def passwords_match(password: str, confirm_password: str) -> bool:
    """Equal and non-empty."""
    return bool(password) and password == confirm_password


def _email_error(email: str):
    if not (email or "").strip():
        return "Email is required"
    if not is_valid_email(email):
        return "Please enter a valid email"
    return None


def validate_login_form(email: str, password: str) -> ValidationResult:
    """Validate the login form (weaker password rule than signup)."""
    errors: Dict[str, str] = {}

    email_error = _email_error(email)
    if email_error:
        errors["email"] = email_error

    password = password or ""
    if not password.strip():
        errors["password"] = "Password is required"
    elif len(password) < MIN_LOGIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_LOGIN_PASSWORD_LENGTH} characters"

    return ValidationResult(errors=errors)


def validate_signup_form(email: str, password: str, confirm_password: str) -> ValidationResult:
    """Validate the signup form: email, full password strength, confirmation."""
    errors: Dict[str, str] = {}

    email_error = _email_error(email)
    if email_error:
        errors["email"] = email_error

    password = password or ""
    if not password.strip():
        errors["password"] = "Password is required"
    elif not is_valid_password(password):
        errors["password"] = f"Password needs: {', '.join(password_feedback(password))}"

    confirm_password = confirm_password or ""
    if not confirm_password.strip():
        errors["confirm_password"] = "Please confirm your password"
    elif not passwords_match(password, confirm_password):
        errors["confirm_password"] = "Passwords do not match"

    return ValidationResult(errors=errors)
