"""
Unit tests for form validation.
"""

import pytest
from session_auth.domain.validation import (
    is_valid_email,
    is_valid_password,
    password_feedback,
    passwords_match,
    validate_login_form,
    validate_signup_form,
)


@pytest.mark.parametrize("email,expected", [
    ("a@b.co", True),
    ("first.last@example.com", True),
    ("a@b", False),
    ("plain", False),
    ("a b@c.de", False),
    ("", False),
    ("a@b.co\n", False),
])
def test_is_valid_email(email, expected):
    assert is_valid_email(email) is expected


def test_login_form_rejects_trailing_newline_in_email():
    result = validate_login_form("a@b.co\n", "secret1")
    assert result.errors == {"email": "Please enter a valid email"}


def test_strong_password():
    assert is_valid_password("Abcdef1!")


def test_weak_password_feedback():
    """Lowercase-only password reports the missing rules in order."""
    assert not is_valid_password("abcdefgh")

    feedback = password_feedback("abcdefgh")
    assert feedback == ["1 uppercase letter", "1 number", "1 special character"]


def test_feedback_empty_for_strong_password():
    assert password_feedback("Abcdef1!") == []


def test_feedback_for_short_password():
    feedback = password_feedback("Ab1!")
    assert feedback == ["At least 8 characters"]


def test_passwords_match():
    assert passwords_match("x1", "x1")
    assert not passwords_match("", "")
    assert not passwords_match("x1", "x2")


def test_login_form_empty():
    result = validate_login_form("", "")

    assert result.is_valid is False
    assert result.errors["email"] == "Email is required"
    assert result.errors["password"] == "Password is required"


def test_login_form_uses_weaker_password_rule():
    """Login accepts a 6-character password that signup would reject."""
    result = validate_login_form("e@x.com", "abcdef")
    assert result.is_valid
    assert result.errors == {}

    signup = validate_signup_form("e@x.com", "abcdef", "abcdef")
    assert "password" in signup.errors


def test_login_form_short_password():
    result = validate_login_form("e@x.com", "abc")
    assert result.errors == {"password": "Password must be at least 6 characters"}


def test_login_form_bad_email():
    result = validate_login_form("plain", "Secret1!")
    assert result.errors == {"email": "Please enter a valid email"}


def test_signup_form_valid():
    result = validate_signup_form("e@x.com", "Secret1!", "Secret1!")
    assert result.is_valid


def test_signup_form_combines_rules():
    result = validate_signup_form("a@b", "abcdefgh", "different")

    assert not result.is_valid
    assert result.errors["email"] == "Please enter a valid email"
    assert result.errors["password"] == "Password needs: 1 uppercase letter, 1 number, 1 special character"
    assert result.errors["confirm_password"] == "Passwords do not match"


def test_signup_form_missing_confirmation():
    result = validate_signup_form("e@x.com", "Secret1!", "  ")
    assert result.errors == {"confirm_password": "Please confirm your password"}


def test_validation_result_to_dict():
    data = validate_login_form("", "").to_dict()
    assert data["is_valid"] is False
    assert set(data["errors"]) == {"email", "password"}
