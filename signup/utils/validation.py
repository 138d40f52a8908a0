"""Local field rules.

These mirror the backend's account rules so obviously malformed input is
rejected on the keystroke, without a network round trip. The backend stays
authoritative: availability (username/email already in use) is only known
server-side.

Every validator returns an error message or None if valid.
"""

from __future__ import annotations

import re
from typing import Callable, Mapping

from ..errors import REQUIRED_MESSAGE

EMAIL_RE = re.compile(r"^[a-zA-Z0-9_!#$%&'*+/=?`{|}~^.-]+@[a-zA-Z0-9.-]+$")
USERNAME_RE = re.compile(r"^[a-z0-9](?!.*[._-]{2})[a-z0-9._-]{1,18}[a-z0-9]$")
NAME_RE = re.compile(r"^[A-Za-z'\- ]+$")

PASSWORD_MIN_LENGTH = 8


def is_blank(value: str | None) -> bool:
    return not value or not value.strip()


def validate_required(value: str | None) -> str | None:
    """Validate presence. Returns error message or None if valid."""
    if is_blank(value):
        return REQUIRED_MESSAGE
    return None


def _validate_name(value: str, label: str) -> str | None:
    name = value.strip()
    if len(name) > 40 or not NAME_RE.match(name):
        return f"{label} contains invalid characters or is too long."
    return None


def validate_first_name(value: str, snapshot: Mapping[str, str] | None = None) -> str | None:
    return _validate_name(value, "First name")


def validate_last_name(value: str, snapshot: Mapping[str, str] | None = None) -> str | None:
    return _validate_name(value, "Last name")


def validate_username(value: str, snapshot: Mapping[str, str] | None = None) -> str | None:
    """Validate username. Returns error message or None if valid."""
    username = value.strip().lower()
    if not (3 <= len(username) <= 20) or not USERNAME_RE.match(username):
        return (
            "Username must be 3–20 characters and may include letters, numbers, ., _, - "
            "(not at the start/end or repeated)."
        )
    return None


def validate_email(value: str, snapshot: Mapping[str, str] | None = None) -> str | None:
    email = value.strip()
    if not (3 <= len(email) <= 75) or not EMAIL_RE.match(email):
        return "Please enter a valid email address."
    return None


def validate_password(value: str, snapshot: Mapping[str, str] | None = None) -> str | None:
    if len(value) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters long."
    return None


def validate_confirm_password(value: str, snapshot: Mapping[str, str] | None = None) -> str | None:
    """Validate confirmation against the sibling password in the snapshot."""
    password = (snapshot or {}).get("password") or ""
    if is_blank(password):
        return "Password is required first"
    if value != password:
        return "Passwords do not match."
    return None


FIELD_RULES: dict[str, Callable[[str, Mapping[str, str] | None], str | None]] = {
    "firstName": validate_first_name,
    "lastName": validate_last_name,
    "username": validate_username,
    "email": validate_email,
    "password": validate_password,
    "confirmPassword": validate_confirm_password,
}


def check_field(field: str, value: str | None, snapshot: Mapping[str, str] | None = None) -> str | None:
    """Run the required check and the field's local rule, if any."""
    error = validate_required(value)
    if error:
        return error
    rule = FIELD_RULES.get(field)
    if rule is None:
        return None
    return rule(value, snapshot)
