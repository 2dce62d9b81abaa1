"""Field validation for user records.

Each validator returns a list of ``{"field", "reason"}`` errors rather than
raising, so callers can report every problem with a request at once.
"""

import re
from typing import Any

from src.models.user import REQUIRED_PROFILE_FIELDS

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
PHONE_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")
NAME_PATTERN = re.compile(r"^[A-Za-z\s]+$")

EMAIL_MAX_LENGTH = 255
PASSWORD_MAX_LENGTH = 128
TEXT_MIN_LENGTH = 2
TEXT_MAX_LENGTH = 50

# Maximum number of entries per list field
LIST_LIMITS = {
    "preferences": 20,
    "favorite_artists": 100,
    "favorite_venues": 100,
}

# Fields a profile update may touch
UPDATABLE_FIELDS = ("name", "phone", "country", "city", *LIST_LIMITS)


def normalize_email(email: str) -> str:
    """Emails are compared case-insensitively."""
    return email.strip().lower()


def is_valid_email(email: Any) -> bool:
    """Check an email against the basic shape pattern."""
    if not isinstance(email, str):
        return False
    email = normalize_email(email)
    return len(email) <= EMAIL_MAX_LENGTH and EMAIL_PATTERN.match(email) is not None


def _validate_text(field: str, value: Any, pattern: re.Pattern | None = None) -> str | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return f"{field} is required"
    if not isinstance(value, str):
        return f"{field} must be a string"
    value = value.strip()
    if len(value) < TEXT_MIN_LENGTH:
        return f"{field} must be at least {TEXT_MIN_LENGTH} characters long"
    if len(value) > TEXT_MAX_LENGTH:
        return f"{field} cannot exceed {TEXT_MAX_LENGTH} characters"
    if pattern is not None and not pattern.match(value):
        return f"{field} can only contain letters and spaces"
    return None


def _validate_phone(value: Any) -> str | None:
    if not value:
        return "phone is required"
    if not isinstance(value, str) or not PHONE_PATTERN.match(value):
        return "phone must include the country code, e.g. +11234567890"
    return None


def _validate_list(field: str, value: Any) -> str | None:
    if value is None:
        return f"{field} must be a list"
    if not isinstance(value, list) or not all(isinstance(entry, str) for entry in value):
        return f"{field} must be a list of strings"
    limit = LIST_LIMITS[field]
    if len(value) > limit:
        return f"cannot have more than {limit} {field.replace('_', ' ')}"
    return None


def validate_profile_fields(fields: dict[str, Any]) -> list[dict[str, str]]:
    """Validate the profile fields present in ``fields``.

    Only keys that are present are checked, which makes this usable for
    both full records and partial updates.
    """
    errors = []
    for field, value in fields.items():
        if field == "name":
            reason = _validate_text(field, value, NAME_PATTERN)
        elif field in ("country", "city"):
            reason = _validate_text(field, value)
        elif field == "phone":
            reason = _validate_phone(value)
        elif field in LIST_LIMITS:
            reason = _validate_list(field, value)
        else:
            continue
        if reason:
            errors.append({"field": field, "reason": reason})
    return errors


def validate_user(fields: dict[str, Any], password: str | None) -> list[dict[str, str]]:
    """Validate a complete new user record, including email and password."""
    errors = []
    if not is_valid_email(fields.get("email")):
        errors.append({"field": "email", "reason": "email must be a valid email address"})
    if not password:
        errors.append({"field": "password", "reason": "password is required"})
    elif not isinstance(password, str):
        errors.append({"field": "password", "reason": "password must be a string"})
    elif len(password) > PASSWORD_MAX_LENGTH:
        errors.append(
            {
                "field": "password",
                "reason": f"password cannot exceed {PASSWORD_MAX_LENGTH} characters",
            }
        )
    elif "\x00" in password:
        errors.append({"field": "password", "reason": "password cannot contain NUL characters"})
    record = {field: None for field in REQUIRED_PROFILE_FIELDS}
    record.update(fields)
    errors.extend(validate_profile_fields(record))
    return errors


def clean_profile_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Trim free-text values; call only after validation has passed."""
    cleaned = dict(fields)
    for field in ("name", "country", "city"):
        if isinstance(cleaned.get(field), str):
            cleaned[field] = cleaned[field].strip()
    return cleaned
