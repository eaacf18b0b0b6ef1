"""Input checks shared by the lifecycle services."""

from __future__ import annotations

import re

from scolarite.services.exceptions import ValidationError

DEPARTMENT_CODE_PATTERN = re.compile(r"^[A-Za-z0-9]+$")
PHONE_PATTERN = re.compile(r"^[+]?[(]?[0-9]{1,4}[)]?[-\s./0-9]*$")
EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
MIN_PHONE_DIGITS = 8
MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 8
PASSWORD_SPECIAL_CHARS = "!@#$%^&*(),.?\":{}|<>"


def is_blank(value: str | None) -> bool:
    """True for None, empty or whitespace-only strings."""
    return value is None or not value.strip()


def require(value: str | None, label: str) -> str:
    """Return the stripped value, or raise if it is blank."""
    if value is None or not value.strip():
        raise ValidationError(f"{label} is required")
    return value.strip()


def optional(value: str | None) -> str | None:
    """Strip a value, turning blank strings into None."""
    if value is None or not value.strip():
        return None
    return value.strip()


def is_valid_department_code(code: str | None) -> bool:
    if not code:
        return False
    return DEPARTMENT_CODE_PATTERN.match(code) is not None


def is_valid_phone(phone: str) -> bool:
    """Digits, spaces, dashes, dots, parentheses and a leading +, with at least 8 digits."""
    digits = re.sub(r"[^0-9]", "", phone)
    return PHONE_PATTERN.match(phone) is not None and len(digits) >= MIN_PHONE_DIGITS


def is_valid_email(email: str) -> bool:
    return EMAIL_PATTERN.match(email) is not None


def check_phone(phone: str | None) -> str | None:
    """Validate an optional phone number.

    Returns:
        The stripped phone number, or None when absent

    Raises:
        ValidationError: If a phone number is present but badly formatted
    """
    phone = optional(phone)
    if phone is not None and not is_valid_phone(phone):
        raise ValidationError(f"Invalid phone number format: '{phone}'")
    return phone


def check_email(email: str | None) -> str:
    """Validate a required email address and normalize it to lower case."""
    email = require(email, "Email")
    if not is_valid_email(email):
        raise ValidationError(f"Invalid email format: '{email}'")
    return email.lower()


def check_username(username: str | None) -> str:
    """Validate a required username of at least three characters."""
    username = require(username, "Username")
    if len(username) < MIN_USERNAME_LENGTH:
        raise ValidationError(
            f"Username must be at least {MIN_USERNAME_LENGTH} characters long"
        )
    return username


def check_password_strength(password: str | None) -> str:
    """Validate password strength.

    Rules: at least 8 characters, one upper-case letter, one lower-case
    letter, one digit and one special character.

    Raises:
        ValidationError: Listing every rule the password breaks
    """
    if not password:
        raise ValidationError("Password is required")

    problems = []
    if len(password) < MIN_PASSWORD_LENGTH:
        problems.append(f"at least {MIN_PASSWORD_LENGTH} characters")
    if not re.search(r"[A-Z]", password):
        problems.append("an upper-case letter")
    if not re.search(r"[a-z]", password):
        problems.append("a lower-case letter")
    if not re.search(r"[0-9]", password):
        problems.append("a digit")
    if not any(c in PASSWORD_SPECIAL_CHARS for c in password):
        problems.append("a special character")

    if problems:
        raise ValidationError("Password must contain " + ", ".join(problems))
    return password
