"""
Aegis Validation Module
Input validation for accounts and credential entries
"""

import re
from typing import Tuple

import email_validator

# Account policy
MIN_USERNAME_LENGTH = 5
MAX_USERNAME_LENGTH = 16
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128

# Name of the master database file; a user vault with this name would collide
RESERVED_USERNAME = "aegis"

# Login attempts allowed before the program exits
MAX_LOGIN_ATTEMPTS = 5

USERNAME_RULES_MESSAGE = (
    f"Username must be {MIN_USERNAME_LENGTH}-{MAX_USERNAME_LENGTH} characters long "
    f"and contain only letters and numbers."
)

PASSWORD_RULES_MESSAGE = (
    f"Master password needs to be at least {MIN_PASSWORD_LENGTH} characters long "
    f"with a limit of {MAX_PASSWORD_LENGTH} characters."
)


def validate_username(username: str) -> Tuple[bool, str]:
    """
    Enforce account username rules

    Usernames double as vault file names, so they are restricted to
    letters and digits and may not shadow the master database.

    Returns:
        (is_valid, validation_message)
    """
    if not username or not username.strip():
        return False, USERNAME_RULES_MESSAGE

    if len(username) < MIN_USERNAME_LENGTH or len(username) > MAX_USERNAME_LENGTH:
        return False, USERNAME_RULES_MESSAGE

    if not username.isalnum():
        return False, USERNAME_RULES_MESSAGE

    if username.lower() == RESERVED_USERNAME:
        return False, "This username is reserved for the master database."

    return True, "Username accepted"


def validate_master_password(password: str) -> Tuple[bool, str]:
    """
    Enforce master password length limits

    Returns:
        (is_valid, validation_message)
    """
    if not password or not password.strip():
        return False, PASSWORD_RULES_MESSAGE

    if len(password) < MIN_PASSWORD_LENGTH or len(password) > MAX_PASSWORD_LENGTH:
        return False, PASSWORD_RULES_MESSAGE

    return True, "Master password accepted"


def validate_email(email: str) -> bool:
    """
    Validate email syntax using python-email-validator

    Special-use domains such as .local and .test are accepted.

    Returns:
        True if email is valid
    """
    if not email:
        return True

    try:
        email_validator.validate_email(
            email, check_deliverability=False, globally_deliverable=False
        )
        return True
    except email_validator.EmailNotValidError:
        return False


def looks_like_email(value: str) -> bool:
    """Heuristic used before running full email validation."""
    return bool(re.search(r"@.+\.", value or ""))


def validate_credential_fields(platform: str, username: str, password: str) -> Tuple[bool, str]:
    """
    Validate a credential before it is encrypted and stored

    Returns:
        (is_valid, validation_message)
    """
    fields = (("Platform", platform), ("Username", username), ("Password", password))
    for name, value in fields:
        if not value or not value.strip():
            return False, f"{name} required"

    if looks_like_email(username) and not validate_email(username):
        return False, "Invalid email format"

    return True, "Entry validation passed"


def validate_entry_id(text: str) -> Tuple[bool, str]:
    """
    Validate a user-typed entry identifier

    Returns:
        (is_valid, validation_message)
    """
    text = (text or "").strip()
    if not text.isdecimal() or int(text) < 1:
        return False, "Entry ID must be a positive number"

    return True, "Entry ID accepted"
