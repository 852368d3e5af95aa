"""
Secure Password Generation Module for Aegis Vault

Generates random passwords for new credentials. All randomness comes from
the secrets module, which draws from the operating system CSPRNG and is
suitable for cryptographic use.
"""

import secrets

# Default length of generated passwords
GENERATED_PASSWORD_LENGTH = 32

# Letters, digits and a set of symbols accepted by most sign-up forms
PASSWORD_CHARACTER_SET = (
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "0123456789"
    "@&$?!#*^+-."
)

# ==============================================================================
# CUSTOM EXCEPTION CLASSES
# ==============================================================================

class PasswordGenerationError(Exception):
    """
    Raised when password generation fails due to invalid parameters.
    """
    pass

# ==============================================================================
# PASSWORD GENERATION
# ==============================================================================

def generate_random_password(length: int = GENERATED_PASSWORD_LENGTH,
                             charset: str = PASSWORD_CHARACTER_SET) -> str:
    """
    Generate a cryptographically secure random password.

    Each character is drawn independently and uniformly from charset.

    Args:
        length (int): Number of characters. Default: GENERATED_PASSWORD_LENGTH (32)
        charset (str): Characters to draw from. Default: PASSWORD_CHARACTER_SET

    Returns:
        str: The generated password

    Raises:
        PasswordGenerationError: If length is below 1 or charset is empty

    Examples:
        >>> len(generate_random_password())
        32
        >>> set(generate_random_password(8, charset="ab")) <= {"a", "b"}
        True
    """
    if length < 1:
        raise PasswordGenerationError("Password length must be at least 1 character")

    if not charset:
        raise PasswordGenerationError("Character set must not be empty")

    return ''.join(secrets.choice(charset) for _ in range(length))
