"""
Aegis data models.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CredentialEntry:
    """A decrypted credential row from a user's vault."""

    id: int
    platform: str
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class User:
    """
    An authenticated user session.

    The master password is held in memory only for the lifetime of the
    session so the vault key can be derived; it is never written to disk.
    """

    id: int
    username: str
    master_password: str = field(repr=False)
    salt: bytes = field(repr=False)
