"""
Aegis User Accounts

Account creation and login against the master database. Only a PBKDF2
verifier and its salt are stored; the master password itself is kept in
the returned User object for the duration of the session.
"""

import base64
import logging
from typing import Optional

from . import crypto
from .database import Database
from .models import User
from .validation import validate_master_password, validate_username

logger = logging.getLogger(__name__)


class UserValidationError(ValueError):
    """Username or master password does not meet the account policy."""


class UsernameTakenError(Exception):
    """An account with the requested username already exists."""


class UserService:
    """
    Creates and authenticates users stored in the master database.

    Args:
        database (Database): The master database holding the Users table
    """

    def __init__(self, database: Database):
        if database is None:
            raise ValueError("database must not be None")
        self.db = database

    def create_user(self, username: str, password: str) -> User:
        """
        Register a new account and return its authenticated session user.

        Raises:
            UserValidationError: If the username or password breaks policy
            UsernameTakenError: If the username is already registered
        """
        is_valid, message = validate_username(username)
        if not is_valid:
            raise UserValidationError(message)

        is_valid, message = validate_master_password(password)
        if not is_valid:
            raise UserValidationError(message)

        existing = self.db.execute_scalar(
            "SELECT COUNT(1) FROM Users WHERE Username = ?",
            (username,)
        )
        if existing:
            raise UsernameTakenError("This username is already taken.")

        password_hash, salt = crypto.hash_master_password(password)

        self.db.execute_non_query(
            "INSERT INTO Users (Username, MasterPasswordHash, Salt) VALUES (?, ?, ?)",
            (username, password_hash, base64.b64encode(salt).decode("ascii"))
        )
        logger.info("Created account %s", username)

        return self.authenticate_user(username, password)

    def authenticate_user(self, username: str, password: str) -> Optional[User]:
        """
        Verify login credentials.

        Returns:
            Optional[User]: The session user, or None if the username is
                            unknown, either field is blank, or the password
                            does not match.
        """
        if not username or not username.strip() or not password or not password.strip():
            return None

        rows = self.db.execute_query(
            "SELECT Id, Username, MasterPasswordHash, Salt FROM Users WHERE Username = ?",
            (username,)
        )
        if not rows:
            logger.warning("Login attempt for unknown account")
            return None

        row = rows[0]
        salt = base64.b64decode(row["Salt"])

        if not crypto.verify_master_password(password, row["MasterPasswordHash"], salt):
            logger.warning("Failed login for account %s", username)
            return None

        logger.info("Account %s authenticated", username)
        return User(
            id=row["Id"],
            username=row["Username"],
            master_password=password,
            salt=salt,
        )
