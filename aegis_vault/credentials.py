"""
Aegis Credential Operations

CRUD operations on a user's vault database. Platform, username and
password are each encrypted independently with the session key before
they are written, and decrypted in memory when read back.
"""

import logging
from typing import Dict, List

from .crypto import decrypt_field, encrypt_field
from .database import Database
from .models import CredentialEntry

logger = logging.getLogger(__name__)

SELECT_ALL_SQL = (
    "SELECT Id, EncryptedPlatform, Username, EncryptedPassword "
    "FROM Credentials ORDER BY Id"
)


class CredentialService:
    """
    Manages the encrypted credentials of one vault.

    Args:
        database (Database): The user's vault database
    """

    def __init__(self, database: Database):
        if database is None:
            raise ValueError("database must not be None")
        self.db = database

    # ==========================================================================
    # CREATE / READ
    # ==========================================================================

    def add_credential(self, platform: str, username: str, password: str, key: bytes) -> int:
        """
        Encrypt and store a new credential.

        Returns:
            int: The id assigned to the new entry
        """
        encrypted_platform = encrypt_field(platform, key)
        encrypted_username = encrypt_field(username, key)
        encrypted_password = encrypt_field(password, key)

        new_id = self.get_next_available_id()

        self.db.execute_non_query(
            "INSERT INTO Credentials (Id, EncryptedPlatform, Username, EncryptedPassword) "
            "VALUES (?, ?, ?, ?)",
            (new_id, encrypted_platform, encrypted_username, encrypted_password)
        )
        logger.debug("Stored credential %d in %s", new_id, self.db.db_path)
        return new_id

    def list_credentials(self, key: bytes) -> List[CredentialEntry]:
        """Return every credential in the vault, decrypted, ordered by id."""
        rows = self.db.execute_query(SELECT_ALL_SQL)
        return [self._decrypt_row(row, key) for row in rows]

    def search_credentials(self, query: str, key: bytes) -> List[CredentialEntry]:
        """
        Find credentials whose platform contains query, ignoring case.

        Platforms are encrypted at rest, so every row is decrypted and
        matched in memory.
        """
        needle = (query or "").casefold()
        matches = []

        for row in self.db.execute_query(SELECT_ALL_SQL):
            platform = decrypt_field(row["EncryptedPlatform"], key)
            if needle in platform.casefold():
                matches.append(CredentialEntry(
                    id=row["Id"],
                    platform=platform,
                    username=decrypt_field(row["Username"], key),
                    password=decrypt_field(row["EncryptedPassword"], key),
                ))

        return matches

    # ==========================================================================
    # UPDATE / DELETE
    # ==========================================================================

    def update_password(self, entry_id: int, new_password: str, key: bytes) -> bool:
        """
        Replace the stored password of an entry.

        Returns:
            bool: False if no entry has this id
        """
        if not self.credential_exists(entry_id):
            return False

        self.db.execute_non_query(
            "UPDATE Credentials SET EncryptedPassword = ? WHERE Id = ?",
            (encrypt_field(new_password, key), entry_id)
        )
        logger.debug("Updated password of credential %d", entry_id)
        return True

    def delete_credential(self, entry_id: int) -> bool:
        """
        Permanently remove an entry.

        Returns:
            bool: False if no entry has this id
        """
        if not self.credential_exists(entry_id):
            return False

        self.db.execute_non_query("DELETE FROM Credentials WHERE Id = ?", (entry_id,))
        logger.debug("Deleted credential %d", entry_id)
        return True

    # ==========================================================================
    # HELPERS
    # ==========================================================================

    def credential_exists(self, entry_id: int) -> bool:
        count = self.db.execute_scalar(
            "SELECT COUNT(*) FROM Credentials WHERE Id = ?",
            (entry_id,)
        )
        return bool(count)

    def get_next_available_id(self) -> int:
        """
        Return the smallest positive id not currently in use.

        Ids freed by deletions are reused before the sequence grows.
        """
        rows = self.db.execute_query("SELECT Id FROM Credentials ORDER BY Id")
        used = {row["Id"] for row in rows}

        next_id = 1
        while next_id in used:
            next_id += 1
        return next_id

    @staticmethod
    def _decrypt_row(row: Dict, key: bytes) -> CredentialEntry:
        return CredentialEntry(
            id=row["Id"],
            platform=decrypt_field(row["EncryptedPlatform"], key),
            username=decrypt_field(row["Username"], key),
            password=decrypt_field(row["EncryptedPassword"], key),
        )
