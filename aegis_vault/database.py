"""
Aegis Database Operations - SQLite Storage

This module provides the thin database interface shared by the master
database (user accounts) and every per-user vault database (encrypted
credentials). It only knows how to run parameterized SQL; all encryption
happens in the service layer before values reach this module.
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

# ==============================================================================
# SCHEMA
# ==============================================================================

CREATE_USERS_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS Users (
        Id INTEGER PRIMARY KEY AUTOINCREMENT,
        Username TEXT NOT NULL UNIQUE,
        MasterPasswordHash TEXT NOT NULL,
        Salt TEXT NOT NULL
    )
"""

CREATE_CREDENTIALS_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS Credentials (
        Id INTEGER PRIMARY KEY,
        EncryptedPlatform TEXT NOT NULL,
        Username TEXT NOT NULL,
        EncryptedPassword TEXT NOT NULL
    )
"""

# ==============================================================================
# DATABASE CLASS
# ==============================================================================

class Database:
    """
    Parameterized-query wrapper around a single SQLite database file.

    A short-lived connection is opened for every statement and closed
    afterwards, so no handle is held between menu actions. Errors raised by
    SQLite are logged and re-raised to the caller unchanged.
    """

    def __init__(self, db_path: str):
        """
        Args:
            db_path (str): Path to the SQLite file. Created on first use.

        Raises:
            ValueError: If db_path is blank
        """
        if not db_path or not str(db_path).strip():
            raise ValueError("db_path must not be blank")

        self.db_path = str(db_path)
        self.closed = False

    def __repr__(self) -> str:
        return f"Database({self.db_path!r})"

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ==========================================================================
    # CONNECTION MANAGEMENT
    # ==========================================================================

    def _connect(self) -> sqlite3.Connection:
        if self.closed:
            raise sqlite3.ProgrammingError(f"Database {self.db_path} is closed")
        return sqlite3.connect(self.db_path)

    def close(self) -> None:
        """Mark the database as closed. Safe to call more than once."""
        if not self.closed:
            logger.debug("Closing database %s", self.db_path)
        self.closed = True

    # ==========================================================================
    # SCHEMA INITIALIZATION
    # ==========================================================================

    def initialize_master_database(self) -> None:
        """Create the Users table if it does not exist yet."""
        try:
            self._execute_script(CREATE_USERS_TABLE_SQL)
        except sqlite3.Error as e:
            logger.error("Error initializing master database %s: %s", self.db_path, e)
            raise
        logger.debug("Master database ready: %s", self.db_path)

    def initialize_vault_database(self) -> None:
        """Create the Credentials table if it does not exist yet."""
        try:
            self._execute_script(CREATE_CREDENTIALS_TABLE_SQL)
        except sqlite3.Error as e:
            logger.error("Error initializing vault database %s: %s", self.db_path, e)
            raise
        logger.debug("Vault database ready: %s", self.db_path)

    def _execute_script(self, sql: str) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(sql)
        finally:
            conn.close()

    # ==========================================================================
    # QUERY EXECUTION
    # ==========================================================================

    @staticmethod
    def _check_query(query: str) -> None:
        if not query or not query.strip():
            raise ValueError("query must not be blank")

    def execute_non_query(self, query: str, params: Sequence[Any] = ()) -> int:
        """
        Run an INSERT/UPDATE/DELETE statement and commit it.

        Args:
            query (str): SQL with ``?`` placeholders
            params (Sequence): Values bound to the placeholders

        Returns:
            int: Number of rows affected
        """
        self._check_query(query)

        conn = self._connect()
        try:
            with conn:
                cursor = conn.execute(query, tuple(params))
                return cursor.rowcount
        except sqlite3.Error as e:
            logger.error("Error executing non-query: %s", e)
            raise
        finally:
            conn.close()

    def execute_scalar(self, query: str, params: Sequence[Any] = ()) -> Optional[Any]:
        """
        Run a query and return the first column of the first row.

        Returns:
            The value, or None when the query produced no rows or a NULL.
        """
        self._check_query(query)

        conn = self._connect()
        try:
            row = conn.execute(query, tuple(params)).fetchone()
        except sqlite3.Error as e:
            logger.error("Error executing scalar query: %s", e)
            raise
        finally:
            conn.close()

        if row is None:
            return None
        return row[0]

    def execute_query(self, query: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """
        Run a SELECT and return every row as a dict keyed by column name.

        Example:
            >>> db.execute_query("SELECT Id FROM Credentials ORDER BY Id")
            [{'Id': 1}, {'Id': 2}]
        """
        self._check_query(query)

        conn = self._connect()
        conn.row_factory = sqlite3.Row
        try:
            rows = conn.execute(query, tuple(params)).fetchall()
        except sqlite3.Error as e:
            logger.error("Error executing query: %s", e)
            raise
        finally:
            conn.close()

        return [dict(row) for row in rows]
