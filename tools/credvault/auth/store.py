"""Credential stores: the persistence side of credvault.

A store keeps one record per username holding the store-assigned user id,
the salt and the salted password digest. Stores never hash anything; they
persist what ``CredentialService`` hands them and enforce username
uniqueness.
"""

from __future__ import annotations

import itertools
import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .errors import DuplicateUsername, StoreError
from .table import DEFAULT_DB_PATH, UserTable, quote_identifier

logger = logging.getLogger(__name__)


def _salt_bytes(value: Any) -> bytes:
    """Normalise a stored salt to bytes.

    Tables created here use a BLOB column. Legacy tables may hold the salt as
    TEXT; its UTF-8 encoding is the byte string that was originally stored.
    """
    if isinstance(value, str):
        return value.encode("utf-8", "surrogatepass")
    return bytes(value)


@dataclass(frozen=True)
class CredentialRecord:
    """Stored credentials for one user."""

    user_id: Any
    username: str
    salt: bytes
    hashed_password: str


class CredentialStore(ABC):
    """Persistence interface used by ``CredentialService``.

    Implementations must make ``insert`` atomic and reject duplicate
    usernames at the storage layer, so concurrent inserts of the same
    username cannot both succeed.
    """

    @abstractmethod
    def insert(self, username: str, hashed_password: str, salt: bytes) -> Any:
        """Persist a new record and return its store-assigned user id.

        Raises:
            DuplicateUsername: If ``username`` is already stored.
            StoreError: On any other persistence failure.
        """

    @abstractmethod
    def lookup(self, username: str) -> Optional[CredentialRecord]:
        """Return the record for ``username``, or None if there is none.

        Raises:
            StoreError: If the store cannot be queried.
        """

    def close(self) -> None:
        """Release store resources. No-op by default."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class SQLiteCredentialStore(CredentialStore):
    """SQLite credential store with configurable table and column names.

    Args:
        table: Validated table/column naming.
        db_path: Path to SQLite database file. Parent directories are created
                 automatically. Ignored when ``connection`` is given.
        connection: Caller-owned connection to use instead of opening one.
                    ``close()`` leaves it open.
        create_schema: Create the table (with a unique username index) if it
                       does not exist yet.
    """

    def __init__(
        self,
        table: UserTable,
        db_path: str = DEFAULT_DB_PATH,
        connection: Optional[sqlite3.Connection] = None,
        create_schema: bool = True,
    ) -> None:
        self.table = table
        self._lock = threading.Lock()
        self._owns_connection = connection is None

        if connection is None:
            try:
                if db_path != ":memory:":
                    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
                connection = sqlite3.connect(db_path, check_same_thread=False)
                connection.execute("PRAGMA journal_mode=WAL")
            except (OSError, sqlite3.Error) as e:
                raise StoreError(f"Cannot open credential database {db_path}: {e}") from e
            logger.debug(f"Opened credential database {db_path}")
        self._conn = connection

        t = quote_identifier(table.table_name)
        uid = quote_identifier(table.user_id_column)
        uname = quote_identifier(table.username_column)
        pw = quote_identifier(table.password_column)
        salt = quote_identifier(table.salt_column)

        self._schema_sql = (
            f"CREATE TABLE IF NOT EXISTS {t} ("
            f"{uid} INTEGER PRIMARY KEY AUTOINCREMENT, "
            f"{uname} TEXT UNIQUE NOT NULL, "
            f"{pw} TEXT NOT NULL, "
            f"{salt} BLOB NOT NULL)"
        )
        self._insert_sql = f"INSERT INTO {t} ({uname}, {pw}, {salt}) VALUES (?, ?, ?)"
        self._lookup_sql = (
            f"SELECT {uid}, {uname}, {salt}, {pw} FROM {t} WHERE {uname} = ?"
        )

        if create_schema:
            self.create_schema()

    def create_schema(self) -> None:
        """Create the credential table if it is missing."""
        with self._lock:
            try:
                with self._conn:
                    self._conn.execute(self._schema_sql)
            except sqlite3.Error as e:
                raise StoreError(
                    f"Failed to create table {self.table.table_name}: {e}"
                ) from e

    def insert(self, username: str, hashed_password: str, salt: bytes) -> int:
        with self._lock:
            try:
                with self._conn:
                    cur = self._conn.execute(
                        self._insert_sql, (username, hashed_password, salt)
                    )
            except sqlite3.IntegrityError as e:
                if "UNIQUE" in str(e):
                    raise DuplicateUsername(username) from e
                raise StoreError(f"Insert rejected: {e}") from e
            except (sqlite3.Error, UnicodeEncodeError) as e:
                raise StoreError(f"Insert failed: {e}") from e
        return cur.lastrowid

    def lookup(self, username: str) -> Optional[CredentialRecord]:
        with self._lock:
            try:
                row = self._conn.execute(self._lookup_sql, (username,)).fetchone()
            except UnicodeEncodeError:
                # insert rejects such usernames, so none can be stored
                return None
            except sqlite3.Error as e:
                raise StoreError(f"Lookup failed: {e}") from e
        if row is None:
            return None
        return CredentialRecord(
            user_id=row[0],
            username=row[1],
            salt=_salt_bytes(row[2]),
            hashed_password=row[3],
        )

    def close(self) -> None:
        """Close the database connection if this store opened it."""
        if self._owns_connection:
            self._conn.close()


class MemoryCredentialStore(CredentialStore):
    """In-process credential store with sequential integer user ids."""

    def __init__(self) -> None:
        self._records: dict[str, CredentialRecord] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def insert(self, username: str, hashed_password: str, salt: bytes) -> int:
        with self._lock:
            if username in self._records:
                raise DuplicateUsername(username)
            user_id = next(self._ids)
            self._records[username] = CredentialRecord(
                user_id=user_id,
                username=username,
                salt=salt,
                hashed_password=hashed_password,
            )
        return user_id

    def lookup(self, username: str) -> Optional[CredentialRecord]:
        with self._lock:
            return self._records.get(username)

    def __len__(self) -> int:
        return len(self._records)
