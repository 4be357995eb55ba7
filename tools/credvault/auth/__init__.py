"""
credvault auth — salted password credentials.

Creates credentials under a fresh per-user salt and verifies
username/password pairs against a pluggable CredentialStore.

Usage:
    from credvault.auth import CredentialService, SQLiteCredentialStore, UserTable

    store = SQLiteCredentialStore(UserTable.default(), db_path=".credvault/credentials.db")
    service = CredentialService(store)
    user_id = service.create_user("alice", "s3cret")
    service.authenticate("alice", "s3cret")  # user_id
    service.authenticate("alice", "wrong")   # None
"""

from .errors import ConfigError, CredentialError, DuplicateUsername, StoreError
from .service import CredentialService
from .store import (
    CredentialRecord,
    CredentialStore,
    MemoryCredentialStore,
    SQLiteCredentialStore,
)
from .table import CredvaultConfig, UserTable, load_config

__all__ = [
    "CredentialService",
    "CredentialStore",
    "CredentialRecord",
    "SQLiteCredentialStore",
    "MemoryCredentialStore",
    "UserTable",
    "CredvaultConfig",
    "load_config",
    "CredentialError",
    "StoreError",
    "DuplicateUsername",
    "ConfigError",
]
