"""
credvault — salted password credential storage and verification.

Components:
    - CredentialService: creates users and authenticates username/password pairs
    - CredentialStore: abstract persistence interface (SQLite and in-memory backends)
    - UserTable: validated table/column naming for the backing store

Usage:
    python3 tools/credvault/manage.py create-user --username alice
    python3 tools/credvault/manage.py authenticate --username alice
"""

__version__ = "0.1.0"
__author__ = "credvault Team"

from .auth import CredentialService, CredentialStore, UserTable

__all__ = [
    "CredentialService",
    "CredentialStore",
    "UserTable",
]
