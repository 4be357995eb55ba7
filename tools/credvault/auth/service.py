"""Credential creation and password verification on top of a CredentialStore."""

from __future__ import annotations

import logging
from typing import Any, Optional

from .errors import DuplicateUsername
from .hashing import digest_password, digests_match, generate_salt
from .store import CredentialStore

logger = logging.getLogger(__name__)

_DUMMY_SALT = generate_salt()
_DUMMY_HASH = digest_password("dummy", _DUMMY_SALT)


class CredentialService:
    """Salted-hash credential service.

    The service holds no state besides the injected store. It is safe to
    share between threads when the store is.

    Args:
        store: Persistence backend. Owned by the caller.
    """

    def __init__(self, store: CredentialStore) -> None:
        self.store = store

    def create_user(self, username: str, password: str) -> Any:
        """Store credentials for a new user under a fresh random salt.

        Username uniqueness is left to the store.

        Returns:
            The user id assigned by the store.

        Raises:
            DuplicateUsername: If the username is already taken.
            StoreError: If the store fails.
        """
        salt = generate_salt()
        hashed_password = digest_password(password, salt)

        try:
            user_id = self.store.insert(username, hashed_password, salt)
        except DuplicateUsername:
            logger.warning(f"Rejected duplicate username: {username}")
            raise

        logger.info(f"Created user {user_id} ({username})")
        return user_id

    def authenticate(self, username: str, password: str) -> Optional[Any]:
        """Check a username/password pair against the stored digest.

        Unknown usernames and wrong passwords both return None. The unknown
        user path still hashes and compares against a dummy digest so both
        failures do the same work.

        Returns:
            The stored user id on success, otherwise None.

        Raises:
            StoreError: If the store fails.
        """
        record = self.store.lookup(username)
        if record is None:
            digests_match(digest_password(password, _DUMMY_SALT), _DUMMY_HASH)
            logger.debug(f"Authentication failed for {username}")
            return None

        candidate = digest_password(password, record.salt)
        if not digests_match(candidate, record.hashed_password):
            logger.debug(f"Authentication failed for {username}")
            return None

        logger.debug(f"Authenticated user {record.user_id} ({username})")
        return record.user_id
