"""Error types raised by the credential store and service.

Failed logins are not errors: ``CredentialService.authenticate`` returns
``None`` for both unknown users and wrong passwords.
"""


class CredentialError(Exception):
    """Base class for all credvault errors."""


class StoreError(CredentialError):
    """The credential store could not complete a query."""


class DuplicateUsername(StoreError):
    """An insert was rejected because the username already exists."""

    def __init__(self, username: str) -> None:
        super().__init__(f"Username '{username}' already exists")
        self.username = username


class ConfigError(CredentialError, ValueError):
    """Invalid or incomplete credential table configuration."""
