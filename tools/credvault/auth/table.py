"""Credential table naming and JSON configuration loading.

``UserTable`` names the table and columns a store reads and writes. Names are
checked against an identifier allow-list once, when the table is built, and
are then interpolated into SQL as trusted strings. Only user data is ever
bound as a query parameter.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import jsonschema

from .errors import ConfigError

DEFAULT_DB_PATH = ".credvault/credentials.db"

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")

USER_TABLE_SCHEMA = {
    "type": "object",
    "required": [
        "table",
        "username_column",
        "password_column",
        "salt_column",
        "user_id_column",
    ],
    "properties": {
        "table": {"type": "string", "minLength": 1},
        "username_column": {"type": "string", "minLength": 1},
        "password_column": {"type": "string", "minLength": 1},
        "salt_column": {"type": "string", "minLength": 1},
        "user_id_column": {"type": "string", "minLength": 1},
    },
    "additionalProperties": False,
}

CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "db_path": {"type": "string", "minLength": 1},
        "user_table": USER_TABLE_SCHEMA,
    },
}


def quote_identifier(name: str) -> str:
    """Double-quote an identifier that already passed the allow-list."""
    return f'"{name}"'


@dataclass(frozen=True)
class UserTable:
    """Table and column names for stored credentials.

    Attributes:
        table_name: Table holding one row per user.
        username_column: Unique username column.
        password_column: Salted password digest column.
        salt_column: Per-user salt column.
        user_id_column: Store-assigned user id column.
    """

    table_name: str
    username_column: str
    password_column: str
    salt_column: str
    user_id_column: str

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not value:
                raise ConfigError(f"UserTable.{f.name} is required")
            if not isinstance(value, str) or not _IDENTIFIER_RE.match(value):
                raise ConfigError(
                    f"UserTable.{f.name} is not a valid identifier: {value!r}"
                )

        columns = self.columns()
        if len(set(c.lower() for c in columns)) != len(columns):
            raise ConfigError(f"UserTable column names must be distinct: {columns}")

    def columns(self) -> tuple[str, ...]:
        return (
            self.user_id_column,
            self.username_column,
            self.password_column,
            self.salt_column,
        )

    @classmethod
    def default(cls) -> "UserTable":
        return cls(
            table_name="users",
            username_column="username",
            password_column="password",
            salt_column="salt",
            user_id_column="user_id",
        )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "UserTable":
        """Build a UserTable from its JSON config shape.

        Raises:
            ConfigError: If the mapping fails schema or identifier validation.
        """
        try:
            jsonschema.validate(dict(mapping), USER_TABLE_SCHEMA)
        except jsonschema.ValidationError as e:
            raise ConfigError(f"Invalid user_table config: {e.message}") from e

        return cls(
            table_name=mapping["table"],
            username_column=mapping["username_column"],
            password_column=mapping["password_column"],
            salt_column=mapping["salt_column"],
            user_id_column=mapping["user_id_column"],
        )


@dataclass(frozen=True)
class CredvaultConfig:
    """Loaded configuration: database location plus table naming."""

    db_path: str
    user_table: UserTable


def load_config(config_path: str | Path | None = None) -> CredvaultConfig:
    """Load configuration from a JSON file.

    With no path, the defaults are returned. Missing keys fall back to
    ``DEFAULT_DB_PATH`` and ``UserTable.default()``.

    Raises:
        ConfigError: If the file cannot be read, is not JSON, or fails
            validation.
    """
    if config_path is None:
        return CredvaultConfig(db_path=DEFAULT_DB_PATH, user_table=UserTable.default())

    path = Path(config_path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e

    try:
        jsonschema.validate(data, CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e.message}") from e

    table_data = data.get("user_table")
    user_table = (
        UserTable.from_mapping(table_data) if table_data else UserTable.default()
    )
    return CredvaultConfig(
        db_path=data.get("db_path", DEFAULT_DB_PATH),
        user_table=user_table,
    )
