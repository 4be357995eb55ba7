#!/usr/bin/env python3
"""Unit tests for credential table naming and config loading."""

import importlib
import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "tools"))

table_mod = importlib.import_module("credvault.auth.table")
errors_mod = importlib.import_module("credvault.auth.errors")
UserTable = table_mod.UserTable
load_config = table_mod.load_config
ConfigError = errors_mod.ConfigError


def _table(**overrides):
    values = {
        "table_name": "accounts",
        "username_column": "login",
        "password_column": "pw_hash",
        "salt_column": "pw_salt",
        "user_id_column": "account_id",
    }
    values.update(overrides)
    return UserTable(**values)


class TestUserTable:
    def test_valid_names(self):
        table = _table()
        assert table.table_name == "accounts"
        assert table.columns() == ("account_id", "login", "pw_hash", "pw_salt")

    def test_is_immutable(self):
        table = _table()
        with pytest.raises(AttributeError):
            table.table_name = "other"

    @pytest.mark.parametrize(
        "field", ["table_name", "username_column", "password_column", "salt_column", "user_id_column"]
    )
    def test_missing_field_fails_fast(self, field):
        with pytest.raises(ConfigError, match=field):
            _table(**{field: ""})

    def test_none_field_fails_fast(self):
        with pytest.raises(ConfigError, match="salt_column"):
            _table(salt_column=None)

    @pytest.mark.parametrize(
        "name",
        [
            "users; DROP TABLE users",
            'users"',
            "1users",
            "user name",
            "users--",
            "x" * 64,
        ],
    )
    def test_rejects_unsafe_identifiers(self, name):
        with pytest.raises(ConfigError, match="not a valid identifier"):
            _table(table_name=name)

    def test_rejects_duplicate_columns(self):
        with pytest.raises(ConfigError, match="distinct"):
            _table(password_column="login")

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            _table(table_name="bad name")

    def test_default(self):
        table = UserTable.default()
        assert table.table_name == "users"
        assert table.username_column == "username"
        assert table.user_id_column == "user_id"


class TestFromMapping:
    def test_valid_mapping(self):
        table = UserTable.from_mapping(
            {
                "table": "members",
                "username_column": "name",
                "password_column": "hash",
                "salt_column": "salt",
                "user_id_column": "id",
            }
        )
        assert table == UserTable("members", "name", "hash", "salt", "id")

    def test_missing_key(self):
        with pytest.raises(ConfigError, match="salt_column"):
            UserTable.from_mapping(
                {
                    "table": "members",
                    "username_column": "name",
                    "password_column": "hash",
                    "user_id_column": "id",
                }
            )

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="Invalid user_table config"):
            UserTable.from_mapping(
                {
                    "table": "members",
                    "username_column": "name",
                    "password_column": "hash",
                    "salt_column": "salt",
                    "user_id_column": "id",
                    "email_column": "email",
                }
            )

    def test_identifier_checked_after_schema(self):
        with pytest.raises(ConfigError, match="not a valid identifier"):
            UserTable.from_mapping(
                {
                    "table": "members WHERE 1=1",
                    "username_column": "name",
                    "password_column": "hash",
                    "salt_column": "salt",
                    "user_id_column": "id",
                }
            )


class TestLoadConfig:
    def test_defaults_without_path(self):
        config = load_config()
        assert config.db_path == table_mod.DEFAULT_DB_PATH
        assert config.user_table == UserTable.default()

    def test_loads_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "db_path": str(tmp_path / "creds.db"),
                    "user_table": {
                        "table": "accounts",
                        "username_column": "login",
                        "password_column": "pw_hash",
                        "salt_column": "pw_salt",
                        "user_id_column": "account_id",
                    },
                }
            )
        )

        config = load_config(path)
        assert config.db_path == str(tmp_path / "creds.db")
        assert config.user_table == _table()

    def test_partial_file_uses_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"db_path": "other.db"}))

        config = load_config(str(path))
        assert config.db_path == "other.db"
        assert config.user_table == UserTable.default()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Failed to load config"):
            load_config(tmp_path / "nope.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="Failed to load config"):
            load_config(path)

    def test_wrong_types(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"db_path": 42}))
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(path)

    def test_non_utf8_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_bytes(b'{"db_path": "\xff"}')
        with pytest.raises(ConfigError, match="Failed to load config"):
            load_config(path)
