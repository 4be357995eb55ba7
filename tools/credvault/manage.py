#!/usr/bin/env python3
"""CLI management tool for stored credentials.

Provides commands to:
- Create the credential table
- Add users with salted SHA-512 password digests
- Check a username/password pair
"""

import argparse
import getpass
import logging
import sys
from pathlib import Path

# Ensure credvault package is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from credvault.auth import (
    ConfigError,
    CredentialService,
    DuplicateUsername,
    SQLiteCredentialStore,
    StoreError,
    load_config,
)

logger = logging.getLogger("credvault.manage")


def _read_password(args) -> str:
    if args.password:
        return args.password
    return getpass.getpass(f"Password for {args.username}: ")


def init_db(args, service: CredentialService) -> int:
    """Create the configured credential table."""
    service.store.create_schema()
    print(f"✓ Table ready: {service.store.table.table_name}")
    return 0


def create_user(args, service: CredentialService) -> int:
    """Add a new user with optional password prompt."""
    username = args.username
    password = _read_password(args)
    if not password:
        print("Error: Password cannot be empty", file=sys.stderr)
        return 1

    try:
        user_id = service.create_user(username, password)
    except DuplicateUsername:
        print(f"Error: Username '{username}' already exists", file=sys.stderr)
        return 1

    print(f"✓ User created: {user_id} ({username})")
    return 0


def authenticate(args, service: CredentialService) -> int:
    """Check a username/password pair."""
    username = args.username
    password = _read_password(args)

    user_id = service.authenticate(username, password)
    if user_id is None:
        print("Error: Invalid username or password", file=sys.stderr)
        return 1

    print(f"✓ Authenticated: {user_id} ({username})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Manage salted password credentials"
    )
    parser.add_argument(
        "--config",
        help="Path to JSON config with db_path and user_table (optional)",
    )
    parser.add_argument(
        "--db-path",
        help="Path to SQLite database (overrides config db_path)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # init-db command
    subparsers.add_parser("init-db", help="Create the credential table")

    # create-user command
    create_parser = subparsers.add_parser("create-user", help="Add a new user")
    create_parser.add_argument("--username", required=True, help="Username")
    create_parser.add_argument("--password", help="Password (prompted if omitted)")

    # authenticate command
    auth_parser = subparsers.add_parser(
        "authenticate", help="Verify a username and password"
    )
    auth_parser.add_argument("--username", required=True, help="Username")
    auth_parser.add_argument("--password", help="Password (prompted if omitted)")

    return parser


COMMANDS = {
    "init-db": init_db,
    "create-user": create_user,
    "authenticate": authenticate,
}


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    try:
        config = load_config(args.config)
        store = SQLiteCredentialStore(
            config.user_table,
            db_path=args.db_path or config.db_path,
        )
    except (ConfigError, StoreError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    service = CredentialService(store)

    try:
        return COMMANDS[args.command](args, service)
    except StoreError as e:
        logger.error(f"Store error during {args.command}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
