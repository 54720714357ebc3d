"""
Maintenance commands for the catalog: users, configuration and encryption.
"""
import argparse
import os
import sys
from pathlib import Path

from . import config
from .database.db import DBManager
from .database.ops import DBOperations
from .exceptions import DatabaseError
from .settings import AppConfig, EncryptionManager
from .users import UserManager


def resolve_db_path(args) -> Path:
    if args.db:
        return args.db
    if not args.data_dir:
        raise SystemExit(f"No catalog given (use --db, --data-dir or ${config.DATA_DIR_ENV})")
    return Path(args.data_dir) / config.CATALOG_NAME


def cmd_user_add(db_ops: DBOperations, args) -> int:
    users = UserManager(db_ops)
    try:
        users.create_user(args.uid, args.display_name)
    except (ValueError, DatabaseError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if args.seen:
        users.record_login(args.uid)
    print(f"Created user {args.uid}")
    return 0


def cmd_user_login(db_ops: DBOperations, args) -> int:
    if not UserManager(db_ops).record_login(args.uid):
        print(f"No user {args.uid}", file=sys.stderr)
        return 1
    print(f"Recorded login for {args.uid}")
    return 0


def cmd_user_delete(db_ops: DBOperations, args) -> int:
    if not UserManager(db_ops).delete_user(args.uid):
        print(f"No user {args.uid}", file=sys.stderr)
        return 1
    print(f"Deleted user {args.uid}")
    return 0


def cmd_user_list(db_ops: DBOperations, args) -> int:
    print("uid                  | seen | display_name")
    print("---------------------+------+-------------")
    for user in UserManager(db_ops).list_users():
        print(f"{user.uid.ljust(20)} | {'yes' if user.seen else 'no '}  | {user.display_name or ''}")
    return 0


def cmd_config_system_set(db_ops: DBOperations, args) -> int:
    AppConfig(db_ops).set_system_value(args.key, args.value)
    print(f"System config value {args.key} set to {args.value}")
    return 0


def cmd_config_app_set(db_ops: DBOperations, args) -> int:
    AppConfig(db_ops).set_app_value(args.app, args.key, args.value)
    print(f"Config value {args.key} for app {args.app} set to {args.value}")
    return 0


def cmd_config_get(db_ops: DBOperations, args) -> int:
    value = db_ops.get_config_value(args.app, args.key)
    if value is None:
        return 1
    print(value)
    return 0


def cmd_encryption(enabled: bool):
    def _run(db_ops: DBOperations, args) -> int:
        EncryptionManager(AppConfig(db_ops)).set_enabled(enabled)
        print(f"Encryption {'enabled' if enabled else 'disabled'}")
        return 0
    return _run


def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="preview-admin", description="Manage the preview generator catalog")
    p.add_argument("--data-dir", type=Path, default=os.environ.get(config.DATA_DIR_ENV))
    p.add_argument("--db", type=Path, default=None)

    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("user:add", help="Create a user")
    s.add_argument("uid")
    s.add_argument("--display-name", default=None)
    s.add_argument("--seen", action="store_true", help="Also record a login")
    s.set_defaults(func=cmd_user_add)

    s = sub.add_parser("user:login", help="Record a login for a user")
    s.add_argument("uid")
    s.set_defaults(func=cmd_user_login)

    s = sub.add_parser("user:delete", help="Delete a user")
    s.add_argument("uid")
    s.set_defaults(func=cmd_user_delete)

    s = sub.add_parser("user:list", help="List users")
    s.set_defaults(func=cmd_user_list)

    s = sub.add_parser("config:system:set", help="Set a system value, e.g. preview_max_x")
    s.add_argument("key")
    s.add_argument("value")
    s.set_defaults(func=cmd_config_system_set)

    s = sub.add_parser("config:app:set", help='Set an app value, e.g. previewgenerator squareSizes "32 256"')
    s.add_argument("app")
    s.add_argument("key")
    s.add_argument("value")
    s.set_defaults(func=cmd_config_app_set)

    s = sub.add_parser("config:get", help="Print a value (use app 'system' for system values)")
    s.add_argument("app")
    s.add_argument("key")
    s.set_defaults(func=cmd_config_get)

    sub.add_parser("encryption:enable").set_defaults(func=cmd_encryption(True))
    sub.add_parser("encryption:disable").set_defaults(func=cmd_encryption(False))

    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    db_path = resolve_db_path(args)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with DBManager(db_path) as conn:
        return args.func(DBOperations(conn), args)


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
