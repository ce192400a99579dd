#!/usr/bin/env python3
"""
carshop -- command-line entry point.

Usage:
  python main.py serve
  python main.py serve --port 8000 --reload
  python main.py create-user muki --fullname "Muki Ja"
  python main.py create-user admin --admin

Environment variables (see core/config.py for the full list):
  PORT          Port to listen on (default 3030).
  SECRET_KEY    Token signing key, at least 32 characters. Required unless DEBUG=true.
  DATABASE_URL  SQLAlchemy URL for users and cars (default: SQLite file carshop.db).
"""

import argparse
import getpass
import sys

from core.config import get_settings


def create_user(user_store, username: str, password: str, fullname: str = "", is_admin: bool = False) -> str:
    """Insert a user straight into the store and return the new id.

    This bypasses UserDirectory on purpose: signup through the API can never
    create an administrator, so this is where admins come from.
    """
    from auth.models import User
    from auth.tokens import hash_password

    user = User(
        username=username,
        fullname=fullname or username,
        score=get_settings().initial_score,
        is_admin=is_admin,
        hashed_password=hash_password(password),
    )
    return user_store.create_user(user)


def _cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    settings = get_settings()
    host = args.host or settings.host
    port = args.port or settings.port
    print(f"App listening on http://{host}:{port}")
    uvicorn.run("asgi:app", host=host, port=port, reload=args.reload)


def _cmd_create_user(args: argparse.Namespace) -> int:
    from sqlalchemy.exc import IntegrityError

    from auth.store import UserStore

    password = args.password or getpass.getpass(f"Password for {args.username}: ")
    if not password:
        print("  [!] Password must not be empty.")
        return 1

    store = UserStore(db_url=get_settings().database_url)
    try:
        user_id = create_user(store, args.username, password, fullname=args.fullname, is_admin=args.admin)
    except IntegrityError:
        print(f"  [!] User '{args.username}' already exists.")
        return 1
    finally:
        store.close()

    role = "admin" if args.admin else "user"
    print(f"  Created {role} '{args.username}' ({user_id}).")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="carshop",
        description="Car shop backend: REST API for cars and users.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default=None, help="Interface to bind (default: HOST or 127.0.0.1)")
    serve.add_argument("--port", type=int, default=None, help="Port to bind (default: PORT or 3030)")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development)")

    create = sub.add_parser("create-user", help="Add a user directly to the database")
    create.add_argument("username")
    create.add_argument("--fullname", default="", help="Display name (default: the username)")
    create.add_argument("--password", default=None, help="Password (prompted when omitted)")
    create.add_argument("--admin", action="store_true", help="Grant admin rights over every car")

    args = parser.parse_args(argv)

    if args.command == "serve":
        _cmd_serve(args)
        return 0
    if args.command == "create-user":
        return _cmd_create_user(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
