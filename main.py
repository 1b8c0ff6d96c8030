#!/usr/bin/env python3
"""
Marinete Auth -- command-line access to the user store and token service.

Usage:
  python main.py create-user ana@example.com --password s3cret
  python main.py create-user ops@example.com --password s3cret --role admin
  python main.py list-users
  python main.py disable-user ana@example.com
  python main.py issue ana@example.com --password s3cret
  python main.py refresh "Bearer eyJhbGciOi..."

Environment variables:
  SECRET_KEY    Signing key (>= 32 chars). Required unless DEBUG=true.
  DATABASE_URL  SQLAlchemy URL of the user store.
"""

import argparse
import sys

from sqlalchemy.exc import IntegrityError

from auth.errors import AuthError
from auth.models import User
from auth.service import TokenService, validate_credentials
from auth.store import UserStore
from auth.tokens import JwtCodec, hash_password
from auth.verifier import StoreCredentialVerifier
from core.config import get_settings


def _build_service(store: UserStore) -> TokenService:
    settings = get_settings()
    codec = JwtCodec(settings.secret_key, settings.token_expire_seconds, algorithm=settings.token_algorithm)
    return TokenService(StoreCredentialVerifier(store), codec)


def _print_errors(errors: list[str]) -> None:
    for message in errors:
        print(f"  [!] {message}", file=sys.stderr)


def cmd_create_user(store: UserStore, args: argparse.Namespace) -> int:
    errors = validate_credentials(args.email, args.password)
    if errors:
        _print_errors(errors)
        return 1
    try:
        user_id = store.create_user(User(email=args.email, role=args.role, hashed_password=hash_password(args.password)))
    except IntegrityError:
        _print_errors([f"A user with email {args.email} already exists."])
        return 1
    print(f"Created user {args.email} (id={user_id}, role={args.role}).")
    return 0


def cmd_list_users(store: UserStore, args: argparse.Namespace) -> int:
    users = store.list_users()
    if not users:
        print("No users.")
        return 0
    for user in users:
        status = "active" if user.is_active else "disabled"
        print(f"{user.id:>5}  {user.email:<40} {user.role:<6} {status}")
    return 0


def cmd_set_active(store: UserStore, args: argparse.Namespace) -> int:
    """Enable or disable an account. Disabled accounts cannot obtain new tokens."""
    user = store.get_by_email(args.email)
    if user is None:
        _print_errors([f"No user with email {args.email}."])
        return 1
    store.set_active(user.id, args.active)
    print(f"{'Enabled' if args.active else 'Disabled'} user {user.email}.")
    return 0


def cmd_issue(store: UserStore, args: argparse.Namespace) -> int:
    try:
        token = _build_service(store).issue_token(args.email, args.password)
    except AuthError as exc:
        _print_errors(exc.messages)
        return 1
    print(token)
    return 0


def cmd_refresh(store: UserStore, args: argparse.Namespace) -> int:
    try:
        token = _build_service(store).refresh_token(args.token)
    except AuthError as exc:
        _print_errors(exc.messages)
        return 1
    print(token)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="marinete-auth",
        description="Manage users and issue JSON Web Tokens.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    create = sub.add_parser("create-user", help="Add a user to the credential store")
    create.add_argument("email")
    create.add_argument("--password", required=True)
    create.add_argument("--role", choices=["user", "admin"], default="user")
    create.set_defaults(func=cmd_create_user)

    list_users = sub.add_parser("list-users", help="List accounts in the credential store")
    list_users.set_defaults(func=cmd_list_users)

    disable = sub.add_parser("disable-user", help="Block an account from obtaining new tokens")
    disable.add_argument("email")
    disable.set_defaults(func=cmd_set_active, active=False)

    enable = sub.add_parser("enable-user", help="Re-enable a disabled account")
    enable.add_argument("email")
    enable.set_defaults(func=cmd_set_active, active=True)

    issue = sub.add_parser("issue", help="Authenticate and print a token")
    issue.add_argument("email")
    issue.add_argument("--password", required=True)
    issue.set_defaults(func=cmd_issue)

    refresh = sub.add_parser("refresh", help="Exchange a token (with or without 'Bearer ') for a new one")
    refresh.add_argument("token")
    refresh.set_defaults(func=cmd_refresh)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    store = UserStore(get_settings().database_url)
    try:
        return args.func(store, args)
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
