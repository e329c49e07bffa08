"""
Create a user (e.g. the first admin) without going through POST /register. Run from project root:
  python -m campus_pulse.scripts.create_user USERNAME PASSWORD [role]
Example:
  python -m campus_pulse.scripts.create_user moderator your-secure-password admin
"""
import argparse
import sys

from campus_pulse.core.config import get_settings
from campus_pulse.core.database import Database
from campus_pulse.core.errors import ConflictError
from campus_pulse.core.security import PASSWORD_MAX_LEN, USERNAME_MAX_LEN
from campus_pulse.services.users import create_user


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Create a Campus Pulse user.")
    parser.add_argument("username", help=f"Username (1-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password (1-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role", nargs="?", default=settings.default_role, choices=settings.USER_ROLES
    )
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not username or len(username) > USERNAME_MAX_LEN:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not args.password or len(args.password) > PASSWORD_MAX_LEN:
        print(f"Password must be 1-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    database = Database(settings)
    db = database.session()
    try:
        create_user(db, username, args.password, args.role, rounds=settings.BCRYPT_ROUNDS)
    except ConflictError:
        print(f"User '{username}' already exists.", file=sys.stderr)
        return 1
    finally:
        db.close()
        database.dispose()
    print(f"Created user '{username}' with role '{args.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
