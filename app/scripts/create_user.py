"""
Create an account (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user EMAIL PASSWORD [ROLE ...]
Example:
  python -m app.scripts.create_user admin@example.com your-secure-password admin
"""
import argparse
import logging
import sys

from app.core.config import get_settings
from app.core.database import build_engine, build_session_factory
from app.core.errors import ServiceError
from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, hash_password
from app.schemas.auth import AccountDraft
from app.services.account_store import SqlAccountStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S%z",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Bookshelf account.")
    parser.add_argument("email", help="Email (unique, case-insensitive)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("roles", nargs="*", default=[], help="Roles, e.g. admin editor (default: editor)")
    parser.add_argument("--username", default=None, help="Defaults to the email local part")
    args = parser.parse_args(argv)

    email = args.email.strip()
    if "@" not in email or len(email) > 255:
        print("Invalid email.", file=sys.stderr)
        return 1
    if len(args.password) < PASSWORD_MIN_LEN or len(args.password) > PASSWORD_MAX_LEN:
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    settings = get_settings()
    if settings.STORE_BACKEND != "sql":
        print("create_user needs STORE_BACKEND=sql; in-memory accounts do not outlive the process.", file=sys.stderr)
        return 1
    engine = build_engine(settings)
    try:
        store = SqlAccountStore(build_session_factory(engine))
        user_id = store.create(
            AccountDraft(
                email=email,
                password_hash=hash_password(args.password, rounds=settings.BCRYPT_ROUNDS),
                username=args.username,
                roles=args.roles,
            )
        )
        account = store.find_by_email(email)
    except ServiceError as e:
        print(f"Could not create '{email}': {e.message}", file=sys.stderr)
        return 1
    finally:
        engine.dispose()
    logger.info("Created account id=%s email=%s roles=%s", user_id, account.email, account.roles)
    return 0


if __name__ == "__main__":
    sys.exit(main())
