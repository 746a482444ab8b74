"""
Create a user (e.g. first admin). Run from project root:
  python -m stockroom.scripts.create_user EMAIL NAME PASSWORD [role]
Example:
  python -m stockroom.scripts.create_user admin@example.com "Admin" your-secure-password admin
"""
import argparse
import logging
import sys

from stockroom.core.database import SessionLocal
from stockroom.core.errors import ConflictError, WeakCredential
from stockroom.core.roles import Role
from stockroom.schemas.auth import EMAIL_RE
from stockroom.services.users import create_user

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Stockroom user.")
    parser.add_argument("email", help="Account email (unique)")
    parser.add_argument("name", help="Display name (2-50 chars)")
    parser.add_argument("password", help="Password (6-128 chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=Role.USER.value,
        choices=[r.value for r in Role],
    )
    args = parser.parse_args(argv)

    email = args.email.strip().lower()
    name = args.name.strip()
    if not EMAIL_RE.match(email):
        logger.error("Invalid email format.")
        return 1
    if not 2 <= len(name) <= 50:
        logger.error("Name must be 2-50 characters.")
        return 1

    db = SessionLocal()
    try:
        create_user(db, name=name, email=email, password=args.password, role=args.role)
        return 0
    except WeakCredential as e:
        logger.error("%s", e.message)
        return 1
    except ConflictError:
        logger.error("User '%s' already exists.", email)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
