"""
Grant or revoke admin on an existing identity (e.g. the first admin). Run from project root:
  python -m storefront.scripts.set_role UID [admin|none]
Example:
  python -m storefront.scripts.set_role 3kQz8rUiVbN2 admin

The identity must have signed in once (PUT /token) so its record exists.
"""
import argparse
import logging
import sys

from storefront.core.config import get_settings
from storefront.core.database import Database
from storefront.core.errors import NotFound
from storefront.core.logging import configure_logging
from storefront.models import Role
from storefront.services.identity import set_role

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Grant or revoke the admin role.")
    parser.add_argument("uid", help="External id of the identity")
    parser.add_argument(
        "role", nargs="?", default=Role.ADMIN.value, choices=[r.value for r in Role]
    )
    args = parser.parse_args(argv)

    uid = args.uid.strip()
    if not uid or len(uid) > 255:
        print("Invalid uid length.", file=sys.stderr)
        return 1

    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    database = Database(settings.DATABASE_URL).open()
    db = database.session()
    try:
        user = set_role(db, uid, Role(args.role))
        print(f"Identity '{user.uid}' now has role '{user.role.value}'.")
        return 0
    except NotFound:
        print(f"No identity with uid '{uid}'; sign in once first.", file=sys.stderr)
        return 1
    except Exception as e:
        logger.exception("Role change failed: %s", e)
        return 1
    finally:
        db.close()
        database.close()


if __name__ == "__main__":
    sys.exit(main())
