"""
Create an account from the command line (e.g. the first root administrator). Run from project root:
  python -m lumasms.scripts.create_user USERNAME PASSWORD EMAIL [--gid N]
Example:
  python -m lumasms.scripts.create_user admin your-secure-password admin@example.com --gid 1
"""
import argparse
import logging
import sys

from lumasms.core.database import SessionLocal
from lumasms.schemas.results import Created
from lumasms.services.authentication import register
from lumasms.services.user_store import UserStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a LumaSMS account outside the registration API.")
    parser.add_argument("username", help="Username (1-255 chars)")
    parser.add_argument("password", help="Password (1-128 chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument(
        "--gid",
        type=int,
        default=None,
        help="Group to place the user in (1 = root administrators). Defaults to DEFAULT_GROUP_ID.",
    )
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        store = UserStore(db)
        if args.gid is not None and not store.group_exists(args.gid):
            print(f"Group {args.gid} does not exist.", file=sys.stderr)
            return 1
        result = register(db, args.username, args.password, args.email)
        if not isinstance(result, Created):
            print(f"Could not create user: {result.model_dump_json()}", file=sys.stderr)
            return 1
        # Bootstrap has no acting administrator, so the group is written directly.
        if args.gid is not None:
            store.update(result.uid, {"gid": args.gid})
        logger.info("Created user uid=%s gid=%s", result.uid, args.gid)
        print(f"Created user '{args.username}' with uid {result.uid}.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
