"""
Issues an admin API token for an allowlisted email.

    python -m leadwatch.scripts.create_admin_token ryan@example.com --days 30
"""

import argparse
import sys
from datetime import timedelta

from leadwatch.infrastructure.services.auth_service import create_access_token, is_admin_email


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create a Leadwatch admin token")
    parser.add_argument("email")
    parser.add_argument("--name", default="")
    parser.add_argument("--days", type=int, default=1)
    args = parser.parse_args(argv)

    if not is_admin_email(args.email):
        print(f"❌ {args.email} is not in ADMIN_EMAILS", file=sys.stderr)
        return 1

    token = create_access_token(
        {"sub": args.email.lower(), "name": args.name},
        expires_delta=timedelta(days=args.days),
    )
    print(token)
    return 0


if __name__ == "__main__":
    sys.exit(main())
