from __future__ import annotations

import argparse

from course_catalog.core.security import create_access_token
from course_catalog.core.settings import get_settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Mint a development access token for a user id.")
    parser.add_argument("--user-id", required=True)
    parser.add_argument("--ttl-seconds", type=int, default=None)
    args = parser.parse_args()

    settings = get_settings()
    token = create_access_token(
        subject=args.user_id,
        ttl_seconds=args.ttl_seconds or settings.jwt_access_ttl_seconds,
        secret=settings.jwt_secret,
    )
    print(token)


if __name__ == "__main__":
    main()
