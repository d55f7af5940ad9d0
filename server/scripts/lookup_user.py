"""Operator CLI: Run the anonymous user lookup directly against the store.

Prints the user row as JSON, the same body the API would return.

Usage examples:
  python scripts/lookup_user.py
  python scripts/lookup_user.py --user-id 7
  python scripts/lookup_user.py --database /path/to/review_app.db
"""

import argparse
import asyncio
import json
import os
import sys
from typing import Optional


def _ensure_import_path() -> None:
    server_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if server_root not in sys.path:
        sys.path.insert(0, server_root)


async def _run(database: Optional[str], user_id: Optional[str]) -> int:
    _ensure_import_path()

    from review_api.settings import settings
    from review_api.errors import QueryError, StoreConnectError
    from review_api.models import ByIdLookup, DefaultLookup
    from review_api import db

    path = database or settings.database_path
    try:
        store = await db.Store.open(path)
    except StoreConnectError as e:
        print("ERROR:", e)
        return 2

    try:
        lookup = ByIdLookup(user_id=user_id) if user_id else DefaultLookup()
        user = await db.lookup_user(store, lookup, settings.sentinel_username)
        if user is None:
            print(settings.not_found_message)
            return 1
        print(json.dumps(user.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0
    except QueryError as e:
        print("ERROR:", e.message)
        return 2
    finally:
        await store.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Look up the anonymous user in the review app store.")
    parser.add_argument("--user-id", help="Look up this user_id instead of the default anonymous user")
    parser.add_argument("--database", help="SQLite file (default: REVIEW_API_DATABASE_PATH or ../review_app.db)")
    args = parser.parse_args()

    return asyncio.run(_run(args.database, args.user_id))


if __name__ == "__main__":
    raise SystemExit(main())
