#!/usr/bin/env python3
"""
Create the ads table if it does not exist yet (safe to re-run).
The API also does this at startup; use this before the first deploy or in CI.

Run from backend/: python -m scripts.init_db
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


async def main():
    from fakesearch.database import init_db, check_db_connection

    if not await check_db_connection():
        print("Error: database is unreachable. Check DATABASE_URL.")
        sys.exit(1)
    await init_db()
    print("Schema ready.")


if __name__ == "__main__":
    asyncio.run(main())
