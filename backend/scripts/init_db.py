#!/usr/bin/env python3
"""
Create all tables directly from the models (local development / SQLite).
For PostgreSQL deployments prefer: alembic upgrade head
Run from backend dir: python scripts/init_db.py
"""
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))

from vidtube.db.session import engine, init_db  # noqa: E402


async def main():
    await init_db()
    await engine.dispose()
    print(f"Tables created on {engine.url.render_as_string(hide_password=True)}")


if __name__ == "__main__":
    asyncio.run(main())
