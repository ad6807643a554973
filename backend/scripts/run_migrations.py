#!/usr/bin/env python3
"""Run database migrations for deployment.

Runs Alembic migrations and checks that the bullion tracker tables exist.
Safe to run multiple times (idempotent).

Run from backend directory:
    python scripts/run_migrations.py
"""

import asyncio
import os
import sys

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from alembic import command
from alembic.config import Config
from alembic.util import CommandError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.bullion_tracker.infrastructure.db.session import (
    dispose_engine,
    get_async_session_local,
)

EXPECTED_TABLES = {
    "price_history",
    "calibration_ratios",
    "price_alerts",
    "push_tokens",
    "notification_log",
}


def run_migrations() -> bool:
    """Run Alembic migrations."""
    print("=" * 50)
    print("Running database migrations...")
    print("=" * 50)

    # Alembic config - alembic.ini is in backend directory
    alembic_cfg = Config("alembic.ini")

    try:
        command.upgrade(alembic_cfg, "head")
        print("Migrations completed successfully")
        return True
    except (CommandError, SQLAlchemyError, OSError) as e:
        print(f"Migration error: {e}")
        return False


async def check_tables() -> bool:
    """Check that every bullion tracker table exists."""
    print("\n" + "=" * 50)
    print("Checking database tables...")
    print("=" * 50)

    session_factory = get_async_session_local()
    try:
        async with session_factory() as session:
            result = await session.execute(
                text("SELECT tablename FROM pg_tables WHERE schemaname='public' ORDER BY tablename")
            )
            tables = {row[0] for row in result.fetchall()}
    finally:
        await dispose_engine()

    for table in sorted(EXPECTED_TABLES):
        marker = "ok" if table in tables else "MISSING"
        print(f"   - {table}: {marker}")

    return EXPECTED_TABLES <= tables


if __name__ == "__main__":
    if not run_migrations():
        print("\nMigrations failed. Check errors above.")
        sys.exit(1)

    if asyncio.run(check_tables()):
        print("\nDatabase is ready!")
        sys.exit(0)

    print("\nMigrations ran but tables are missing. Check logs above.")
    sys.exit(1)
