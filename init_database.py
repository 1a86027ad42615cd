"""
Database Initialization Script for AgroSat API

Creates the profiles, fields, analyses and activity_log tables.
Run this once before starting the API server; /api/health answers
503 "needs_setup" until it has been run.

Usage:
    python init_database.py [--drop]
"""

import argparse
import asyncio
import sys

from sqlalchemy import text
from agrosat.api.core.database import engine, Base
from agrosat.api.config import settings
from agrosat.api.models import Profile, Field, Analysis, ActivityLog

TABLES = [model.__tablename__ for model in (Profile, Field, Analysis, ActivityLog)]


async def init_database(drop: bool = False) -> bool:
    """Initialize database schema"""
    print("=" * 60)
    print("AgroSat Database Initialization")
    print("=" * 60)
    print()

    # Test database connection
    print("1. Testing database connection...")
    try:
        async with engine.begin() as conn:
            result = await conn.execute(text("SELECT version()"))
            version = result.scalar()
            print(f"   ✓ Connected to PostgreSQL at {settings.POSTGRES_HOST}:{settings.POSTGRES_PORT}")
            print(f"   Version: {version[:50]}...")
    except Exception as e:
        print(f"   ✗ Database connection failed: {e}")
        print()
        print("Please ensure:")
        print("  1. PostgreSQL is running and reachable")
        print("  2. POSTGRES_* variables in your .env file are correct")
        return False

    print()

    print("2. Creating database tables...")
    try:
        async with engine.begin() as conn:
            if drop:
                await conn.run_sync(Base.metadata.drop_all)
                print("   ✓ Dropped existing tables")

            await conn.run_sync(Base.metadata.create_all)
            print("   ✓ Created tables:")
            for table in TABLES:
                print(f"      - {table}")
    except Exception as e:
        print(f"   ✗ Failed to create tables: {e}")
        return False

    print()

    # Verify tables
    print("3. Verifying tables...")
    try:
        async with engine.begin() as conn:
            result = await conn.execute(text("""
                SELECT table_name
                FROM information_schema.tables
                WHERE table_schema = 'public'
                AND table_type = 'BASE TABLE'
                ORDER BY table_name
            """))
            found = {row[0] for row in result}
    except Exception as e:
        print(f"   ✗ Failed to verify tables: {e}")
        return False

    missing = [t for t in TABLES if t not in found]
    if missing:
        print(f"   ✗ Missing tables: {', '.join(missing)}")
        return False
    print(f"   ✓ All {len(TABLES)} tables present")

    await engine.dispose()

    print()
    print("=" * 60)
    print("Database initialization completed successfully!")
    print("=" * 60)
    print()
    print("Next steps:")
    print("  1. Start the API server: uvicorn agrosat.api.main:app --reload")
    print("  2. Run tests: pytest")
    print()

    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the AgroSat database schema")
    parser.add_argument("--drop", action="store_true", help="Drop existing tables first")
    args = parser.parse_args()

    result = asyncio.run(init_database(drop=args.drop))
    sys.exit(0 if result else 1)
