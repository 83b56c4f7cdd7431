#!/usr/bin/env python3
"""
Database Setup - applies database/schema.sql

Every statement in the schema is idempotent (IF NOT EXISTS / ON CONFLICT),
so running this again on an existing database is safe.

Usage:
    python scripts/setup_db.py
    python scripts/setup_db.py --schema path/to/schema.sql

Environment Variables:
    DATABASE_URL - PostgreSQL connection string (read from python/.env if present)
"""

import argparse
import asyncio
import os
import sys
from datetime import datetime

import asyncpg
from dotenv import load_dotenv

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_SCHEMA = os.path.join(ROOT_DIR, "database", "schema.sql")

env_path = os.path.join(ROOT_DIR, "python", ".env")
load_dotenv(env_path if os.path.exists(env_path) else None)


class Colors:
    HEADER = '\033[95m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'


async def setup_database(schema_path: str) -> bool:
    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        print(f"{Colors.FAIL}Error: DATABASE_URL environment variable not set{Colors.ENDC}")
        return False

    with open(schema_path, "r", encoding="utf-8") as f:
        schema_sql = f.read()

    print(f"{Colors.HEADER}{'=' * 60}")
    print("DATABASE SETUP")
    print(f"{'=' * 60}{Colors.ENDC}")
    print(f"Started at: {datetime.now().isoformat()}")
    print(f"Schema: {schema_path}")
    print()

    conn = await asyncpg.connect(db_url)
    try:
        async with conn.transaction():
            await conn.execute(schema_sql)

        tables = await conn.fetch(
            """
            SELECT table_name FROM information_schema.tables
            WHERE table_schema = 'public' AND table_type = 'BASE TABLE'
            ORDER BY table_name
            """
        )
        print(f"{Colors.OKGREEN}✓ Schema applied{Colors.ENDC}")
        print(f"  {len(tables)} tables: {', '.join(r['table_name'] for r in tables)}")
        return True
    except asyncpg.PostgresError as e:
        print(f"{Colors.FAIL}✗ Schema failed: {e}{Colors.ENDC}")
        return False
    finally:
        await conn.close()


def main():
    parser = argparse.ArgumentParser(description="Apply the database schema")
    parser.add_argument("--schema", default=DEFAULT_SCHEMA, help="Path to schema.sql")
    args = parser.parse_args()

    ok = asyncio.run(setup_database(args.schema))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
