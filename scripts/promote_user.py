#!/usr/bin/env python3
"""
Promote a user to a role (admin by default).

The admin role cannot be chosen through the API, so the first platform
admin is created with this script.

Usage:
    python scripts/promote_user.py someone@example.com
    python scripts/promote_user.py someone@example.com --role gym_owner
"""

import argparse
import asyncio
import os
import sys

import asyncpg
from dotenv import load_dotenv

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
env_path = os.path.join(ROOT_DIR, "python", ".env")
load_dotenv(env_path if os.path.exists(env_path) else None)

ROLES = ("user", "gym_owner", "trainer", "admin")


class Colors:
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'


async def promote(email: str, role: str) -> bool:
    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        print(f"{Colors.FAIL}Error: DATABASE_URL environment variable not set{Colors.ENDC}")
        return False

    conn = await asyncpg.connect(db_url)
    try:
        row = await conn.fetchrow(
            "UPDATE users SET role = $2, updated_at = NOW() WHERE email = $1 RETURNING id, name, role",
            email, role,
        )
    finally:
        await conn.close()

    if row is None:
        print(f"{Colors.WARNING}No user with email {email}. They must sign in once first.{Colors.ENDC}")
        return False

    print(f"{Colors.OKGREEN}✓ {row['name']} ({row['id']}) is now {row['role']}{Colors.ENDC}")
    return True


def main():
    parser = argparse.ArgumentParser(description="Change a user's role")
    parser.add_argument("email")
    parser.add_argument("--role", default="admin", choices=ROLES)
    args = parser.parse_args()

    ok = asyncio.run(promote(args.email, args.role))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
