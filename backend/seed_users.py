"""
Database seeding script for initial staff users.

Creates an admin and an operator and prints a bearer token for each, so the
API can be exercised before the external auth service is wired in.
Run this script after database is set up but before first use.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from backend.app.db.session import AsyncSessionLocal, engine, Base
from backend.app.models.user import User
from backend.app.models.enums import UserRole
from backend.app.core.jwt import create_access_token
from sqlalchemy import select
from datetime import timedelta

# Make sure every table is registered before create_all
import backend.app.main  # noqa: F401

STAFF = [
    {"username": "admin", "name": "Administrator", "email": "admin@ledger.local", "role": UserRole.ADMIN},
    {"username": "operator", "name": "Operator", "email": "operator@ledger.local", "role": UserRole.OPERATOR},
]


async def seed_users():
    """
    Seed initial staff users.

    Creates:
    - 1 admin user
    - 1 operator user
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("Starting user seeding...")

        result = await db.execute(select(User).where(User.username == "admin"))
        if result.scalar_one_or_none():
            print("Admin user already exists, skipping seeding")
            return

        users = [User(is_active=True, **fields) for fields in STAFF]
        db.add_all(users)
        await db.commit()

        print("\nSeeded users (tokens valid for 7 days):")
        for user in users:
            token = create_access_token(
                data={"sub": user.username, "user_id": user.id, "role": user.role.value},
                expires_delta=timedelta(days=7),
            )
            print(f"  - {user.role.value:<9} {user.username}: {token}")


if __name__ == "__main__":
    asyncio.run(seed_users())
