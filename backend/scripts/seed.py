"""Seed script: creates default roles/permissions and one demo user per role.

Idempotent: checks for existing records before inserting.
Run: python scripts/seed.py
"""
import asyncio
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from travel_portal.core.security import hash_password
from travel_portal.core.seed import DEFAULT_ROLES, seed_roles
from travel_portal.db.session import AsyncSessionLocal
from travel_portal.models.user import Role, User

DEMO_PASSWORD = "changeme123"


async def _upsert_user(db: AsyncSession, email: str, name: str, role: Role, staff_id: str) -> User:
    user = (await db.execute(select(User).where(User.email == email))).scalars().first()
    if user:
        print(f"  [skip] User {email}")
        return user
    user = User(
        email=email,
        name=name,
        staff_id=staff_id,
        department="Operations",
        password_hash=hash_password(DEMO_PASSWORD),
        role=role,
    )
    db.add(user)
    print(f"  [add]  User {email} ({role.name})")
    return user


async def main() -> None:
    async with AsyncSessionLocal() as db:
        print("Roles and permissions")
        roles = await seed_roles(db)

        print("Demo users")
        for index, role_name in enumerate(DEFAULT_ROLES, start=1):
            slug = role_name.lower().replace(" ", ".")
            await _upsert_user(db, f"{slug}@example.com", role_name, roles[role_name], f"S{index:05d}")
        await db.commit()
    print(f"Done. Demo password: {DEMO_PASSWORD}")


if __name__ == "__main__":
    asyncio.run(main())
