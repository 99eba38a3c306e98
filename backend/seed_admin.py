"""
Database seeding script for the first admin.

Admins cannot sign up through the API, so the initial one is created here.
Run after the database is reachable:

    python -m backend.seed_admin
"""

import asyncio
from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from backend.parcelpro.core.config import settings
from backend.parcelpro.db.identifiers import normalize_email
from backend.parcelpro.db.session import AsyncSessionLocal, Base, engine
from backend.parcelpro.db.store import EntityStore
from backend.parcelpro.models.enums import UserRole
from backend.parcelpro.models.user import User


async def seed_admin(db: AsyncSession, email: str, name: str) -> Tuple[User, bool]:
    """
    Create an Admin user unless one with ``email`` already exists.

    An existing non-admin account with that email is promoted.

    Returns:
        (user, created)
    """
    email = normalize_email(email)
    store = EntityStore(db)

    existing = await store.find_one(User, User.email == email)
    if existing is not None:
        if existing.role != UserRole.ADMIN:
            await store.update(User, User.id == existing.id, values={"role": UserRole.ADMIN})
            await store.refresh(existing)
        return existing, False

    admin = User(email=email, name=name, role=UserRole.ADMIN, verified=True, delivered_count=0)
    await store.insert(admin)
    return admin, True


async def main():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        admin, created = await seed_admin(db, settings.seed_admin_email, settings.seed_admin_name)

    if created:
        print(f"Created admin {admin.email} (id: {admin.id})")
    else:
        print(f"Admin {admin.email} already exists, nothing to do")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
