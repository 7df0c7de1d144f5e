"""
Create the admin account, or promote and reset an existing one.

Reads SEED_ADMIN_EMAIL, SEED_ADMIN_PASSWORD, SEED_ADMIN_NAME, SEED_ADMIN_CPF
and SEED_ADMIN_PHONE from the environment.
"""
import asyncio
import os
import sys

from sqlalchemy import select

from pixbank.core.constants import UserRole
from pixbank.core.security import get_password_hash
from pixbank.database import AsyncSessionLocal, engine
from pixbank.models import User


async def seed_admin() -> None:
    email = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com").lower().strip()
    password = os.getenv("SEED_ADMIN_PASSWORD")
    if not password:
        print("[seed] SEED_ADMIN_PASSWORD is required")
        sys.exit(1)

    async with AsyncSessionLocal() as db:
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user is None:
            user = User(
                email=email,
                full_name=os.getenv("SEED_ADMIN_NAME", "Administrator"),
                cpf=os.getenv("SEED_ADMIN_CPF", "00000000000"),
                phone=os.getenv("SEED_ADMIN_PHONE", "0000000000"),
                balance=0,
            )
            db.add(user)
            action = "Created"
        else:
            action = "Updated"

        user.hashed_password = get_password_hash(password)
        user.role = UserRole.ADMIN.value
        user.is_active = True
        await db.commit()
        print(f"[seed] {action} admin {email} (id={user.id}).")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed_admin())
