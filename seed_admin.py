"""
seed_admin.py
─────────────
Creates the first electoral committee admin with a bcrypt-hashed password.
Run ONCE after the migration:

    python seed_admin.py

Reads SEED_ADMIN_* from .env, falling back to the defaults below.
"""
import asyncio
import os
from dotenv import load_dotenv

load_dotenv()

ADMIN_NAME     = os.getenv("SEED_ADMIN_NAME",     "Electoral Committee")
ADMIN_EMAIL    = os.getenv("SEED_ADMIN_EMAIL",    "electoral@cohssa.org")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "ChangeMe@2026")


async def seed() -> None:
    from sqlalchemy import select
    from app.core.config import settings
    from app.core.database import build_engine, build_sessionmaker
    from app.core.security import hash_password
    from app.models.admin import Admin

    engine = build_engine(settings.DATABASE_URL)
    Session = build_sessionmaker(engine)

    try:
        async with Session() as db:
            existing = (await db.execute(
                select(Admin).where(Admin.email == ADMIN_EMAIL.lower())
            )).scalar_one_or_none()

            if existing:
                print(f"Admin already exists: {existing.email} (no changes made)")
                return

            admin = Admin(
                name=ADMIN_NAME,
                email=ADMIN_EMAIL.lower(),
                password_hash=hash_password(ADMIN_PASSWORD),
            )
            db.add(admin)
            await db.commit()
            await db.refresh(admin)
    finally:
        await engine.dispose()

    print(f"Admin created: id={admin.id} email={admin.email}")
    print("Login endpoint: POST /api/auth/login")
    print("Change the password after first login!")


if __name__ == "__main__":
    asyncio.run(seed())
