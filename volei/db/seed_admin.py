"""
Seed the first club administrator.

Run once (after init_db) with env set:
  ADMIN_EMAIL=admin@voleidequarta.com.br
  ADMIN_PASSWORD=YourSecurePassword
  ADMIN_FULL_NAME="Administrador"   (optional)

  python -m volei.db.seed_admin
"""
import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from volei.auth.services import create_admin_user
from volei.core.config import settings
from volei.core.exceptions import ServiceError
from volei.db.session import AsyncSessionLocal, engine


async def seed_admin(db: AsyncSession) -> None:
    if not settings.admin_email or not settings.admin_password:
        print("ADMIN_EMAIL / ADMIN_PASSWORD not set; skipping admin user.")
        return
    try:
        user = await create_admin_user(
            db,
            email=settings.admin_email,
            password=settings.admin_password,
            full_name=settings.admin_full_name,
        )
    except ServiceError as e:
        print(e.message)
        return
    print("Created ADMIN user:", user.email)


async def main() -> None:
    async with AsyncSessionLocal() as db:
        try:
            await seed_admin(db)
        except Exception as e:
            await db.rollback()
            print("Error:", e)
            raise
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
