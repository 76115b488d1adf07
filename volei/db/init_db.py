"""
Create every table on the configured database.

Run once before first use:
  python -m volei.db.init_db
"""
import asyncio

from volei.auth.models import RefreshToken, User  # noqa: F401  (register tables)
from volei.core import models  # noqa: F401
from volei.db.session import Base, engine


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("Tables ready:", ", ".join(sorted(Base.metadata.tables)))


async def main() -> None:
    try:
        await init_db()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
