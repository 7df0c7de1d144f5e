"""Create every table registered on Base.metadata."""
import asyncio

from pixbank.database import engine
from pixbank.models import Base


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(init_db())
    print("[init_db] Tables created.")
