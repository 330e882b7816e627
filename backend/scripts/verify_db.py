import asyncio
import pathlib
import sys

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from sqlalchemy import select, text

from inventory_api.core.config import settings
from inventory_api.core.db import SessionLocal, engine
from inventory_api.models.inv_sequence_counter import InvSequenceCounter


async def main():
    print("backend:", engine.url.get_backend_name(), "database:", engine.url.database)
    print("DB_POOL_SIZE:", settings.DB_POOL_SIZE, "DB_ISOLATION_LEVEL:", settings.DB_ISOLATION_LEVEL or "-")
    async with SessionLocal() as s:
        one = await s.execute(text("SELECT 1"))
        print("db-ping:", one.scalar())

        rows = (await s.execute(select(InvSequenceCounter).order_by(InvSequenceCounter.entity_kind))).scalars().all()
        if not rows:
            print("no sequence counters yet")
        for row in rows:
            print(f"counter {row.entity_kind:<16} last_value={row.last_value} ({row.prefix}/{row.padding_width})")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
