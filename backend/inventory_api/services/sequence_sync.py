"""Bring counters in line with codes already stored in entity tables.

Rows created before the counter table existed got their codes from a
"find the highest code and add one" lookup. Before the allocator takes over,
each counter is raised to the highest numeric suffix found so that no existing
code is ever issued again.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inventory_api.core.db import SessionLocal
from inventory_api.core.sequences import get_sequence_config
from inventory_api.models.inv_brand import InvBrandMaster
from inventory_api.models.inv_product import InvProductMaster
from inventory_api.models.inv_purchase_request import InvPurchaseRequest
from inventory_api.services.sequences import SequenceAllocator

CODE_COLUMNS = {
    "Brand": InvBrandMaster.brand_code,
    "Product": InvProductMaster.prod_id,
    "PurchaseRequest": InvPurchaseRequest.pr_number,
}


async def highest_existing_value(session: AsyncSession, entity_kind: str) -> int:
    config = get_sequence_config(entity_kind)
    column = CODE_COLUMNS[entity_kind]
    codes = await session.scalars(select(column).where(column.like(f"{config.prefix}%")))
    # Compare numerically: "BRD1000" sorts below "BRD999" as a string.
    values = [value for value in (config.parse(code) for code in codes) if value is not None]
    return max(values, default=0)


async def sync_counters_from_existing(
    allocator: SequenceAllocator,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> dict[str, int]:
    """Raise every known counter to its table's highest code; return kind -> counter value."""

    session_factory = session_factory or SessionLocal
    synced: dict[str, int] = {}
    for entity_kind in CODE_COLUMNS:
        async with session_factory() as session:
            highest = await highest_existing_value(session, entity_kind)
        synced[entity_kind] = await allocator.sync(entity_kind, highest)
    return synced
