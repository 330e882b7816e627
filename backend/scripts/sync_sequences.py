"""Raise sequence counters to the highest code already stored in each table.

Run once before switching a database over from read-max code generation:

    python scripts/sync_sequences.py
"""

import asyncio
import pathlib
import sys

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from inventory_api.core.db import engine
from inventory_api.core.sequences import get_sequence_config
from inventory_api.services.sequence_sync import sync_counters_from_existing
from inventory_api.services.sequences import sequence_allocator


async def main():
    synced = await sync_counters_from_existing(sequence_allocator)
    for entity_kind, value in synced.items():
        config = get_sequence_config(entity_kind)
        print(f"{entity_kind:<16} last_value={value:<8} next={config.format(value + 1)}")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
