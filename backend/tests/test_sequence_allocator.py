import asyncio

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inventory_api.core.config import settings
from inventory_api.core.db import SessionLocal, build_engine
from inventory_api.core.errors import StoreUnavailable, UnknownEntityKind
from inventory_api.models.inv_sequence_counter import InvSequenceCounter
from inventory_api.services.sequences import SequenceAllocator


async def _counter_rows(entity_kind: str) -> int:
    async with SessionLocal() as session:
        return await session.scalar(
            select(func.count())
            .select_from(InvSequenceCounter)
            .where(InvSequenceCounter.entity_kind == entity_kind)
        )


@pytest.mark.anyio
async def test_first_allocation_creates_counter(db):
    allocator = SequenceAllocator()

    assert await allocator.current("Brand") == 0
    assert await allocator.allocate("Brand") == "BRD001"
    assert await allocator.allocate("Brand") == "BRD002"
    assert await allocator.current("Brand") == 2
    assert await _counter_rows("Brand") == 1

    async with SessionLocal() as session:
        row = await session.get(InvSequenceCounter, "Brand")
    assert (row.prefix, row.padding_width) == ("BRD", 3)


@pytest.mark.anyio
async def test_kinds_have_independent_sequences(db):
    allocator = SequenceAllocator()

    assert await allocator.allocate("Brand") == "BRD001"
    assert await allocator.allocate("Product") == "PROD0001"
    assert await allocator.allocate("PurchaseRequest") == "PR000001"
    assert await allocator.allocate("Brand") == "BRD002"


@pytest.mark.anyio
async def test_concurrent_allocations_are_consecutive_and_unique(db):
    allocator = SequenceAllocator()
    for _ in range(5):
        await allocator.allocate("Brand")

    codes = await asyncio.gather(*(allocator.allocate("Brand") for _ in range(30)))

    assert len(codes) == 30
    assert set(codes) == {f"BRD{n:03d}" for n in range(6, 36)}
    assert await allocator.current("Brand") == 35


@pytest.mark.anyio
async def test_first_use_race_creates_exactly_one_counter(db):
    allocator = SequenceAllocator()

    codes = await asyncio.gather(*(allocator.allocate("Site") for _ in range(50)))

    assert set(codes) == {f"SITE{n:03d}" for n in range(1, 51)}
    assert await _counter_rows("Site") == 1


@pytest.mark.anyio
async def test_allocators_on_separate_engines_share_the_counter(db):
    # Two engines stand in for two API processes behind a load balancer.
    other_engine = build_engine(settings.DATABASE_URL)
    try:
        first = SequenceAllocator()
        second = SequenceAllocator(async_sessionmaker(bind=other_engine, expire_on_commit=False))

        codes = await asyncio.gather(
            *(first.allocate("Order") for _ in range(10)),
            *(second.allocate("Order") for _ in range(10)),
        )
    finally:
        await other_engine.dispose()

    assert set(codes) == {f"ORD{n:06d}" for n in range(1, 21)}


@pytest.mark.anyio
async def test_thousandth_code_outgrows_padding(db):
    allocator = SequenceAllocator()

    code = None
    for _ in range(1000):
        code = await allocator.allocate("Brand")

    assert code == "BRD1000"
    assert await allocator.allocate("Brand") == "BRD1001"


@pytest.mark.anyio
async def test_unknown_kind_fails_without_touching_store(db):
    def forbidden_factory():
        raise AssertionError("store must not be touched for an unknown kind")

    allocator = SequenceAllocator(forbidden_factory)

    with pytest.raises(UnknownEntityKind):
        await allocator.allocate("Unicorn")
    with pytest.raises(UnknownEntityKind):
        await allocator.peek("Unicorn")

    async with SessionLocal() as session:
        assert await session.scalar(select(func.count()).select_from(InvSequenceCounter)) == 0


class _CommitOutageSession(AsyncSession):
    """Executes statements normally but loses the connection on COMMIT."""

    async def commit(self):
        raise OperationalError(
            "COMMIT", {}, Exception("Lost connection to MySQL server during query")
        )


@pytest.mark.anyio
async def test_outage_during_increment_leaves_counter_unchanged(db, fast_retries):
    allocator = SequenceAllocator()
    for _ in range(3):
        await allocator.allocate("Brand")

    broken = SequenceAllocator(
        async_sessionmaker(bind=db, class_=_CommitOutageSession, expire_on_commit=False)
    )
    with pytest.raises(StoreUnavailable) as excinfo:
        await broken.allocate("Brand")

    assert excinfo.value.entity_kind == "Brand"
    assert await allocator.current("Brand") == 3
    assert await allocator.allocate("Brand") == "BRD004"


@pytest.mark.anyio
async def test_unreachable_store_raises_store_unavailable(db, tmp_path, fast_retries):
    missing = tmp_path / "no-such-dir" / "inventory.db"
    unreachable = build_engine(f"sqlite+aiosqlite:///{missing}")
    try:
        allocator = SequenceAllocator(async_sessionmaker(bind=unreachable))
        with pytest.raises(StoreUnavailable):
            await allocator.allocate("Brand")
        with pytest.raises(StoreUnavailable):
            await allocator.current("Brand")
    finally:
        await unreachable.dispose()


@pytest.mark.anyio
async def test_peek_does_not_reserve(db):
    allocator = SequenceAllocator()

    assert await allocator.peek("Product") == "PROD0001"
    assert await allocator.peek("Product") == "PROD0001"
    assert await _counter_rows("Product") == 0

    assert await allocator.allocate("Product") == "PROD0001"
    assert await allocator.peek("Product") == "PROD0002"


@pytest.mark.anyio
async def test_sync_only_moves_counter_forward(db):
    allocator = SequenceAllocator()

    assert await allocator.sync("Brand", 41) == 41
    assert await allocator.allocate("Brand") == "BRD042"
    assert await allocator.sync("Brand", 10) == 42
    assert await allocator.allocate("Brand") == "BRD043"
    assert await _counter_rows("Brand") == 1


@pytest.mark.anyio
async def test_lost_creation_race_is_absorbed(db, monkeypatch):
    from inventory_api.services import sequences

    allocator = SequenceAllocator()
    assert await allocator.allocate("Brand") == "BRD001"

    real_increment = sequences._increment
    calls = {"count": 0}

    async def stale_first_look(session, entity_kind):
        # First look misses the row a competing caller just created, so the
        # allocator tries to create it too and hits the primary key.
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return await real_increment(session, entity_kind)

    monkeypatch.setattr(sequences, "_increment", stale_first_look)

    assert await allocator.allocate("Brand") == "BRD002"
    assert calls["count"] == 2
    assert await _counter_rows("Brand") == 1


@pytest.mark.anyio
async def test_endless_creation_race_gives_up(db, monkeypatch):
    from inventory_api.services import sequences

    allocator = SequenceAllocator()
    await allocator.allocate("Brand")

    calls = {"count": 0}

    async def never_sees_row(session, entity_kind):
        calls["count"] += 1
        return None

    monkeypatch.setattr(sequences, "_increment", never_sees_row)
    monkeypatch.setattr(settings, "SEQUENCE_INIT_ATTEMPTS", 3)

    with pytest.raises(StoreUnavailable) as excinfo:
        await allocator.allocate("Brand")

    assert "colliding" in excinfo.value.reason
    assert calls["count"] == 3
    assert await allocator.current("Brand") == 1
