"""Atomic allocation of human-readable sequential codes (BRD001, PROD0001, PR000001...).

Every allocation is one short transaction against ``inv_sequence_counter``:
the counter row is bumped with a single ``UPDATE ... SET last_value =
last_value + 1`` and the post-increment value is read back under the same row
lock, then committed. Nothing is cached in process memory, so any number of
API workers can allocate from the same database concurrently.

The allocator commits independently of the caller's transaction. A code that
was handed out is consumed for good, even if the entity insert that needed it
fails afterwards; retries of the create simply allocate again.
"""

from __future__ import annotations

from datetime import datetime

from loguru import logger
from sqlalchemy import insert, select, text, update
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inventory_api.core.config import settings
from inventory_api.core.db import SessionLocal
from inventory_api.core.db_retry import with_db_retry
from inventory_api.core.errors import ConcurrentInitRace, StoreUnavailable
from inventory_api.core.sequences import SequenceConfig, get_sequence_config
from inventory_api.models.inv_sequence_counter import InvSequenceCounter


async def _begin_write(session: AsyncSession) -> None:
    # SQLite: take the write lock up front so concurrent allocators queue on
    # the busy timeout instead of failing a SHARED -> RESERVED upgrade.
    if session.get_bind().dialect.name == "sqlite":
        await session.execute(text("BEGIN IMMEDIATE"))


async def _increment(session: AsyncSession, entity_kind: str) -> int | None:
    """Bump the counter by one and return the new value, or None if the row is missing."""

    stmt = (
        update(InvSequenceCounter)
        .where(InvSequenceCounter.entity_kind == entity_kind)
        .values(last_value=InvSequenceCounter.last_value + 1, updated_at=datetime.now())
        .execution_options(synchronize_session=False)
    )
    if session.get_bind().dialect.update_returning:
        return await session.scalar(stmt.returning(InvSequenceCounter.last_value))

    # No UPDATE ... RETURNING (MySQL): the UPDATE holds the row's exclusive
    # lock until commit, so reading it back in the same transaction is safe.
    result = await session.execute(stmt)
    if not result.rowcount:
        return None
    return await session.scalar(
        select(InvSequenceCounter.last_value).where(
            InvSequenceCounter.entity_kind == entity_kind
        )
    )


async def _create_counter(session: AsyncSession, config: SequenceConfig, start: int = 0) -> None:
    try:
        await session.execute(
            insert(InvSequenceCounter).values(
                entity_kind=config.entity_kind,
                last_value=start,
                prefix=config.prefix,
                padding_width=config.padding_width,
            )
        )
    except IntegrityError as exc:
        await session.rollback()
        raise ConcurrentInitRace(config.entity_kind) from exc


async def _rollback_quietly(session: AsyncSession) -> None:
    try:
        await session.rollback()
    except (OperationalError, DBAPIError) as exc:
        # The connection is already gone; the server discards the transaction.
        logger.bind(error=str(exc)).warning("sequence_rollback_failed")


class SequenceAllocator:
    """Hands out the next code for an entity kind."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None):
        self._session_factory = session_factory or SessionLocal

    async def allocate(self, entity_kind: str) -> str:
        """Reserve and return the next code for ``entity_kind``.

        Raises ``UnknownEntityKind`` before touching the store when the kind is
        not configured, and ``StoreUnavailable`` when the store cannot be
        reached or stays contended past the retry budget. In the latter case the
        counter has not advanced.
        """

        config = get_sequence_config(entity_kind)

        async def reserve(session: AsyncSession) -> int:
            await _begin_write(session)
            value = await _increment(session, config.entity_kind)
            if value is None:
                await _create_counter(session, config)
                value = await _increment(session, config.entity_kind)
            await session.commit()
            return int(value)

        value = await self._run(config, reserve)
        code = config.format(value)
        logger.bind(entity_kind=entity_kind, value=value, code=code).info("sequence_allocated")
        return code

    async def sync(self, entity_kind: str, floor: int) -> int:
        """Raise the counter to at least ``floor`` and return the resulting value.

        Used when adopting rows whose codes were issued before the counter
        existed. The counter is never lowered.
        """

        config = get_sequence_config(entity_kind)

        async def raise_floor(session: AsyncSession) -> int:
            await _begin_write(session)
            result = await session.execute(
                update(InvSequenceCounter)
                .where(
                    InvSequenceCounter.entity_kind == config.entity_kind,
                    InvSequenceCounter.last_value < floor,
                )
                .values(last_value=floor, updated_at=datetime.now())
                .execution_options(synchronize_session=False)
            )
            if not result.rowcount:
                current = await session.scalar(
                    select(InvSequenceCounter.last_value).where(
                        InvSequenceCounter.entity_kind == config.entity_kind
                    )
                )
                if current is None:
                    await _create_counter(session, config, start=max(floor, 0))
            value = await self._current_in(session, config.entity_kind)
            await session.commit()
            return value

        value = await self._run(config, raise_floor)
        logger.bind(entity_kind=entity_kind, floor=floor, value=value).info("sequence_synced")
        return value

    async def current(self, entity_kind: str) -> int:
        """Return the last issued value (0 when nothing was allocated yet)."""

        config = get_sequence_config(entity_kind)
        try:
            async with self._session_factory() as session:
                return await self._current_in(session, config.entity_kind)
        except (OperationalError, DBAPIError) as exc:
            raise StoreUnavailable(entity_kind, str(exc)) from exc

    async def peek(self, entity_kind: str) -> str:
        """Preview the next code without reserving it.

        Takes no locks, so the preview can be stale by the time a create runs.
        """

        config = get_sequence_config(entity_kind)
        return config.format(await self.current(entity_kind) + 1)

    @staticmethod
    async def _current_in(session: AsyncSession, entity_kind: str) -> int:
        value = await session.scalar(
            select(InvSequenceCounter.last_value).where(
                InvSequenceCounter.entity_kind == entity_kind
            )
        )
        return int(value or 0)

    async def _run(self, config: SequenceConfig, operation) -> int:
        entity_kind = config.entity_kind
        init_attempts = max(settings.SEQUENCE_INIT_ATTEMPTS, 1)
        async with self._session_factory() as session:
            for attempt in range(1, init_attempts + 1):
                try:
                    return await with_db_retry(session, lambda: operation(session))
                except ConcurrentInitRace:
                    logger.bind(entity_kind=entity_kind, attempt=attempt).info(
                        "sequence_init_race"
                    )
                    continue
                except (OperationalError, DBAPIError) as exc:
                    await _rollback_quietly(session)
                    logger.bind(entity_kind=entity_kind, error=str(exc)).error(
                        "sequence_store_unavailable"
                    )
                    raise StoreUnavailable(entity_kind, str(exc)) from exc
        logger.bind(entity_kind=entity_kind, attempts=init_attempts).error(
            "sequence_init_exhausted"
        )
        raise StoreUnavailable(entity_kind, "counter creation kept colliding")


sequence_allocator = SequenceAllocator()


async def get_sequence_allocator() -> SequenceAllocator:
    """FastAPI dependency returning the process-wide allocator."""

    return sequence_allocator
