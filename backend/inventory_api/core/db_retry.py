"""Helpers for retrying transient database failures (deadlock / lock wait / lost link)."""

from __future__ import annotations

import asyncio
import random
from typing import Awaitable, Callable, TypeVar

from loguru import logger
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.core.config import settings

T = TypeVar("T")
# 1205 lock wait timeout, 1213 deadlock, 3572 NOWAIT conflict,
# 2003/2006/2013 server unreachable or connection dropped mid-statement.
MYSQL_RETRIABLE_ERROR_CODES = {1205, 1213, 3572, 2003, 2006, 2013}
RETRIABLE_SQLSTATES = {"40001", "40P01"}
RETRIABLE_MESSAGES = (
    "deadlock",
    "lock wait timeout",
    "database is locked",
    "database table is locked",
    "lost connection",
    "server has gone away",
)


def _extract_error_code(exc: DBAPIError | OperationalError) -> tuple[int | None, str | None]:
    orig = getattr(exc, "orig", None)
    if not orig:
        return None, None
    code = None
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if hasattr(orig, "args") and orig.args:
        try:
            code = int(orig.args[0])
        except (TypeError, ValueError):
            code = None
    return code, sqlstate


def is_retriable(exc: DBAPIError | OperationalError) -> bool:
    """Return True when the failure is transient contention or a dropped connection."""

    if isinstance(exc, IntegrityError):
        return False
    if getattr(exc, "connection_invalidated", False):
        return True
    code, sqlstate = _extract_error_code(exc)
    if code == 3572 and settings.DB_NOWAIT_LOCKS:
        return False  # NOWAIT conflicts should not be retried when NOWAIT is enabled
    if code in MYSQL_RETRIABLE_ERROR_CODES:
        return True
    if sqlstate in RETRIABLE_SQLSTATES:
        return True
    message = str(getattr(exc, "orig", exc)).lower()
    return any(token in message for token in RETRIABLE_MESSAGES)


async def with_db_retry(
    session: AsyncSession,
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int | None = None,
    base_delay: float | None = None,
    jitter: float | None = None,
) -> T:
    """Run the async operation with deadlock/timeout retries and jitter.

    The session is rolled back before every retry so each attempt starts a
    fresh transaction. Non-transient errors propagate immediately; when the
    attempts are exhausted the last transient error is re-raised.
    """

    attempts = max(attempts if attempts is not None else settings.DB_RETRY_ATTEMPTS, 1)
    base_delay = base_delay if base_delay is not None else settings.DB_RETRY_BASE_DELAY
    jitter = jitter if jitter is not None else settings.DB_RETRY_JITTER
    last_error: Exception | None = None
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except (OperationalError, DBAPIError) as exc:
            if not is_retriable(exc):
                raise
            last_error = exc
            await session.rollback()
            if attempt == attempts:
                break
            sleep_for = base_delay * (2 ** (attempt - 1)) + random.uniform(0, jitter)
            logger.bind(
                attempt=attempt,
                max_attempts=attempts,
                sleep=sleep_for,
                error=str(exc),
            ).warning("db_retry_transient")
            await asyncio.sleep(sleep_for)
    if last_error is not None:
        raise last_error
    raise RuntimeError("Operation failed without raising an exception")
