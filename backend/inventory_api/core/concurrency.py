"""Bounded offloading of CPU-heavy sync work (password hashing) to worker threads."""

from __future__ import annotations

from typing import Any, Callable

import anyio

from inventory_api.core.config import settings

_security_sem = anyio.Semaphore(settings.SECURITY_MAX_CONCURRENCY)


async def run_in_thread_security(func: Callable[..., Any], *args: Any, **kwargs: Any):
    """Run a sync callable in a worker thread, at most SECURITY_MAX_CONCURRENCY at once."""

    async with _security_sem:
        return await anyio.to_thread.run_sync(lambda: func(*args, **kwargs))
