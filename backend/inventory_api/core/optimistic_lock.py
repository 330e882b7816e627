"""Helpers for optimistic concurrency control."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status


def _wall_clock(value: Optional[datetime]) -> Optional[datetime]:
    # Rows hold naive timestamps; some clients echo them back with a "Z" suffix.
    if value is None or value.tzinfo is None:
        return value
    return value.replace(tzinfo=None)


def ensure_expected_timestamp(
    current: Optional[datetime], expected: Optional[datetime]
) -> None:
    """Raise HTTP 409 if the persisted ``updated_at`` differs from what the client last saw."""

    if _wall_clock(current) == _wall_clock(expected):
        return
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="Record has been updated by someone else. Please reload and try again.",
    )
