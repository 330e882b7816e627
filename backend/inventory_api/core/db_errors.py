"""Shared helpers for database error handling."""

from __future__ import annotations

from typing import NoReturn

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, OperationalError


def raise_on_lock_conflict(exc: OperationalError) -> NoReturn:
    """Translate lock-nowait conflicts into user-friendly HTTP errors."""

    orig = getattr(exc, "orig", None)
    code = None
    if orig and getattr(orig, "args", None):
        try:
            code = int(orig.args[0])
        except (TypeError, ValueError):
            code = None
    message = str(getattr(exc, "orig", exc)).lower()
    if code in {3572} or "could not obtain lock" in message or "could not acquire" in message:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Resource is locked by another request. Please retry shortly.",
        ) from exc
    raise exc


def raise_on_duplicate(exc: IntegrityError, detail: str) -> NoReturn:
    """Turn a unique-key violation that slipped past the pre-checks into a 400."""

    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail) from exc
