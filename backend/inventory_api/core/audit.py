"""Audit trail helpers shared by every route module."""

from __future__ import annotations

import json
from typing import Any, Optional

from fastapi import Request
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.core.db import SessionLocal
from inventory_api.models.inv_audit import InvAuditLog


def client_addr(request: Request | None) -> Optional[str]:
    return request.client.host if request is not None and request.client else None


async def log_audit(
    session: AsyncSession,
    user_code: str,
    entity: str,
    entity_id: Optional[str],
    action: str,
    details: Optional[dict[str, Any]] = None,
    remote_addr: Optional[str] = None,
    *,
    independent_txn: bool = False,
) -> None:
    """Record an audit row.

    By default the row joins the caller's transaction and is committed (or
    rolled back) with it. ``independent_txn`` writes it in a session of its
    own, for read-only endpoints that never commit.
    """

    payload = {
        "user_code": user_code,
        "entity": entity,
        "entity_id": entity_id,
        "action": action,
        "details": json.dumps(details, default=str) if details is not None else None,
        "remote_addr": remote_addr,
    }
    if independent_txn:
        async with SessionLocal() as audit_session:
            async with audit_session.begin():
                await audit_session.execute(insert(InvAuditLog).values(**payload))
        return

    await session.execute(insert(InvAuditLog).values(**payload))
