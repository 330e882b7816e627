"""Color and series masters: plain name lists used by the product form."""

from typing import List, Type

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.core.audit import client_addr, log_audit
from inventory_api.core.db import get_session
from inventory_api.core.deps import get_current_user
from inventory_api.models.inv_lookup import InvColorMaster, InvSeriesMaster
from inventory_api.models.inv_user import InvUserMaster
from inventory_api.schemas.lookup import LookupIn, LookupOut


def build_lookup_router(model: Type[InvColorMaster] | Type[InvSeriesMaster], prefix: str, label: str) -> APIRouter:
    router = APIRouter(prefix=f"/{prefix}", tags=[prefix])
    entity = label.lower()
    not_found = f"{label} not found"

    async def _get_or_404(session: AsyncSession, item_id: int):
        obj = await session.get(model, item_id)
        if obj is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        return obj

    @router.post("", response_model=LookupOut, status_code=status.HTTP_201_CREATED)
    async def create_item(
        payload: LookupIn,
        request: Request,
        session: AsyncSession = Depends(get_session),
        user: InvUserMaster = Depends(get_current_user),
    ):
        obj = model(name=payload.name.strip(), created_by=user.inv_user_code)
        session.add(obj)
        await session.flush()
        await log_audit(
            session,
            user.inv_user_code,
            entity,
            str(obj.id),
            "CREATE",
            details={"name": obj.name},
            remote_addr=client_addr(request),
        )
        await session.commit()
        return obj

    @router.get("", response_model=List[LookupOut])
    async def list_items(
        session: AsyncSession = Depends(get_session),
        user: InvUserMaster = Depends(get_current_user),
    ):
        result = await session.execute(select(model).order_by(model.name))
        return result.scalars().all()

    @router.get("/{item_id}", response_model=LookupOut)
    async def get_item(
        item_id: int,
        session: AsyncSession = Depends(get_session),
        user: InvUserMaster = Depends(get_current_user),
    ):
        return await _get_or_404(session, item_id)

    @router.put("/{item_id}", response_model=LookupOut)
    async def update_item(
        item_id: int,
        payload: LookupIn,
        request: Request,
        session: AsyncSession = Depends(get_session),
        user: InvUserMaster = Depends(get_current_user),
    ):
        obj = await _get_or_404(session, item_id)
        obj.name = payload.name.strip()
        await log_audit(
            session,
            user.inv_user_code,
            entity,
            str(item_id),
            "UPDATE",
            details={"name": obj.name},
            remote_addr=client_addr(request),
        )
        await session.commit()
        return obj

    @router.delete("/{item_id}")
    async def delete_item(
        item_id: int,
        request: Request,
        session: AsyncSession = Depends(get_session),
        user: InvUserMaster = Depends(get_current_user),
    ):
        obj = await _get_or_404(session, item_id)
        await session.delete(obj)
        await log_audit(
            session,
            user.inv_user_code,
            entity,
            str(item_id),
            "DELETE",
            remote_addr=client_addr(request),
        )
        await session.commit()
        return {"ok": True, "message": f"{label} deleted"}

    return router


colors_router = build_lookup_router(InvColorMaster, "colors", "Color")
series_router = build_lookup_router(InvSeriesMaster, "series", "Series")
