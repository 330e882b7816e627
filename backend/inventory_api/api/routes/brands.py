"""Brand master endpoints (super admin only)."""

from datetime import datetime
from math import ceil
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.core.audit import client_addr, log_audit
from inventory_api.core.config import settings
from inventory_api.core.db import get_session
from inventory_api.core.db_errors import raise_on_duplicate, raise_on_lock_conflict
from inventory_api.core.deps import require_super_admin
from inventory_api.core.optimistic_lock import ensure_expected_timestamp
from inventory_api.core.sequences import get_sequence_config
from inventory_api.models.inv_brand import InvBrandMaster
from inventory_api.models.inv_user import InvUserMaster
from inventory_api.schemas.brand import BrandCreate, BrandListOut, BrandOut, BrandUpdate
from inventory_api.services.sequences import SequenceAllocator, get_sequence_allocator

router = APIRouter(prefix="/brands", tags=["brands"])

BRAND_KIND = "Brand"


async def _name_taken(
    session: AsyncSession, brand_name: str, exclude_code: Optional[str] = None
) -> bool:
    stmt = select(InvBrandMaster.brand_code).where(
        func.lower(InvBrandMaster.brand_name) == brand_name.lower()
    )
    if exclude_code:
        stmt = stmt.where(InvBrandMaster.brand_code != exclude_code)
    return (await session.scalar(stmt)) is not None


@router.post("", response_model=BrandOut, status_code=status.HTTP_201_CREATED)
async def create_brand(
    payload: BrandCreate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: InvUserMaster = Depends(require_super_admin),
    allocator: SequenceAllocator = Depends(get_sequence_allocator),
):
    if payload.brand_code:
        exists = await session.scalar(
            select(InvBrandMaster.brand_code).where(
                InvBrandMaster.brand_code == payload.brand_code
            )
        )
        if exists:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Brand with this code already exists",
            )

    if await _name_taken(session, payload.brand_name):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Brand with this name already exists",
        )

    if payload.brand_code:
        # A hand-picked code in our own format must never be handed out later;
        # raise the counter before the row becomes visible.
        supplied = get_sequence_config(BRAND_KIND).parse(payload.brand_code)
        if supplied is not None:
            await allocator.sync(BRAND_KIND, supplied)

    brand_code = payload.brand_code or await allocator.allocate(BRAND_KIND)
    obj = InvBrandMaster(
        brand_code=brand_code,
        brand_name=payload.brand_name,
        supplier_name=payload.supplier_name,
        created_by=user.inv_user_code,
    )
    session.add(obj)
    try:
        await session.flush()
        await log_audit(
            session,
            user.inv_user_code,
            "brand",
            brand_code,
            "CREATE",
            details=payload.model_dump(),
            remote_addr=client_addr(request),
        )
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise_on_duplicate(exc, "Brand with this code or name already exists")

    await session.refresh(obj)
    return obj


@router.get("", response_model=BrandListOut)
async def list_brands(
    request: Request,
    search: Optional[str] = None,
    supplier: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    session: AsyncSession = Depends(get_session),
    user: InvUserMaster = Depends(require_super_admin),
):
    page = max(page, 1)
    limit = min(max(limit, 1), 100)
    conds = []
    if search:
        like = f"%{search}%"
        conds.append(
            or_(
                InvBrandMaster.brand_code.ilike(like),
                InvBrandMaster.brand_name.ilike(like),
                InvBrandMaster.supplier_name.ilike(like),
            )
        )
    if supplier:
        conds.append(InvBrandMaster.supplier_name.ilike(f"%{supplier}%"))

    stmt = select(InvBrandMaster)
    count_stmt = select(func.count()).select_from(InvBrandMaster)
    if conds:
        c = and_(*conds)
        stmt = stmt.where(c)
        count_stmt = count_stmt.where(c)

    total = (await session.execute(count_stmt)).scalar_one()
    result = await session.execute(
        stmt.order_by(InvBrandMaster.created_at.desc(), InvBrandMaster.brand_code.desc())
        .limit(limit)
        .offset((page - 1) * limit)
    )
    items = result.scalars().all()

    await log_audit(
        session,
        user.inv_user_code,
        "brand",
        None,
        "LIST",
        details={"search": search, "supplier": supplier, "page": page, "limit": limit},
        remote_addr=client_addr(request),
        independent_txn=True,
    )

    return BrandListOut(items=items, total=total, page=page, total_pages=ceil(total / limit))


@router.get("/{brand_code}", response_model=BrandOut)
async def get_brand(
    brand_code: str,
    session: AsyncSession = Depends(get_session),
    user: InvUserMaster = Depends(require_super_admin),
):
    obj = await session.scalar(
        select(InvBrandMaster).where(InvBrandMaster.brand_code == brand_code)
    )
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Brand not found")
    return obj


@router.put("/{brand_code}", response_model=BrandOut)
async def update_brand(
    brand_code: str,
    payload: BrandUpdate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: InvUserMaster = Depends(require_super_admin),
):
    try:
        obj = await session.scalar(
            select(InvBrandMaster)
            .where(InvBrandMaster.brand_code == brand_code)
            .with_for_update(nowait=settings.DB_NOWAIT_LOCKS)
        )
        if not obj:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Brand not found"
            )

        ensure_expected_timestamp(obj.updated_at, payload.expected_updated_at)

        data = payload.model_dump(exclude_unset=True, exclude_none=True)
        data.pop("expected_updated_at", None)
        if "brand_name" in data and await _name_taken(session, data["brand_name"], brand_code):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Brand with this name already exists",
            )
        if data:
            await session.execute(
                update(InvBrandMaster)
                .where(InvBrandMaster.brand_code == brand_code)
                .values(**data, updated_by=user.inv_user_code, updated_at=datetime.now())
                .execution_options(synchronize_session=False)
            )
            await log_audit(
                session,
                user.inv_user_code,
                "brand",
                brand_code,
                "UPDATE",
                details=data,
                remote_addr=client_addr(request),
            )
        await session.commit()
    except OperationalError as exc:
        await session.rollback()
        raise_on_lock_conflict(exc)

    await session.refresh(obj)
    return obj


@router.delete("/{brand_code}")
async def delete_brand(
    brand_code: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: InvUserMaster = Depends(require_super_admin),
):
    result = await session.execute(
        delete(InvBrandMaster)
        .where(InvBrandMaster.brand_code == brand_code)
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Brand not found")

    await log_audit(
        session,
        user.inv_user_code,
        "brand",
        brand_code,
        "DELETE",
        remote_addr=client_addr(request),
    )
    await session.commit()
    return {"ok": True, "message": "Brand deleted successfully"}
