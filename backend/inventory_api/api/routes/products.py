"""Product master endpoints."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.core.audit import client_addr, log_audit
from inventory_api.core.config import settings
from inventory_api.core.db import get_session
from inventory_api.core.db_errors import raise_on_duplicate, raise_on_lock_conflict
from inventory_api.core.deps import get_current_user
from inventory_api.core.optimistic_lock import ensure_expected_timestamp
from inventory_api.core.sequences import get_sequence_config
from inventory_api.models.inv_product import InvProductMaster
from inventory_api.models.inv_user import InvUserMaster
from inventory_api.schemas.product import ProductCreate, ProductListOut, ProductOut, ProductUpdate
from inventory_api.services.sequences import SequenceAllocator, get_sequence_allocator

router = APIRouter(prefix="/products", tags=["products"])

PRODUCT_KIND = "Product"


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: InvUserMaster = Depends(get_current_user),
    allocator: SequenceAllocator = Depends(get_sequence_allocator),
):
    supplied_id = (payload.prod_id or "").strip() or None
    if supplied_id and await session.get(InvProductMaster, supplied_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Product with this ID already exists",
        )

    if supplied_id:
        supplied = get_sequence_config(PRODUCT_KIND).parse(supplied_id)
        if supplied is not None:
            await allocator.sync(PRODUCT_KIND, supplied)

    prod_id = supplied_id or await allocator.allocate(PRODUCT_KIND)
    data = payload.model_dump(exclude={"prod_id"})
    obj = InvProductMaster(**data, prod_id=prod_id, created_by=user.inv_user_code)
    session.add(obj)
    try:
        await session.flush()
        await log_audit(
            session,
            user.inv_user_code,
            "product",
            prod_id,
            "CREATE",
            details=data,
            remote_addr=client_addr(request),
        )
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise_on_duplicate(exc, "Product with this ID already exists")

    await session.refresh(obj)
    return obj


@router.get("", response_model=ProductListOut)
async def list_products(
    search: Optional[str] = None,
    brand: Optional[str] = None,
    category: Optional[str] = None,
    product_type: Optional[str] = None,
    series: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
    session: AsyncSession = Depends(get_session),
    user: InvUserMaster = Depends(get_current_user),
):
    conds = []
    if search:
        like = f"%{search}%"
        conds.append(
            or_(
                InvProductMaster.prod_id.ilike(like),
                InvProductMaster.product_code.ilike(like),
                InvProductMaster.description.ilike(like),
            )
        )
    if brand:
        conds.append(InvProductMaster.brand == brand)
    if category:
        conds.append(InvProductMaster.category == category)
    if product_type:
        conds.append(InvProductMaster.product_type == product_type)
    if series:
        conds.append(InvProductMaster.series == series)

    stmt = select(InvProductMaster)
    count_stmt = select(func.count()).select_from(InvProductMaster)
    if conds:
        c = and_(*conds)
        stmt = stmt.where(c)
        count_stmt = count_stmt.where(c)

    total = (await session.execute(count_stmt)).scalar_one()
    result = await session.execute(
        stmt.order_by(InvProductMaster.prod_id)
        .limit(min(max(limit, 1), 200))
        .offset(max(offset, 0))
    )
    return ProductListOut(items=result.scalars().all(), total=total)


@router.get("/{prod_id}", response_model=ProductOut)
async def get_product(
    prod_id: str,
    session: AsyncSession = Depends(get_session),
    user: InvUserMaster = Depends(get_current_user),
):
    obj = await session.get(InvProductMaster, prod_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return obj


@router.put("/{prod_id}", response_model=ProductOut)
async def update_product(
    prod_id: str,
    payload: ProductUpdate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: InvUserMaster = Depends(get_current_user),
):
    try:
        obj = await session.scalar(
            select(InvProductMaster)
            .where(InvProductMaster.prod_id == prod_id)
            .with_for_update(nowait=settings.DB_NOWAIT_LOCKS)
        )
        if not obj:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
            )

        ensure_expected_timestamp(obj.updated_at, payload.expected_updated_at)

        data = payload.model_dump(exclude_unset=True, exclude_none=True)
        data.pop("expected_updated_at", None)
        if data:
            await session.execute(
                update(InvProductMaster)
                .where(InvProductMaster.prod_id == prod_id)
                .values(**data, updated_by=user.inv_user_code, updated_at=datetime.now())
                .execution_options(synchronize_session=False)
            )
            await log_audit(
                session,
                user.inv_user_code,
                "product",
                prod_id,
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


@router.delete("/{prod_id}")
async def delete_product(
    prod_id: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: InvUserMaster = Depends(get_current_user),
):
    result = await session.execute(
        delete(InvProductMaster)
        .where(InvProductMaster.prod_id == prod_id)
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    await log_audit(
        session,
        user.inv_user_code,
        "product",
        prod_id,
        "DELETE",
        remote_addr=client_addr(request),
    )
    await session.commit()
    return {"ok": True, "message": "Product deleted successfully"}
