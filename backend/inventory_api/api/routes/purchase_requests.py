"""Purchase request endpoints; PR numbers come from the PurchaseRequest sequence."""

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from loguru import logger
from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.core.audit import client_addr, log_audit
from inventory_api.core.db import get_session
from inventory_api.core.deps import get_current_user
from inventory_api.models.inv_purchase_request import PR_STATUSES, InvPurchaseRequest
from inventory_api.models.inv_user import InvUserMaster
from inventory_api.schemas.purchase_request import (
    PurchaseRequestCreate,
    PurchaseRequestListOut,
    PurchaseRequestOut,
    PurchaseRequestUpdate,
)
from inventory_api.services.sequences import SequenceAllocator, get_sequence_allocator

router = APIRouter(prefix="/purchase-requests", tags=["purchase-requests"])


@router.post("", response_model=PurchaseRequestOut, status_code=status.HTTP_201_CREATED)
async def create_purchase_request(
    payload: PurchaseRequestCreate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: InvUserMaster = Depends(get_current_user),
    allocator: SequenceAllocator = Depends(get_sequence_allocator),
):
    vendor = payload.pr_vendor.strip()
    if not vendor:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="PR Vendor is required"
        )

    pr_number = await allocator.allocate("PurchaseRequest")
    obj = InvPurchaseRequest(
        pr_number=pr_number,
        pr_date=payload.pr_date or date.today(),
        pr_vendor=vendor,
        status="pending",
        remarks=payload.remarks,
        created_by=user.inv_user_code,
    )
    session.add(obj)
    await session.flush()
    await log_audit(
        session,
        user.inv_user_code,
        "purchase_request",
        pr_number,
        "CREATE",
        details={"pr_vendor": vendor, "pr_date": obj.pr_date},
        remote_addr=client_addr(request),
    )
    await session.commit()
    logger.bind(pr_number=pr_number, pr_vendor=vendor).info("purchase_request_created")
    return obj


@router.get("", response_model=PurchaseRequestListOut)
async def list_purchase_requests(
    status_filter: Optional[str] = Query(None, alias="status"),
    vendor: Optional[str] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    search: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
    session: AsyncSession = Depends(get_session),
    user: InvUserMaster = Depends(get_current_user),
):
    limit = min(max(limit, 1), 200)
    offset = max(offset, 0)
    conds = []
    if status_filter:
        conds.append(InvPurchaseRequest.status == status_filter)
    if vendor:
        conds.append(InvPurchaseRequest.pr_vendor.ilike(f"%{vendor}%"))
    if from_date:
        conds.append(InvPurchaseRequest.pr_date >= from_date)
    if to_date:
        conds.append(InvPurchaseRequest.pr_date <= to_date)
    if search:
        like = f"%{search}%"
        conds.append(
            or_(
                InvPurchaseRequest.pr_number.ilike(like),
                InvPurchaseRequest.pr_vendor.ilike(like),
                InvPurchaseRequest.remarks.ilike(like),
            )
        )

    stmt = select(InvPurchaseRequest)
    count_stmt = select(func.count()).select_from(InvPurchaseRequest)
    if conds:
        c = and_(*conds)
        stmt = stmt.where(c)
        count_stmt = count_stmt.where(c)

    total = (await session.execute(count_stmt)).scalar_one()
    result = await session.execute(
        stmt.order_by(InvPurchaseRequest.pr_date.desc(), InvPurchaseRequest.pr_number.desc())
        .limit(limit)
        .offset(offset)
    )
    return PurchaseRequestListOut(
        items=result.scalars().all(), total=total, limit=limit, offset=offset
    )


@router.get("/{pr_number}", response_model=PurchaseRequestOut)
async def get_purchase_request(
    pr_number: str,
    session: AsyncSession = Depends(get_session),
    user: InvUserMaster = Depends(get_current_user),
):
    obj = await session.get(InvPurchaseRequest, pr_number)
    if not obj:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Purchase request not found"
        )
    return obj


@router.put("/{pr_number}", response_model=PurchaseRequestOut)
async def update_purchase_request(
    pr_number: str,
    payload: PurchaseRequestUpdate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: InvUserMaster = Depends(get_current_user),
):
    obj = await session.get(InvPurchaseRequest, pr_number)
    if not obj:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Purchase request not found"
        )

    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "status" in data and data["status"] not in PR_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"status must be one of: {', '.join(PR_STATUSES)}",
        )
    if "pr_vendor" in data:
        data["pr_vendor"] = data["pr_vendor"].strip()
        if not data["pr_vendor"]:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="PR Vendor is required"
            )

    if data:
        for key, value in data.items():
            setattr(obj, key, value)
        obj.updated_by = user.inv_user_code
        obj.updated_at = datetime.now()
        await log_audit(
            session,
            user.inv_user_code,
            "purchase_request",
            pr_number,
            "UPDATE",
            details=data,
            remote_addr=client_addr(request),
        )
        await session.commit()
    return obj


@router.delete("/{pr_number}")
async def delete_purchase_request(
    pr_number: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: InvUserMaster = Depends(get_current_user),
):
    result = await session.execute(
        delete(InvPurchaseRequest)
        .where(InvPurchaseRequest.pr_number == pr_number)
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Purchase request not found"
        )

    await log_audit(
        session,
        user.inv_user_code,
        "purchase_request",
        pr_number,
        "DELETE",
        remote_addr=client_addr(request),
    )
    await session.commit()
    return {"ok": True, "message": "Purchase request deleted successfully"}
