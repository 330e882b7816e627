from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.core.audit import client_addr, log_audit
from inventory_api.core.config import settings
from inventory_api.core.db import get_session
from inventory_api.core.deps import get_current_user
from inventory_api.core.logging import user_code_ctx_var
from inventory_api.core.rate_limit import limiter
from inventory_api.core.security import create_access_token, verify_password_async
from inventory_api.models.inv_user import InvUserMaster
from inventory_api.schemas.auth import LoginRequest, LoginResponse
from inventory_api.schemas.user import UserOut

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE)
async def login(
    payload: LoginRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
):
    user = (
        await session.execute(
            select(InvUserMaster).where(InvUserMaster.inv_user_name == payload.username)
        )
    ).scalar_one_or_none()

    if (
        not user
        or user.active_flag != "Y"
        or not await verify_password_async(payload.password, user.inv_user_pwd)
    ):
        if user:
            await log_audit(
                session,
                user.inv_user_code,
                "auth",
                None,
                "LOGIN_FAILED",
                details={"reason": "invalid_credentials"},
                remote_addr=client_addr(request),
            )
            await session.commit()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )

    await session.execute(
        update(InvUserMaster)
        .where(InvUserMaster.inv_user_code == user.inv_user_code)
        .values(last_login_at=datetime.now())
        .execution_options(synchronize_session=False)
    )
    request.state.user_code = user.inv_user_code
    user_code_ctx_var.set(user.inv_user_code)
    access_token = create_access_token({"sub": user.inv_user_code})

    await log_audit(
        session,
        user.inv_user_code,
        "auth",
        None,
        "LOGIN",
        remote_addr=client_addr(request),
    )
    await session.commit()
    return LoginResponse(
        access_token=access_token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user_code=user.inv_user_code,
        user_name=user.inv_user_name,
        display_name=user.inv_display_name,
    )


@router.get("/me", response_model=UserOut)
async def me(user: InvUserMaster = Depends(get_current_user)):
    return user
