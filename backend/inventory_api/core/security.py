"""Password hashing and JWT helper utilities."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import jwt
from passlib.context import CryptContext

from inventory_api.core.concurrency import run_in_thread_security
from inventory_api.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = "HS256"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if the plain password matches the stored hash."""

    return pwd_context.verify(plain_password, hashed_password)


async def verify_password_async(plain: str, hashed: str) -> bool:
    return await run_in_thread_security(verify_password, plain, hashed)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


async def get_password_hash_async(plain: str) -> str:
    return await run_in_thread_security(get_password_hash, plain)


def create_access_token(data: Dict[str, Any], expires: timedelta | None = None) -> str:
    """Sign an access token carrying ``data`` plus the standard time/issuer claims."""

    now = datetime.now(timezone.utc)
    if expires is None:
        expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES or 15)
    to_encode = {"type": "access", **data}
    to_encode.update(
        {
            "exp": now + expires,
            "iat": now,
            "nbf": now,
            "iss": settings.JWT_ISSUER,
            "aud": settings.JWT_AUDIENCE,
        }
    )
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)
