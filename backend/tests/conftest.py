import os
import sys
import tempfile
from pathlib import Path

import pytest

# Settings are read at import time; point them at a throwaway SQLite file first.
_DB_DIR = tempfile.mkdtemp(prefix="inventory-api-tests-")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ["DB_URL"] = f"sqlite+aiosqlite:///{Path(_DB_DIR) / 'test.db'}"
os.environ.setdefault("ENV", "test")

# Add the backend directory so `inventory_api` imports resolve during tests
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.append(str(BACKEND_DIR))

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fast_retries(monkeypatch):
    from inventory_api.core.config import settings

    monkeypatch.setattr(settings, "DB_RETRY_ATTEMPTS", 2)
    monkeypatch.setattr(settings, "DB_RETRY_BASE_DELAY", 0.0)
    monkeypatch.setattr(settings, "DB_RETRY_JITTER", 0.0)


@pytest.fixture
async def db(anyio_backend):
    """Fresh schema for every test."""

    from inventory_api.core.db import engine
    from inventory_api.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    # Pool waiters bind to the running loop; every anyio test gets a new one.
    await engine.dispose()


@pytest.fixture
async def client(db):
    import httpx

    from inventory_api.main import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Insert a user row and return Authorization headers carrying its token."""

    from inventory_api.core.db import SessionLocal
    from inventory_api.core.security import create_access_token, get_password_hash
    from inventory_api.models.inv_user import InvUserMaster

    async def _make_user(
        user_code: str, *, super_admin: bool = False, password: str = "secret"
    ) -> dict[str, str]:
        async with SessionLocal() as session:
            session.add(
                InvUserMaster(
                    inv_user_code=user_code,
                    inv_user_name=user_code.lower(),
                    inv_user_pwd=get_password_hash(password),
                    inv_display_name=user_code.title(),
                    is_super_admin="Y" if super_admin else "N",
                    created_by="tests",
                )
            )
            await session.commit()
        token = create_access_token({"sub": user_code})
        return {"Authorization": f"Bearer {token}"}

    return _make_user
