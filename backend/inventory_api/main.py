"""Application entry point for the Inventory API service."""

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.api.routes.auth import router as auth_router
from inventory_api.api.routes.brands import router as brands_router
from inventory_api.api.routes.lookups import colors_router, series_router
from inventory_api.api.routes.products import router as products_router
from inventory_api.api.routes.purchase_requests import router as purchase_requests_router
from inventory_api.api.routes.sequences import router as sequences_router
from inventory_api.core.config import settings
from inventory_api.core.db import engine, get_session
from inventory_api.core.errors import StoreUnavailable, UnknownEntityKind
from inventory_api.core.logging import setup_logging
from inventory_api.core.middleware import BodySizeLimitMiddleware, RequestContextLogMiddleware
from inventory_api.core.rate_limit import init_rate_limiter
from inventory_api.models import Base

setup_logging()

app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)

init_rate_limiter(app)

app.add_middleware(RequestContextLogMiddleware)


def _cors_origins() -> list[str]:
    if settings.ENV == "prod":
        if not settings.CORS_ALLOWED_ORIGINS:
            raise RuntimeError("CORS_ALLOWED_ORIGINS must be configured for prod")
        return settings.CORS_ALLOWED_ORIGINS
    return settings.CORS_ALLOWED_ORIGINS or ["http://localhost:5173"]


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
)

app.add_middleware(BodySizeLimitMiddleware)


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Code allocation is temporarily unavailable. Please retry."},
        headers={"Retry-After": "1"},
    )


@app.exception_handler(UnknownEntityKind)
async def unknown_entity_kind_handler(request: Request, exc: UnknownEntityKind):
    logger.bind(entity_kind=exc.entity_kind).error("sequence_kind_not_configured")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Code sequence is not configured for this entity."},
    )


@app.on_event("startup")
async def startup_event():
    """Create missing tables when running against a throwaway/local database."""
    if settings.DB_CREATE_TABLES:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("db_tables_ensured")


@app.on_event("shutdown")
async def shutdown_event():
    await engine.dispose()


@app.get("/api/healthz", tags=["system"], summary="Liveness probe")
def healthz() -> dict[str, str]:
    """Simple liveness probe that load balancers and monitors can call."""

    return {"status": "ok"}


@app.get("/api/readyz", tags=["system"], summary="Readiness probe")
async def readyz(session: AsyncSession = Depends(get_session)):
    try:
        await session.execute(text("SELECT 1"))
        return {"ready": True}
    except (OperationalError, DBAPIError):
        raise HTTPException(status_code=503, detail="Database not reachable")


app.include_router(auth_router, prefix="/api")
app.include_router(brands_router, prefix="/api")
app.include_router(colors_router, prefix="/api")
app.include_router(series_router, prefix="/api")
app.include_router(products_router, prefix="/api")
app.include_router(purchase_requests_router, prefix="/api")
app.include_router(sequences_router, prefix="/api")
