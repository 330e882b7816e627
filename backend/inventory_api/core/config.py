"""Application configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed settings exposed via dependency injection throughout the app."""

    # Read .env with BOM tolerance; case-sensitive keys
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=True,
    )

    APP_NAME: str = "Inventory API"
    ENV: str = "dev"  # dev | staging | prod
    DEBUG: bool = False

    # JWT
    SECRET_KEY: str  # set via env/.env
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    JWT_ISSUER: str = "inventory-api"
    JWT_AUDIENCE: str = "inventory-clients"

    # CORS
    CORS_ALLOWED_ORIGINS: list[str] = Field(default_factory=list)

    # DB. DB_URL wins over the discrete MySQL settings when provided
    # (e.g. sqlite+aiosqlite:///./inventory.db for local runs).
    DB_URL: str | None = None
    DB_HOST: str = "127.0.0.1"
    DB_PORT: int = 3306
    DB_USER: str = "appadmin"
    DB_PASSWORD: str = ""  # set via env/.env
    DB_NAME: str = "inventory"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_ISOLATION_LEVEL: str = "READ COMMITTED"  # empty string keeps the driver default
    DB_NOWAIT_LOCKS: bool = False
    DB_CREATE_TABLES: bool = False  # create_all on startup; local/SQLite runs only
    DB_RETRY_ATTEMPTS: int = 4
    DB_RETRY_BASE_DELAY: float = 0.05
    DB_RETRY_JITTER: float = 0.025

    # Number of times a first-use counter insert may lose the creation race
    # before the allocator gives up.
    SEQUENCE_INIT_ATTEMPTS: int = 5

    LOGIN_RATE: str = "10/minute"
    SECURITY_MAX_CONCURRENCY: int = 4
    MAX_BODY_BYTES: int = 1024 * 1024  # 1 MB

    @property
    def DATABASE_URL(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        return (
            f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4"
        )


settings = Settings()
