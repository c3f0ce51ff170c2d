from pydantic_settings import BaseSettings
from pydantic import field_validator
from sqlalchemy.engine import make_url


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql+asyncpg://user:password@db:5432/property_listing"
    DB_SSL: bool = False
    DB_CONNECT_TIMEOUT: float = 5.0
    DB_COMMAND_TIMEOUT: float = 10.0
    # Empty disables caching entirely
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_TIMEOUT_SECONDS: float = 0.5
    CACHE_TTL_SECONDS: int = 3600
    USER_MANAGEMENT_URL: str = "http://user-management:8000"
    AUTH_TIMEOUT_SECONDS: float = 5.0
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    CORS_ORIGINS: list[str] = ["*"]

    @field_validator("DATABASE_URL")
    def ensure_async_driver(cls, v):
        """
        Rewrites plain postgres URLs to use the asyncpg driver, since the
        engine is always created with create_async_engine.
        """
        if v:
            try:
                url = make_url(v)
                if url.drivername in ("postgresql", "postgres"):
                    url = url.set(drivername="postgresql+asyncpg")
                return url.render_as_string(hide_password=False)
            except Exception:
                # If parsing fails, return the original value.
                return v
        return v

    @field_validator("LOG_FORMAT")
    def normalize_log_format(cls, v):
        return (v or "json").strip().lower()

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
