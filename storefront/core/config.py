# storefront/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required in production (.env):
      - DATABASE_URL (Postgres connection string)
      - REDIS_URL
      - AUTH_SECRET (signing secret for session tokens)
      - SUPABASE_URL + SUPABASE_SERVICE_ROLE_KEY (product image bucket)

    Defaults are good enough for local development against SQLite and a
    local redis.
    """

    PROJECT_NAME: str = "Storefront API"
    API_PREFIX: str = ""

    # Persistence
    DATABASE_URL: str = "sqlite:///./storefront.db"

    # Session cache
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_CONNECT_TIMEOUT: float = 1.0

    # Session tokens
    AUTH_SECRET: str = "change-me"
    AUTH_ALG: str = "HS256"
    AUTH_TOKEN_TTL: int = 60 * 60 * 24

    # Image storage (Supabase bucket)
    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    STORAGE_BUCKET: str = "images"
    DEFAULT_IMAGE_NAME: str = "default.png"
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
