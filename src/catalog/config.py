from __future__ import annotations

from datetime import datetime

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CATALOG_", env_file=".env", extra="ignore", populate_by_name=True
    )

    app_name: str = "character-catalog"
    env: str = "dev"
    host: str = "0.0.0.0"  # nosec B104 - intentional for container deployments
    port: int = 8080

    # Database (SQLite for dev, PostgreSQL in production)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./catalog.db",
        validation_alias="DATABASE_URL",
    )

    # Cache backend: "memory" or "redis"
    cache_backend: str = Field(default="memory", validation_alias="CACHE_BACKEND")
    redis_url: str = Field(default="redis://localhost:6379/0", validation_alias="REDIS_URL")
    redis_instance_name: str = Field(default="", validation_alias="REDIS_INSTANCE_NAME")

    # Cache envelope and expiration defaults
    cache_key_base: str = "characters"
    cache_compression_threshold: int = Field(default=2048, ge=1)  # 2KB
    cache_compression_level: int = Field(default=1, ge=0, le=9)
    cache_default_ttl_seconds: int | None = Field(default=300, ge=1)  # 5 minutes
    cache_default_absolute_expiration: datetime | None = None

    # Observability
    log_level: str = "INFO"
    log_json: bool = False


settings = Settings()
