from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    log_level: str = "INFO"

    # Infra
    database_url: str = "postgresql://app:app@db:5432/app"
    db_pool_max_size: int = Field(10, ge=1)
    redis_url: str = "redis://redis:6379/0"
    smtp_base_url: str = "http://mail-relay:8025"
    email_sender: str | None = None

    # Auth
    bcrypt_rounds: int = Field(12, ge=4, le=31)
    session_ttl_seconds: int = Field(86400, gt=0)

    # One-time codes
    code_ttl_seconds: int = Field(600, gt=0)
    code_length: int = Field(6, ge=4, le=10)
    code_lock_stripes: int = Field(64, ge=1)
    code_sweep_interval_seconds: float = Field(60.0, gt=0)

    # Outbox worker
    outbox_poll_interval_ms: int = Field(500, gt=0)
    outbox_batch_size: int = Field(10, ge=1)
    outbox_max_attempts: int = Field(10, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
