from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration, read from ``LOYALTY_*`` variables or ``.env``."""

    app_name: str = "Loyalty Points API"
    database_url: str = "sqlite:///loyalty_ledger.db"
    database_echo: bool = False
    # seconds a SQLite connection waits on a locked database file
    sqlite_busy_timeout: float = Field(default=15.0, gt=0)
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s %(message)s"
    # deposit notifications (email/SMS); off skips dispatch entirely
    notifications_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LOYALTY_",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
