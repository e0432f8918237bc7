from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./vouchers.sqlite",
        validation_alias=AliasChoices("DATABASE_URL", "MONGO_URL"),
    )
    MONGO_DATABASE: str = "rewards"

    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: float = 30.0
    DB_POOL_RECYCLE: int = 1800
    DB_RESET_ON_STARTUP: bool = False

    STORE_TIMEOUT_SEC: float = 5.0
    ISSUANCE_MODE: Literal["strict", "best_effort"] = "strict"

    TOP_REFERRERS_LIMIT: int = 10


settings = Settings()
