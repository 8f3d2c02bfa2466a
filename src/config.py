from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Layout persistence
    LAYOUT_STORE_BACKEND: Literal["memory", "redis"] = "redis"
    REDIS_URL: str = "redis://redis:6379/0"
    LAYOUT_KEY_PREFIX: str = "treeflow"
    PERSIST_DEBOUNCE_SECONDS: float = Field(default=0.5, ge=0.0)

    # Layout geometry
    ROW_SPACING: float = 150.0
    CHILD_X_SPACING: float = 250.0
    CHILD_Y_OFFSET: float = 150.0

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="json", description="'json' for production, 'console' for dev")


def get_settings() -> Settings:
    return Settings()
