from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SETTINGS__",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")

    blocklist_db_path: Optional[str] = None
    blocklist_api_url: str = Field(default="https://en.wikipedia.org/w/api.php")
    blocklist_user_agent: str = Field(default="wpbl-sync/0.1 (incremental block list mirror)")
    blocklist_request_timeout: float = Field(default=30.0)

    @validator("blocklist_db_path")
    def expand_db_path(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return os.path.expanduser(value)

    @validator("log_level")
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
