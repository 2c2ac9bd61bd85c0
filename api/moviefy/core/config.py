"""Moviefy runtime configuration, read from the environment and `.env`."""

import json
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


def _split_list(value: str | list[str] | None) -> list[str]:
    """Accept a JSON array, a comma separated string or a list."""
    if value is None:
        return []
    items: list = value if isinstance(value, list) else []
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.startswith("["):
            try:
                items = json.loads(text)
            except json.JSONDecodeError:
                items = text.strip("[]").split(",")
        else:
            items = text.split(",")
    return [str(item).strip() for item in items if str(item).strip()]


class Settings(BaseSettings):
    """Every knob the API reads; field names map to upper-case env vars."""

    app_name: str = "Moviefy"
    environment: str = "development"
    api_prefix: str = "/api"

    database_url: str = "sqlite+aiosqlite:///./moviefy.db"
    test_database_url: Optional[str] = None

    metadata_api_base_url: str = "https://hurt-meadowlark-kailashvarma-0a2ec38d.koyeb.app"
    metadata_api_max_attempts: int = Field(default=3, ge=1)
    http_timeout_seconds: float = 15.0
    telegram_bot_username: str = "FileStoreStingBot"

    page_size_listings: int = 20
    page_size_search: int = 10
    home_section_item_count: int = 12

    admin_access_key: Optional[str] = None

    log_level: str = "INFO"
    cors_origins: list[str] | str = Field(default_factory=lambda: DEFAULT_CORS_ORIGINS.copy())
    health_allowlist: list[str] | str = Field(default_factory=list)

    @field_validator("cors_origins", "health_allowlist", mode="before")
    @classmethod
    def _parse_list(cls, value: str | list[str] | None) -> list[str]:
        return _split_list(value)

    @field_validator("cors_origins")
    @classmethod
    def _default_cors_origins(cls, value: list[str]) -> list[str]:
        return value or DEFAULT_CORS_ORIGINS.copy()

    @field_validator("metadata_api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Settings are parsed once per process."""
    return Settings()


settings = get_settings()
