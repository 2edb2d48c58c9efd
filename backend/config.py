from datetime import UTC, datetime
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime.

    Replaces the deprecated ``datetime.utcnow()`` while keeping datetimes
    naive so they stay compatible with SQLite (which doesn't store tz info).
    """
    return datetime.now(UTC).replace(tzinfo=None)


class Settings(BaseSettings):
    app_name: str = "Vjezbajmo"
    database_url: str = f"sqlite+aiosqlite:///{Path(__file__).resolve().parent.parent / 'data' / 'vjezbajmo.db'}"
    cache_backend: Literal["memory", "sql"] = "memory"
    cache_retention_days: int | None = None  # None = never prune

    # Provider credentials also accept the bare vendor variable names
    openai_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("VJEZBAJMO_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    anthropic_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("VJEZBAJMO_ANTHROPIC_API_KEY", "ANTHROPIC_API_KEY"),
    )
    site_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("VJEZBAJMO_SITE_API_KEY", "SITE_API_KEY"),
    )
    site_api_provider: Literal["openai", "anthropic"] | None = Field(
        default=None,
        validation_alias=AliasChoices("VJEZBAJMO_SITE_API_PROVIDER", "SITE_API_PROVIDER"),
    )

    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.8
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_temperature: float = 1.0
    generation_max_tokens: int = 2048

    require_auth: bool = False
    log_level: str = "INFO"
    debug: bool = False

    model_config = {"env_prefix": "VJEZBAJMO_", "env_file": ".env", "populate_by_name": True}


settings = Settings()
