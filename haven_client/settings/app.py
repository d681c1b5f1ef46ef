"""Application settings powered by Pydantic BaseSettings."""

from pathlib import Path
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_BASE_URL = "https://harmonyhavenappserver.erdemserhat.com/"


class HavenSettings(BaseSettings):
    """Centralized environment configuration.

    Every field can be overridden with a ``HAVEN_``-prefixed environment
    variable or a ``.env`` file entry.
    """

    model_config = SettingsConfigDict(
        env_prefix="HAVEN_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = DEFAULT_BASE_URL
    user_agent: str = "harmony-haven-client/0.1"
    request_timeout_seconds: Annotated[float, Field(gt=0.0, le=300.0)] | None = None
    max_retries: Annotated[int, Field(ge=0, le=10)] = 3
    retry_delay_seconds: Annotated[float, Field(ge=0.0, le=60.0)] = 1.0

    log_level: str = "INFO"
    log_json: bool = False
    log_http_traffic: bool = True

    token_store_path: Path = Path.home() / ".harmony-haven" / "session.sqlite3"
    auth_token_key: str = "authToken"

    quotes_page_size: Annotated[int, Field(ge=1, le=500)] = 20
    quotes_default_category: int = 21
    notifications_page_size: Annotated[int, Field(ge=1, le=500)] = 20
    first_page_retry_delay_seconds: Annotated[float, Field(ge=0.0)] = 3.0
    duplicate_page_advance_delay_seconds: Annotated[float, Field(ge=0.0)] = 0.5
    force_load_retry_delay_seconds: Annotated[float, Field(ge=0.0)] = 1.0


def get_settings() -> HavenSettings:
    """Get a settings instance."""
    return HavenSettings()
