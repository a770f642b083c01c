"""Configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LEAKSCOPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database (scan history only, never credentials)
    database_url: str = Field(default="sqlite+aiosqlite:///./leakscope.db")
    history_limit: int = Field(default=100, ge=1, le=10000)

    # HTTP
    http_timeout: int = Field(default=30, ge=1, le=120)
    user_agent: str = Field(default="leakscope/0.3")

    # Source scanning
    max_bundle_fetches: int = Field(default=50, ge=0, le=500)
    max_linked_pages: int = Field(default=3, ge=0, le=50)
    inspect_max_depth: int = Field(default=4, ge=1, le=10)

    # Credential probing
    probe_timeout_seconds: float = Field(default=5.0, gt=0, le=60)
    dump_table_timeout_seconds: float = Field(default=3.0, gt=0, le=60)
    probe_min_interval_seconds: float = Field(default=0.0, ge=0, le=60)
    resource_read_limit: int = Field(default=100, ge=1, le=10000)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "text"] = Field(default="text")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
