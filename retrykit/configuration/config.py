"""Configuration management for retrykit."""

from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class RetrySettings(BaseSettings):
    """Default retry settings, read from ``RETRY_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    max_attempts: int = Field(default=3, alias="RETRY_MAX_ATTEMPTS")
    initial_delay_ms: float = Field(default=1000, alias="RETRY_INITIAL_DELAY_MS")
    multiplier: float = Field(default=1.0, alias="RETRY_MULTIPLIER")

    # Dotted exception paths, e.g. "TimeoutError,socket.timeout"
    include: Annotated[list[str], NoDecode] = Field(default_factory=list, alias="RETRY_INCLUDE")

    @field_validator("include", mode="before")
    @classmethod
    def parse_include(cls, value: str | list[str] | None) -> list[str]:
        """Accept a comma-separated string as well as a list."""
        if value is None:
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return list(value)


@lru_cache
def get_settings() -> RetrySettings:
    """Get cached settings instance."""
    return RetrySettings()
