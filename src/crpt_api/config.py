"""Configuration module using Pydantic Settings."""

from functools import lru_cache

import httpx
from pydantic_settings import BaseSettings, SettingsConfigDict

from crpt_api.quota.limiter import TimeUnit, WindowConfig


class Settings(BaseSettings):
    """Client settings loaded from CRPT_-prefixed environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CRPT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Registry
    base_url: str = "https://ismp.crpt.ru/"
    api_token: str | None = None

    # Rate limit: rate_limit_requests per one rate_limit_time_unit
    rate_limit_time_unit: TimeUnit = TimeUnit.SECONDS
    rate_limit_requests: int = 1

    # HTTP Client
    http_timeout_connect: float = 10.0
    http_timeout_read: float = 30.0

    # Logging
    log_level: str = "INFO"

    @property
    def window(self) -> WindowConfig:
        """Rate limit policy built from the settings."""
        return WindowConfig.per(self.rate_limit_time_unit, self.rate_limit_requests)

    @property
    def http_timeout(self) -> httpx.Timeout:
        """Transport timeout built from the settings."""
        return httpx.Timeout(
            connect=self.http_timeout_connect,
            read=self.http_timeout_read,
            write=self.http_timeout_read,
            pool=self.http_timeout_connect,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
