"""Configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Third-party API keys
    builtwith_api_key: SecretStr | None = Field(default=None)
    pagespeed_api_key: SecretStr | None = Field(default=None)

    # API Configuration
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)

    # Fetching
    user_agent: str = Field(default=DEFAULT_USER_AGENT)
    fetch_timeout: float = Field(default=15.0, gt=0, le=120)
    proxy_url: str = Field(default="https://api.allorigins.win/get")
    proxy_timeout: float = Field(default=20.0, gt=0, le=120)
    max_url_length: int = Field(default=2048, ge=16, le=8192)
    min_content_length: int = Field(default=100, ge=0)
    max_redirects: int = Field(default=10, ge=0, le=30)
    ssrf_resolve_dns: bool = Field(default=True)

    # Active probes
    probe_timeout: float = Field(default=5.0, gt=0, le=30)
    probe_request_timeout: float = Field(default=10.0, gt=0, le=30)
    max_concurrent_probes: int = Field(default=10, ge=1, le=50)

    # Technology lookup
    builtwith_url: str = Field(default="https://api.builtwith.com/free1/api.json")
    builtwith_timeout: float = Field(default=15.0, gt=0, le=60)

    # PageSpeed Insights
    pagespeed_url: str = Field(
        default="https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
    )
    pagespeed_timeout: float = Field(default=30.0, gt=0, le=120)
    pagespeed_max_attempts: int = Field(default=3, ge=1, le=5)
    pagespeed_request_delay: float = Field(default=2.0, ge=0, le=30)
    pagespeed_backoff_base: float = Field(default=2.0, ge=0, le=30)
    pagespeed_backoff_cap: float = Field(default=10.0, ge=0, le=60)

    # Caching and rate limiting
    cache_ttl_seconds: int = Field(default=7200, ge=0)
    rate_limit_per_minute: int = Field(default=15, ge=1, le=1000)
    rate_limit_max_clients: int = Field(default=10_000, ge=1)

    # Report shaping
    max_recommendations: int = Field(default=8, ge=3, le=8)
    max_technologies: int = Field(default=20, ge=1, le=100)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "text"] = Field(default="json")

    # CORS Configuration (set CORS_ORIGINS env var, comma-separated)
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins. Set to ['*'] for development only.",
    )
    cors_allow_credentials: bool = Field(default=True)

    def get_builtwith_key(self) -> str | None:
        """Get BuiltWith API key value."""
        if self.builtwith_api_key:
            value = self.builtwith_api_key.get_secret_value().strip()
            return value or None
        return None

    def get_pagespeed_key(self) -> str | None:
        """Get PageSpeed Insights API key value."""
        if self.pagespeed_api_key:
            value = self.pagespeed_api_key.get_secret_value().strip()
            return value or None
        return None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
