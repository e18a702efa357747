"""
Shared configuration management for the Gameday gateway.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="GAMEDAY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")
    enable_docs: bool = Field(default=True)

    # Upstream Stats API
    statsapi_base_url: str = Field(default="https://statsapi.mlb.com/api")
    sport_id: int = Field(default=1)
    upstream_timeout_seconds: float = Field(default=10.0, gt=0)

    # Caching and enrichment
    cache_ttl_seconds: int = Field(default=300, gt=0)
    people_batch_size: int = Field(default=40, gt=0)

    # Static client assets
    static_dir: Optional[str] = Field(default="client")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
