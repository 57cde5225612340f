"""
Shared configuration management for the Pokémon Abilities service.
"""

from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="POKE_",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: Literal["local", "development", "production", "test"] = Field(default="local")
    log_level: str = Field(default="info")

    # Upstream
    pokeapi_base_url: str = Field(default="https://pokeapi.co/api/v2")
    http_timeout: int = Field(default=5000, ge=1000, le=30000, description="Upstream timeout in milliseconds")
    http_max_redirects: int = Field(default=3, ge=0)
    http_retries: int = Field(default=2, ge=0, le=5)

    # Cache
    cache_ttl: int = Field(default=300, ge=60, le=3600, description="Cache TTL in seconds")
    cache_max_items: int = Field(default=100, ge=10, le=1000)

    # HTTP surface
    cors_origins: List[str] = Field(default_factory=list)
    slow_request_ms: int = Field(default=1000, ge=1)
    health_max_rss_mb: int = Field(default=150, ge=16, le=65536, description="RSS above which /health reports an error")

    # Observability
    enable_tracing: bool = Field(default=False)
    otel_exporter: str = Field(default="http://localhost:4317")
    enable_console_tracing: bool = Field(default=False)

    @property
    def is_development(self) -> bool:
        return self.env in ("local", "development")

    @property
    def http_timeout_seconds(self) -> float:
        return self.http_timeout / 1000.0


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int = Field(default=3000, ge=1000, le=65535)
    host: str = "0.0.0.0"


def get_config(service_name: str, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, **overrides)
