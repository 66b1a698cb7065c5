"""Application configuration using pydantic-settings.

All environment variables are loaded from .env file or environment.
No hardcoded secrets, URLs, or credentials.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Redis configuration (shared claim store)
    redis_host: str = Field(default="localhost", description="Redis host")
    redis_port: int = Field(default=6379, description="Redis port")
    redis_password: str = Field(default="", description="Redis password (requirepass)")
    redis_db: int = Field(default=0, description="Redis database number")
    redis_max_connections: int = Field(default=50, description="Connection pool size")

    # Duplicate guard
    claim_backend: Literal["redis", "memory"] = Field(
        default="redis",
        description="Claim store backend: redis (shared) or memory (single process, dev/tests)",
    )
    claim_key_prefix: str = Field(default="dedup", description="Namespace for claim keys")
    claim_timeout_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Upper bound for one claim round-trip before it is reported as a backend timeout",
    )
    default_ttl_ms: int = Field(
        default=10_000,
        gt=0,
        description="Claim TTL in milliseconds when a call site does not set one",
    )
    hash_algorithm: str = Field(default="sha256", description="hashlib algorithm used for claim tokens")

    # Application settings
    app_name: str = Field(default="DedupGuard", description="Application name")
    log_level: str = Field(default="INFO", description="Logging level")

    @property
    def redis_url(self) -> str:
        """Construct Redis URL."""
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Using @lru_cache prevents crash on import when .env is missing (e.g. during tests).
    Settings are loaded lazily on first access.
    """
    return Settings()
