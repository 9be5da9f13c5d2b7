# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Configuration management using Pydantic Settings."""

from beartype import beartype
from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with immutable configuration."""

    model_config = SettingsConfigDict(
        env_file=None,
        env_file_encoding="utf-8",
        frozen=True,  # Immutable settings
        validate_default=True,
        extra="forbid",
    )

    # Storage
    database_url: str = Field(
        default="memory://",
        description="Document store URL (memory:// or postgresql://...)",
        min_length=1,
    )
    database_pool_min: int = Field(
        default=2,
        ge=1,
        le=20,
        description="Minimum database pool size",
    )
    database_pool_max: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum database pool size",
    )
    database_command_timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Query execution timeout in seconds",
    )

    # Redis
    redis_url: str | None = Field(
        default=None,
        description="Redis connection URL; the read cache is disabled when unset",
    )
    cache_ttl_seconds: int = Field(
        default=3600,
        ge=60,
        le=86400,
        description="Default cache TTL in seconds",
    )

    # Runtime
    app_name: str = Field(
        default="SecureMotor",
        description="Application name",
        min_length=1,
    )
    app_env: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Root log level",
    )

    # Lifecycle
    quote_validity_days: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Days a quote stays purchasable after creation",
    )
    policy_term_days: int = Field(
        default=365,
        ge=1,
        description="Fixed policy term in days",
    )
    policy_number_prefix: str = Field(
        default="SM",
        pattern="^[A-Z]{2}$",
        description="Carrier prefix for policy numbers",
    )
    claim_number_prefix: str = Field(
        default="CL",
        pattern="^[A-Z]{2}$",
        description="Prefix for claim numbers",
    )
    number_allocation_attempts: int = Field(
        default=20,
        ge=1,
        le=1000,
        description="Attempts at allocating an unused policy/claim number",
    )
    recent_items_limit: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Number of items returned by recent-* listings",
    )

    @field_validator("database_pool_max")
    @classmethod
    def validate_pool_sizes(cls: type["Settings"], v: int, info: ValidationInfo) -> int:
        """Ensure pool max is greater than pool min."""
        if "database_pool_min" in info.data:
            min_size = info.data["database_pool_min"]
            if v < min_size:
                raise ValueError(
                    f"database_pool_max ({v}) must be >= database_pool_min ({min_size})"
                )
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls: type["Settings"], v: str) -> str:
        """Only the in-memory and PostgreSQL stores are supported."""
        if not v.startswith(("memory://", "postgres://", "postgresql://")):
            raise ValueError(f"Unsupported database URL scheme: {v.split(':', 1)[0]}")
        return v

    @property
    @beartype
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    @beartype
    def uses_memory_store(self) -> bool:
        """Check whether the in-memory document store is selected."""
        return self.database_url.startswith("memory://")


_settings: Settings | None = None


@beartype
def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


@beartype
def clear_settings_cache() -> None:
    """Clear settings cache (for testing)."""
    global _settings
    _settings = None
