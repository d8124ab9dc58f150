"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache): single instance per process
    - Family rule thresholds are configurable but never below their domain floor
      (adult parents, a positive parent/child age gap)

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all settings: works out-of-the-box with docker-compose
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from family_service.core.domain_types import (
    MIN_PARENT_AGE, MIN_PARENT_CHILD_AGE_GAP,
)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Service identity
    service_name: str = "family-service"
    service_version: str = "1.0.0"

    # Database
    database_url: str = (
        "postgresql+asyncpg://family:family@db:5432/family"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Family rules
    minimum_parent_age: int = Field(MIN_PARENT_AGE, ge=MIN_PARENT_AGE)
    minimum_parent_child_age_gap: int = Field(MIN_PARENT_CHILD_AGE_GAP, ge=1)

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
