"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache) — single instance per process
    - Defaults provided for all settings: works out-of-the-box with a local postgres

Design Decisions:
    - reinvite_after_decline is a policy switch; an explicit per-request override can
      still re-invite a namespace that declined when the switch is off
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://registry:registry@db:5432/registry"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Storage calls never block past this
    storage_timeout_seconds: float = Field(5.0, gt=0)

    # Invitation policy
    reinvite_after_decline: bool = True

    # Listing
    maintainers_page_size: int = Field(50, ge=1)
    maintainers_max_page_size: int = Field(200, ge=1)

    # Identity: set by the upstream authentication layer
    identity_header: str = "X-Registry-Namespace"

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
