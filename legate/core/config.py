"""Configuration management for the Legate readiness service."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    # Environment variables should be set directly
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")

    # OpenAI configuration (optional - enables the AI plan generator)
    OPENAI_API_KEY: str | None = Field(
        default=None, description="OpenAI API key; rule-based plans only when unset"
    )

    # Environment
    LEGATE_ENV: str = Field(default="dev", description="Environment: dev, staging, prod, test")

    # Readiness plan generation
    READINESS_PLAN_MODEL: str = Field(default="gpt-4o-mini", description="Model for readiness plans")
    READINESS_PLAN_TEMPERATURE: float = Field(
        default=0.2, ge=0.0, le=2.0, description="Sampling temperature for readiness plans"
    )
    READINESS_PLAN_MAX_STEPS: int = Field(
        default=5, ge=1, le=10, description="Maximum steps in a generated plan"
    )
    READINESS_PLAN_TTL_HOURS: int = Field(
        default=24, ge=1, description="Hours before a cached plan is considered stale"
    )

    # Plan snapshot storage (client side)
    PLAN_HISTORY_LIMIT: int = Field(default=5, ge=1, description="Snapshots kept per estate")
    PLAN_SNAPSHOT_STORAGE_PREFIX: str = Field(
        default="legatepro:readinessPlanSnapshot:",
        description="Storage key prefix for the latest plan snapshot",
    )
    PLAN_HISTORY_STORAGE_PREFIX: str = Field(
        default="legatepro:readinessPlanHistory:",
        description="Storage key prefix for the rolling snapshot history",
    )

    @property
    def is_dev(self) -> bool:
        return self.LEGATE_ENV == "dev"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
