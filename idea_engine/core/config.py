"""Configuration management for the Idea Scoring Engine."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # Sandboxed environments may not expose .env; variables are set directly
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

    # Environment
    IDEA_ENGINE_ENV: str = Field(default="dev", description="Environment: dev, test, prod")

    # Ranking and comparison defaults
    RANKING_DEFAULT_LIMIT: int = Field(
        default=10, description="Ideas returned by a ranking when no limit is given"
    )
    QUICK_COMPARISON_DEFAULT_SIZE: int = Field(
        default=5, description="Ideas included in a quick comparison when top_n is omitted"
    )

    # Activity sink
    ACTIVITY_LOGGING_ENABLED: bool = Field(
        default=True, description="Record criteria/comparison activities"
    )

    # Logging
    LOG_LEVEL: str | None = Field(
        default=None, description="Overrides the env-based level (DEBUG in dev, else INFO)"
    )


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
