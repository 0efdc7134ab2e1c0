"""
CALMe Application Settings

Configuration management using Pydantic Settings.
All values can be overridden from environment variables.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ACTIVITY_CATALOG: tuple[str, ...] = (
    "breathing",
    "grounding",
    "stretching",
    "matching-cards",
    "sudoku",
    "puzzle",
    "paint",
    "music",
    "story",
)


class DialogueSettings(BaseSettings):
    """Dialogue engine and conversation flow configuration."""

    model_config = SettingsConfigDict(env_prefix="CALME_DIALOGUE_")

    activity_catalog: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ACTIVITY_CATALOG),
        description="Activities offered to the user, in suggestion order",
    )
    activity_launch_delay_seconds: float = Field(
        default=1.5,
        ge=0.0,
        le=30.0,
        description="Host-side pause before launching a triggered activity",
    )
    validate_reachability: bool = Field(
        default=True,
        description="Warn about graph nodes unreachable from the start node",
    )
    default_profile_name: str = Field(
        default="User",
        min_length=1,
        description="Name used when onboarding finishes without one",
    )
    suggestion_count: int = Field(default=3, ge=1, le=9)

    @field_validator("activity_catalog")
    @classmethod
    def validate_catalog_unique(cls, v: list[str]) -> list[str]:
        """Reject duplicate activity names."""
        if len(set(v)) != len(v):
            raise ValueError("activity_catalog contains duplicates")
        return v


class MetricsSettings(BaseSettings):
    """Prometheus metrics configuration."""

    model_config = SettingsConfigDict(env_prefix="CALME_METRICS_")

    enabled: bool = Field(default=True)
    namespace: str = Field(default="calme", description="Metric name prefix")


class Settings(BaseSettings):
    """
    Main application settings.

    All configuration is loaded from environment variables with CALME_ prefix.

    Usage:
        settings = get_settings()
        catalog = settings.dialogue.activity_catalog
    """

    model_config = SettingsConfigDict(
        env_prefix="CALME_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )

    # Nested settings
    dialogue: DialogueSettings = Field(default_factory=DialogueSettings)
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.
    For testing, construct Settings directly and pass it in.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
