"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from chat_tracking.configs.base import BaseSettings
from chat_tracking.configs.database import DatabaseSettings
from chat_tracking.configs.observability import ObservabilitySettings
from chat_tracking.configs.session import SessionSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    session: SessionSettings = Field(default_factory=SessionSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from chat_tracking.configs import get_settings
        settings = get_settings()
    """
    return Settings()
