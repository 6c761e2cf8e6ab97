"""
Session lifecycle and analytics configuration.

Expiry, retention and query-bound settings for the session store
and analytics aggregator.

Dependencies: pydantic, pydantic_settings
System role: Session policy configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SessionSettings(BaseSettings):
    """Session retention policy and query limits."""

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        case_sensitive=False,
        extra="ignore",
    )

    expiry_hours: int = Field(default=24, ge=1, description="Hours until a new session expires")
    retention_days: int = Field(
        default=90,
        ge=1,
        description="Days a soft-deleted session is kept before hard deletion",
    )

    default_message_limit: int = Field(default=5, ge=1, description="Recent messages in a context")
    max_message_limit: int = Field(default=50, ge=1, description="Upper bound for message_limit")

    default_analytics_days: int = Field(default=7, ge=1, description="Performance metrics window")
    max_analytics_days: int = Field(default=30, ge=1, description="Largest allowed metrics window")
