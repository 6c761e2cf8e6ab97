"""
Observability configuration settings.

Settings for Langfuse tracing of chat interactions and user feedback.

Dependencies: pydantic_settings
System role: Observability configuration for tracing and logging
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class ObservabilitySettings(BaseSettings):
    """Observability configuration for Langfuse and logging."""

    model_config = SettingsConfigDict(
        env_prefix="LANGFUSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    public_key: str | None = Field(
        default=None,
        description="Langfuse public key for tracing",
    )
    secret_key: str | None = Field(
        default=None,
        description="Langfuse secret key for tracing",
    )
    host: str = Field(
        default="https://cloud.langfuse.com",
        description="Langfuse server host URL",
    )
    project_name: str = Field(
        default="chat-tracking",
        description="Project label attached to every forwarded trace",
    )
    enable_tracing: bool = Field(
        default=True,
        description="Enable Langfuse tracing",
    )

    @property
    def has_credentials(self) -> bool:
        """Both Langfuse keys are configured."""
        return bool(self.public_key and self.secret_key)
