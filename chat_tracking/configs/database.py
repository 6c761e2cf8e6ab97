"""
Database configuration settings.

Manages PostgreSQL connection and pool parameters for SQLAlchemy.
A full URL override allows pointing the service at any async driver
(e.g. SQLite via aiosqlite for local runs and tests).

Dependencies: pydantic, pydantic_settings
System role: Database connection configuration for ORM
"""

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from chat_tracking.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """PostgreSQL database configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DB_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str | None = Field(
        default=None,
        description="Full SQLAlchemy async URL; overrides host/port/name when set",
    )
    host: str = Field(default="localhost", description="PostgreSQL host")
    port: int = Field(default=5432, description="PostgreSQL port")
    name: str = Field(default="chat_tracking", description="PostgreSQL database name")
    user: str = Field(default="postgres", description="PostgreSQL user")
    password: str = Field(default="postgres", description="PostgreSQL password")

    pool_min: int = Field(default=2, ge=1, description="Persistent connections kept in the pool")
    pool_max: int = Field(default=20, ge=1, description="Hard ceiling on open connections")
    pool_timeout: float = Field(
        default=30.0,
        description="Seconds a caller waits for a free connection past the ceiling",
    )
    pool_recycle: int = Field(
        default=1800,
        description="Connection age in seconds after which the pool replaces it on checkout (-1 disables)",
    )
    connection_timeout: float = Field(
        default=2.0,
        description="Seconds allowed to establish a new connection",
    )
    ssl: bool = Field(default=False, description="Require SSL (AWS RDS)")
    echo_sql: bool = Field(default=False, description="Echo SQL statements to logs")

    @model_validator(mode="after")
    def _check_pool_bounds(self) -> "DatabaseSettings":
        if self.pool_max < self.pool_min:
            raise ValueError("pool_max must be greater than or equal to pool_min")
        return self

    @property
    def async_database_url(self) -> str:
        """
        Construct async connection URL.

        Returns:
            str: SQLAlchemy async-compatible database URL (asyncpg uses 'ssl' param)
        """
        if self.url:
            return self.url
        ssl_param = "?ssl=require" if self.ssl else ""
        return (
            f"postgresql+asyncpg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.name}{ssl_param}"
        )

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured URL targets SQLite (no pool sizing)."""
        return self.async_database_url.startswith("sqlite")
