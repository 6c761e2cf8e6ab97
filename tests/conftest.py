"""
Shared test fixtures and configuration for entire test suite.

Provides: SQLite-backed Database provider, service instances, trace sink mocks
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

from pathlib import Path
from unittest.mock import MagicMock
from uuid import UUID

import pytest
from sqlalchemy import select, update

from chat_tracking.application.services.analytics_service import ChatAnalyticsService
from chat_tracking.application.services.chat_tracking_service import ChatTrackingService
from chat_tracking.application.services.monitoring_service import LLMMonitoringService
from chat_tracking.application.services.session_service import SessionService
from chat_tracking.boundary.db.connection import Database
from chat_tracking.boundary.db.models.session_model import SessionModel
from chat_tracking.configs.database import DatabaseSettings
from chat_tracking.configs.session import SessionSettings
from chat_tracking.observability.langfuse_tracer import LangfuseTraceSink


@pytest.fixture
def db_settings(tmp_path: Path) -> DatabaseSettings:
    """
    Database settings pointing at a fresh SQLite file.

    A file (not :memory:) so the pool can hand out several connections
    and concurrent writers really contend.
    """
    return DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'chat_tracking.db'}")


@pytest.fixture
async def database(db_settings: DatabaseSettings):
    """
    Create the schema in a temporary SQLite database.

    Yields:
        Database: Provider with all tables created, disposed after the test
    """
    db = Database.from_settings(db_settings)
    await db.create_schema()
    yield db
    await db.dispose()


@pytest.fixture
def session_settings() -> SessionSettings:
    """Default retention policy and limits."""
    return SessionSettings(
        expiry_hours=24,
        retention_days=90,
        default_message_limit=5,
        max_message_limit=50,
        default_analytics_days=7,
        max_analytics_days=30,
    )


@pytest.fixture
def session_service(database: Database, session_settings: SessionSettings) -> SessionService:
    return SessionService(database, session_settings)


@pytest.fixture
def analytics_service(database: Database, session_settings: SessionSettings) -> ChatAnalyticsService:
    return ChatAnalyticsService(database, session_settings)


@pytest.fixture
def mock_sink() -> MagicMock:
    """Trace sink double that accepts every call."""
    sink = MagicMock(spec=LangfuseTraceSink)
    sink.project_exists.return_value = True
    return sink


@pytest.fixture
def monitoring_service() -> LLMMonitoringService:
    """Forwarder without a sink (tracing disabled)."""
    return LLMMonitoringService(None)


@pytest.fixture
def chat_tracking_service(
    database: Database,
    session_service: SessionService,
    analytics_service: ChatAnalyticsService,
    monitoring_service: LLMMonitoringService,
) -> ChatTrackingService:
    return ChatTrackingService(
        database=database,
        session_service=session_service,
        analytics_service=analytics_service,
        monitoring_service=monitoring_service,
    )


@pytest.fixture
def update_session(database: Database):
    """
    Overwrite session columns directly, e.g. to backdate expiry or deletion.

    Returns:
        Coroutine function (session_id, **values) -> None
    """

    async def _update(session_id: UUID, **values) -> None:
        async with database.transaction() as db:
            await db.execute(
                update(SessionModel).where(SessionModel.id == session_id).values(**values)
            )

    return _update


@pytest.fixture
def load_session(database: Database):
    """
    Load a session row regardless of liveness.

    Returns:
        Coroutine function (session_id) -> SessionModel | None
    """

    async def _load(session_id: UUID) -> SessionModel | None:
        async with database.acquire() as db:
            result = await db.execute(select(SessionModel).where(SessionModel.id == session_id))
            return result.scalar_one_or_none()

    return _load
