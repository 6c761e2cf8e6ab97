"""
Router test fixtures.

The facade is replaced by a mock through dependency_overrides; the
lifespan is not entered, so no database or trace sink is created.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from chat_tracking.api.deps import get_chat_tracking_service
from chat_tracking.api.main import create_app
from chat_tracking.application.services.chat_tracking_service import ChatTrackingService


@pytest.fixture
def mock_service() -> MagicMock:
    """
    Create mock ChatTrackingService for testing.

    Returns:
        MagicMock: Facade mock with async methods
    """
    service = MagicMock(spec=ChatTrackingService)
    for name in (
        "create_session",
        "find_active_session",
        "get_session_context",
        "get_session_stats",
        "log_chat_interaction",
        "add_user_feedback",
        "get_store_daily_stats",
        "get_performance_metrics",
        "cleanup_expired_sessions",
        "hard_delete_old_data",
        "get_health_status",
    ):
        setattr(service, name, AsyncMock())
    return service


@pytest.fixture
def client(mock_service: MagicMock) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_chat_tracking_service] = lambda: mock_service
    return TestClient(app)
