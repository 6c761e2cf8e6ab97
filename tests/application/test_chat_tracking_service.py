"""
Test suite for ChatTrackingService (facade).

Runs the durable path against SQLite and replaces the trace forwarder
with mocks to check ordering and failure isolation.

System role: Verification of chat orchestration facade
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from chat_tracking.application.services.analytics_service import ChatAnalyticsService
from chat_tracking.application.services.chat_tracking_service import ChatTrackingService
from chat_tracking.application.services.monitoring_service import LLMMonitoringService
from chat_tracking.application.services.session_service import SessionService
from chat_tracking.boundary.db.connection import Database
from chat_tracking.configs.database import DatabaseSettings
from chat_tracking.core.exceptions import SessionNotFoundError, ValidationError


@pytest.fixture
def failing_monitoring() -> MagicMock:
    """Forwarder whose every call raises."""
    monitoring = MagicMock(spec=LLMMonitoringService)
    monitoring.track_interaction = AsyncMock(side_effect=RuntimeError("trace sink exploded"))
    monitoring.track_feedback = AsyncMock(side_effect=RuntimeError("trace sink exploded"))
    monitoring.check_connection = AsyncMock(return_value=False)
    return monitoring


@pytest.fixture
def recording_monitoring() -> MagicMock:
    monitoring = MagicMock(spec=LLMMonitoringService)
    monitoring.track_interaction = AsyncMock(return_value=True)
    monitoring.track_feedback = AsyncMock(return_value=True)
    monitoring.check_connection = AsyncMock(return_value=True)
    return monitoring


def _facade(
    database: Database,
    session_service: SessionService,
    analytics_service: ChatAnalyticsService,
    monitoring,
) -> ChatTrackingService:
    return ChatTrackingService(
        database=database,
        session_service=session_service,
        analytics_service=analytics_service,
        monitoring_service=monitoring,
    )


class TestLogChatInteraction:
    """Test suite for log_chat_interaction()."""

    @pytest.mark.asyncio
    async def test_scenario_should_store_user_then_assistant(
        self, chat_tracking_service: ChatTrackingService
    ) -> None:
        """Create, log one exchange, read back in order."""
        # Arrange
        session_id = await chat_tracking_service.create_session("store_test", "user_test")

        # Act
        record = await chat_tracking_service.log_chat_interaction(
            session_id,
            "안녕하세요 도움이 필요하신가요",
            "네, 무엇을 도와드릴까요?",
        )
        context = await chat_tracking_service.get_session_context(session_id, message_limit=10)
        await chat_tracking_service.drain()

        # Assert
        assert record.session_id == session_id
        assert [m.role for m in context.recent_messages] == ["user", "assistant"]
        assert [m.sequence_number for m in context.recent_messages] == [1, 2]
        user, assistant = context.recent_messages
        assert user.id == record.user_message_id
        assert assistant.id == record.assistant_message_id
        assert assistant.parent_message_id == user.id

    @pytest.mark.asyncio
    async def test_log_should_estimate_user_tokens_and_keep_assistant_usage(
        self, chat_tracking_service: ChatTrackingService
    ) -> None:
        session_id = await chat_tracking_service.create_session("store_a", "user_a")

        await chat_tracking_service.log_chat_interaction(
            session_id,
            "안녕하세요 도움이 필요하신가요",
            "answer",
            token_usage=120,
            response_time_ms=640,
            trace_id="trace-9",
            business_metadata={"inquiryCategory": "refund", "priority": "high"},
        )
        context = await chat_tracking_service.get_session_context(session_id)

        user, assistant = context.recent_messages
        assert user.token_count == 4
        assert user.trace_id == "trace-9"
        assert user.metadata == {}
        assert assistant.token_count == 120
        assert assistant.response_time_ms == 640
        assert assistant.metadata == {"inquiryCategory": "refund", "priority": "high"}

    @pytest.mark.asyncio
    async def test_log_should_survive_failing_forwarder(
        self,
        database: Database,
        session_service: SessionService,
        analytics_service: ChatAnalyticsService,
        failing_monitoring: MagicMock,
    ) -> None:
        """A forwarder that always throws never fails the durable path."""
        # Arrange
        facade = _facade(database, session_service, analytics_service, failing_monitoring)
        session_id = await facade.create_session("store_a", "user_a")

        # Act
        record = await facade.log_chat_interaction(session_id, "hi", "hello")
        await facade.drain()
        context = await facade.get_session_context(session_id)

        # Assert
        assert record.user_message_id != record.assistant_message_id
        assert len(context.recent_messages) == 2
        failing_monitoring.track_interaction.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_log_should_forward_full_interaction(
        self,
        database: Database,
        session_service: SessionService,
        analytics_service: ChatAnalyticsService,
        recording_monitoring: MagicMock,
    ) -> None:
        facade = _facade(database, session_service, analytics_service, recording_monitoring)
        session_id = await facade.create_session("store_a", "user_a")

        await facade.log_chat_interaction(
            session_id, "question", "answer", token_usage=7, response_time_ms=90, trace_id="t1"
        )
        await facade.drain()

        interaction = recording_monitoring.track_interaction.await_args.args[0]
        assert interaction.session_id == session_id
        assert interaction.user_message == "question"
        assert interaction.assistant_response == "answer"
        assert interaction.token_usage == 7
        assert interaction.response_time_ms == 90
        assert interaction.trace_id == "t1"

    @pytest.mark.asyncio
    async def test_durable_failure_should_propagate_without_forwarding(
        self,
        database: Database,
        session_service: SessionService,
        analytics_service: ChatAnalyticsService,
        recording_monitoring: MagicMock,
    ) -> None:
        facade = _facade(database, session_service, analytics_service, recording_monitoring)

        with pytest.raises(SessionNotFoundError):
            await facade.log_chat_interaction(uuid.uuid4(), "hi", "hello")
        await facade.drain()

        recording_monitoring.track_interaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_drain_should_return_immediately_when_idle(
        self, chat_tracking_service: ChatTrackingService
    ) -> None:
        await chat_tracking_service.drain()


class TestAddUserFeedback:
    """Test suite for add_user_feedback()."""

    @pytest.mark.asyncio
    async def test_feedback_should_be_forwarded(
        self,
        database: Database,
        session_service: SessionService,
        analytics_service: ChatAnalyticsService,
        recording_monitoring: MagicMock,
    ) -> None:
        facade = _facade(database, session_service, analytics_service, recording_monitoring)
        session_id, message_id = uuid.uuid4(), uuid.uuid4()

        forwarded = await facade.add_user_feedback(session_id, message_id, 5, comment="great")

        assert forwarded is True
        feedback = recording_monitoring.track_feedback.await_args.args[0]
        assert feedback.session_id == session_id
        assert feedback.message_id == message_id
        assert feedback.rating == 5
        assert feedback.comment == "great"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating", [0, 6])
    async def test_feedback_should_reject_out_of_range_rating(
        self, chat_tracking_service: ChatTrackingService, rating: int
    ) -> None:
        with pytest.raises(ValidationError):
            await chat_tracking_service.add_user_feedback(uuid.uuid4(), uuid.uuid4(), rating)


class TestDelegations:
    """Facade operations that pass straight through."""

    @pytest.mark.asyncio
    async def test_find_active_session_should_delegate(
        self, chat_tracking_service: ChatTrackingService
    ) -> None:
        assert await chat_tracking_service.find_active_session("store_test", "user_test") is None
        session_id = await chat_tracking_service.create_session("store_test", "user_test")
        assert await chat_tracking_service.find_active_session("store_test", "user_test") == session_id

    @pytest.mark.asyncio
    async def test_analytics_should_delegate_with_defaults(
        self, chat_tracking_service: ChatTrackingService
    ) -> None:
        session_id = await chat_tracking_service.create_session("store_a", "user_a")
        await chat_tracking_service.log_chat_interaction(
            session_id, "hi", "hello", response_time_ms=100
        )

        stats = await chat_tracking_service.get_session_stats(session_id)
        metrics = await chat_tracking_service.get_performance_metrics("store_a")

        assert stats.message_count == 2
        assert metrics.avg_response_time == pytest.approx(100.0)

    @pytest.mark.asyncio
    async def test_maintenance_should_delegate(
        self, chat_tracking_service: ChatTrackingService
    ) -> None:
        assert await chat_tracking_service.cleanup_expired_sessions() == 0
        assert await chat_tracking_service.hard_delete_old_data() == 0


class TestGetHealthStatus:
    """Test suite for get_health_status()."""

    @pytest.mark.asyncio
    async def test_health_should_report_degraded_monitoring_without_sink(
        self, chat_tracking_service: ChatTrackingService
    ) -> None:
        health = await chat_tracking_service.get_health_status()

        assert health.database == "connected"
        assert health.trace == "disconnected"
        assert health.services.session == "active"
        assert health.services.analytics == "active"
        assert health.services.monitoring == "degraded"

    @pytest.mark.asyncio
    async def test_health_should_report_active_monitoring_when_sink_reachable(
        self,
        database: Database,
        session_service: SessionService,
        analytics_service: ChatAnalyticsService,
        recording_monitoring: MagicMock,
    ) -> None:
        facade = _facade(database, session_service, analytics_service, recording_monitoring)

        health = await facade.get_health_status()

        assert health.trace == "connected"
        assert health.services.monitoring == "active"

    @pytest.mark.asyncio
    async def test_health_should_probe_database(
        self, tmp_path, recording_monitoring: MagicMock
    ) -> None:
        """An unreachable database is reported, not assumed connected."""
        unreachable = Database.from_settings(
            DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nested' / 'x.db'}")
        )
        facade = ChatTrackingService(
            database=unreachable,
            session_service=SessionService(unreachable),
            analytics_service=ChatAnalyticsService(unreachable),
            monitoring_service=recording_monitoring,
        )

        try:
            health = await facade.get_health_status()
        finally:
            await unreachable.dispose()

        assert health.database == "disconnected"
        assert health.services.session == "active"
