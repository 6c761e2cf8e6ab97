"""
Chat tracking facade.

Composes the session store, analytics aggregator and trace forwarder
into the operations called by the chat flow: log one interaction,
read context and statistics, rate answers, run retention sweeps and
report health.

Dependencies: chat_tracking.application.services, pydantic
System role: Chat orchestration facade
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Any
from uuid import UUID

import pydantic

from chat_tracking.application.services.analytics_service import ChatAnalyticsService
from chat_tracking.application.services.monitoring_service import LLMMonitoringService
from chat_tracking.application.services.session_service import SessionService, coerce_uuid
from chat_tracking.boundary.db.connection import Database
from chat_tracking.boundary.db.models.message_model import MessageRole
from chat_tracking.core.exceptions import ValidationError
from chat_tracking.models.analytics import PerformanceMetrics, SessionStats, StoreDailyStats
from chat_tracking.models.chat import ChatInteraction, InteractionRecord, UserFeedback
from chat_tracking.models.common import HealthStatus, ServiceStates
from chat_tracking.models.session import SessionContext
from chat_tracking.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)


class ChatTrackingService:
    """
    Chat orchestration facade.

    Durable writes go through the session store and must succeed;
    trace forwarding is scheduled as a background task whose failure
    is only logged.
    """

    def __init__(
        self,
        database: Database,
        session_service: SessionService,
        analytics_service: ChatAnalyticsService,
        monitoring_service: LLMMonitoringService,
    ) -> None:
        """
        Initialize facade.

        Args:
            database: Provider probed by the health check
            session_service: Session store
            analytics_service: Analytics aggregator
            monitoring_service: Trace forwarder
        """
        self.database = database
        self.session_service = session_service
        self.analytics_service = analytics_service
        self.monitoring_service = monitoring_service
        self._pending: set[asyncio.Task] = set()

    async def log_chat_interaction(
        self,
        session_id: UUID | str,
        user_message: str,
        assistant_response: str,
        token_usage: int | None = None,
        response_time_ms: int | None = None,
        trace_id: str | None = None,
        business_metadata: dict[str, Any] | None = None,
    ) -> InteractionRecord:
        """
        Persist a user/assistant exchange and forward it to the trace sink.

        Flow:
        1. Estimate the user message's tokens
        2. Save the user message, then the assistant reply answering it
        3. Schedule trace forwarding in the background

        A failure in step 2 propagates and nothing is forwarded. The two
        messages are committed separately, so a failure saving the reply
        leaves the user message in place.

        Args:
            session_id: Target session UUID
            user_message: User question
            assistant_response: Assistant answer
            token_usage: Tokens reported for the answer
            response_time_ms: Answer latency
            trace_id: External trace identifier
            business_metadata: Stored as the assistant message's metadata

        Returns:
            InteractionRecord: IDs of the two persisted messages

        Raises:
            ValidationError: On invalid arguments
            SessionNotFoundError: If the session is missing or soft-deleted
            PersistenceError: If a storage write fails
        """
        sid = coerce_uuid(session_id, "session_id")
        user_tokens = self.analytics_service.calculate_tokens(user_message)

        user_message_id = await self.session_service.save_message(
            sid,
            MessageRole.USER,
            user_message,
            token_count=user_tokens,
            trace_id=trace_id,
        )
        assistant_message_id = await self.session_service.save_message(
            sid,
            MessageRole.ASSISTANT,
            assistant_response,
            token_count=token_usage,
            response_time_ms=response_time_ms,
            trace_id=trace_id,
            parent_message_id=user_message_id,
            metadata=business_metadata,
        )

        log_with_context(
            logger,
            logging.INFO,
            "Chat interaction logged",
            session_id=sid,
            user_message_id=user_message_id,
            assistant_message_id=assistant_message_id,
            response_time_ms=response_time_ms,
        )

        self._schedule(
            self._forward_interaction(
                session_id=sid,
                user_message=user_message,
                assistant_response=assistant_response,
                token_usage=token_usage,
                response_time_ms=response_time_ms,
                trace_id=trace_id,
                business_metadata=business_metadata,
            )
        )

        return InteractionRecord(
            session_id=sid,
            user_message_id=user_message_id,
            assistant_message_id=assistant_message_id,
        )

    async def _forward_interaction(self, **fields: Any) -> bool:
        interaction = ChatInteraction.model_construct(**fields)
        return await self.monitoring_service.track_interaction(interaction)

    def _schedule(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._on_forward_done)
        return task

    def _on_forward_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"{__name__}:_on_forward_done - background forwarding failed: {exc!r}")

    async def drain(self) -> None:
        """Wait for every scheduled forwarding task to settle."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def create_session(
        self,
        store_id: str,
        user_id: str,
        metadata: dict[str, Any] | None = None,
    ) -> UUID:
        return await self.session_service.create_session(store_id, user_id, metadata)

    async def find_active_session(self, store_id: str, user_id: str) -> UUID | None:
        return await self.session_service.find_active_session(store_id, user_id)

    async def get_session_context(self, session_id: UUID | str, message_limit: int = 5) -> SessionContext:
        return await self.session_service.get_session_context(session_id, message_limit)

    async def get_session_stats(self, session_id: UUID | str) -> SessionStats:
        return await self.analytics_service.get_session_stats(session_id)

    async def get_store_daily_stats(self, store_id: str, day: date | datetime) -> StoreDailyStats:
        return await self.analytics_service.get_store_daily_stats(store_id, day)

    async def get_performance_metrics(self, store_id: str, days: int = 7) -> PerformanceMetrics:
        return await self.analytics_service.get_performance_metrics(store_id, days)

    async def add_user_feedback(
        self,
        session_id: UUID | str,
        message_id: UUID | str,
        rating: int,
        comment: str | None = None,
        category: str | None = None,
    ) -> bool:
        """
        Forward a user's rating of an assistant message.

        Args:
            session_id: Session UUID
            message_id: Rated message UUID
            rating: 1 (poor) to 5 (excellent)
            comment: Optional comment
            category: Optional feedback category

        Returns:
            bool: True if the trace sink accepted the score

        Raises:
            ValidationError: If the identifiers or rating are invalid
        """
        try:
            feedback = UserFeedback(
                session_id=coerce_uuid(session_id, "session_id"),
                message_id=coerce_uuid(message_id, "message_id"),
                rating=rating,
                comment=comment,
                category=category,
            )
        except pydantic.ValidationError as e:
            raise ValidationError(
                "Invalid feedback",
                field="rating",
                details={"errors": e.errors(include_url=False)},
            ) from e

        return await self.monitoring_service.track_feedback(feedback)

    async def cleanup_expired_sessions(self) -> int:
        return await self.session_service.cleanup_expired_sessions()

    async def hard_delete_old_data(self) -> int:
        return await self.session_service.hard_delete_old_data()

    async def get_health_status(self) -> HealthStatus:
        """
        Report database, trace sink and per-service status.

        Returns:
            HealthStatus: database from a live ping, trace from the sink probe
        """
        database_ok, trace_ok = await asyncio.gather(
            self.database.ping(),
            self.monitoring_service.check_connection(),
        )
        return HealthStatus(
            database="connected" if database_ok else "disconnected",
            trace="connected" if trace_ok else "disconnected",
            services=ServiceStates(monitoring="active" if trace_ok else "degraded"),
        )
