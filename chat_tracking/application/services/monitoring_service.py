"""
LLM monitoring service.

Best-effort forwarding of chat interactions, user feedback and errors
to the trace sink. A forwarding failure is logged and dropped; it never
reaches the caller.

Dependencies: asyncio, chat_tracking.observability
System role: Trace forwarder
"""

import asyncio
import logging
import traceback
from collections.abc import Callable, Iterable
from typing import Any
from uuid import UUID

from chat_tracking.models.chat import ChatInteraction, UserFeedback
from chat_tracking.observability.langfuse_tracer import LangfuseTraceSink
from chat_tracking.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

INTERACTION_RUN = "rag_response"
FEEDBACK_SCORE = "user_feedback"
ERROR_RUN = "error_tracking"


class LLMMonitoringService:
    """
    Trace forwarder over an optional LangfuseTraceSink.

    Without a sink every track_* call is a logged no-op. Sink calls are
    blocking and run in a worker thread.
    """

    def __init__(self, sink: LangfuseTraceSink | None = None) -> None:
        """
        Initialize forwarder.

        Args:
            sink: Trace sink built by the composition root, or None
        """
        self.sink = sink

    @property
    def is_enabled(self) -> bool:
        """Whether a trace sink is configured."""
        return self.sink is not None

    async def _forward(self, operation: str, call: Callable[[], Any], **context) -> bool:
        """
        Run one sink call off the event loop, absorbing any failure.

        Args:
            operation: Name used in logs
            call: Zero-argument blocking sink call
            **context: Extra log context (session id, ...)

        Returns:
            bool: True if the call completed, False if skipped or failed
        """
        if self.sink is None:
            logger.debug(f"{__name__}:{operation} - trace sink disabled, skipping")
            return False

        try:
            await asyncio.to_thread(call)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:{operation} - forwarding failed",
                e,
                operation=operation,
                **context,
            )
            return False

        logger.debug(f"{__name__}:{operation} - forwarded {context}")
        return True

    async def track_interaction(self, interaction: ChatInteraction) -> bool:
        """
        Forward one chat interaction as a rag_response run.

        Args:
            interaction: Interaction with both message texts and metrics

        Returns:
            bool: True if the sink accepted the run
        """
        session_id = str(interaction.session_id)
        business = dict(interaction.business_metadata or {})

        inputs = {"question": interaction.user_message}
        outputs = {
            "answer": interaction.assistant_response,
            "retrieved_docs_count": business.get("retrievedDocsCount", 0),
            "response_time_ms": interaction.response_time_ms or 0,
            "token_usage": interaction.token_usage or 0,
            "relevance_score": business.get("relevanceScore"),
            "satisfaction_score": business.get("satisfactionScore"),
        }
        metadata = {**business, "session_id": session_id, "trace_id": interaction.trace_id}

        def _call() -> None:
            self.sink.record_run(
                INTERACTION_RUN,
                inputs=inputs,
                outputs=outputs,
                metadata=metadata,
                session_id=session_id,
            )

        return await self._forward("track_interaction", _call, session_id=session_id)

    async def track_feedback(self, feedback: UserFeedback) -> bool:
        """
        Forward a user rating as a numeric score on the session.

        Args:
            feedback: Rating (1-5) of an assistant message

        Returns:
            bool: True if the sink accepted the score
        """
        session_id = str(feedback.session_id)
        metadata = {"message_id": str(feedback.message_id)}
        if feedback.category:
            metadata["category"] = feedback.category

        def _call() -> None:
            self.sink.record_score(
                FEEDBACK_SCORE,
                float(feedback.rating),
                session_id=session_id,
                comment=feedback.comment,
                metadata=metadata,
            )

        return await self._forward("track_feedback", _call, session_id=session_id, rating=feedback.rating)

    async def track_error(
        self,
        session_id: UUID | str,
        error: BaseException,
        context: dict[str, Any] | None = None,
    ) -> bool:
        """
        Forward an error raised while serving a session as an error_tracking run.

        Args:
            session_id: Session the error belongs to
            error: Exception instance
            context: Optional extra context

        Returns:
            bool: True if the sink accepted the run
        """
        sid = str(session_id)
        metadata: dict[str, Any] = {
            "session_id": sid,
            "error_name": type(error).__name__,
            "error_message": str(error),
            "error_stack": "".join(traceback.format_exception(error)),
        }
        if context:
            metadata["context"] = context

        def _call() -> None:
            self.sink.record_run(
                ERROR_RUN,
                inputs={"session_id": sid},
                outputs={"error": str(error)},
                metadata=metadata,
                session_id=sid,
            )

        return await self._forward("track_error", _call, session_id=sid)

    async def track_batch_interactions(self, interactions: Iterable[ChatInteraction]) -> int:
        """
        Forward many interactions concurrently; each settles independently.

        Args:
            interactions: Interactions to forward

        Returns:
            int: Number of interactions forwarded successfully
        """
        items = list(interactions)
        results = await asyncio.gather(
            *(self.track_interaction(item) for item in items),
            return_exceptions=True,
        )

        forwarded = 0
        for item, result in zip(items, results):
            if isinstance(result, BaseException):
                logger.error(
                    f"{__name__}:track_batch_interactions - item failed "
                    f"session_id={item.session_id}: {result}"
                )
            elif result:
                forwarded += 1

        logger.info(
            f"{__name__}:track_batch_interactions - {forwarded}/{len(items)} interactions forwarded"
        )
        return forwarded

    async def check_connection(self) -> bool:
        """
        Probe the trace sink.

        Returns:
            bool: True if the sink answered the probe, False if absent or failing
        """
        if self.sink is None:
            return False
        try:
            return await asyncio.to_thread(self.sink.project_exists)
        except Exception as e:
            logger.warning(f"{__name__}:check_connection - trace sink unreachable: {e}")
            return False
