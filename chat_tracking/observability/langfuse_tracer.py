"""
Langfuse tracing integration.

Trace sink adapter that records chat runs and feedback scores in
Langfuse. Built once by the composition root and injected into the
monitoring service; there is no module-level client.

Dependencies: langfuse, chat_tracking.configs, chat_tracking.observability.correlation
System role: External trace sink for interaction metrics
"""

import logging
from typing import Any

from langfuse import Langfuse

from chat_tracking.configs.observability import ObservabilitySettings
from chat_tracking.core.exceptions import ForwardingError
from chat_tracking.observability.correlation import get_correlation_id

logger = logging.getLogger(__name__)


class LangfuseTraceSink:
    """
    Thin adapter over a Langfuse client.

    All methods are blocking (the Langfuse SDK batches in a background
    thread); callers on the event loop should offload them. Client
    failures are re-raised as ForwardingError.

    Attributes:
        project_name: Label attached to every recorded run
    """

    def __init__(self, client: Langfuse, project_name: str, environment: str = "development") -> None:
        """
        Initialize sink around a configured client.

        Args:
            client: Langfuse client
            project_name: Project label for traces
            environment: Deployment environment tag
        """
        self._client = client
        self.project_name = project_name
        self.environment = environment

    def record_run(
        self,
        name: str,
        inputs: dict[str, Any],
        outputs: dict[str, Any],
        metadata: dict[str, Any] | None = None,
        session_id: str | None = None,
    ) -> None:
        """
        Record one completed run as a Langfuse span attached to a session.

        Args:
            name: Run name (rag_response, error_tracking, ...)
            inputs: Run inputs
            outputs: Run outputs
            metadata: Extra metadata merged with project/environment tags
            session_id: Chat session the run belongs to

        Raises:
            ForwardingError: If the client rejects the run
        """
        run_metadata = {
            "project": self.project_name,
            "environment": self.environment,
            **(metadata or {}),
        }
        correlation_id = get_correlation_id()
        if correlation_id:
            run_metadata["correlation_id"] = correlation_id

        try:
            span = self._client.start_span(
                name=name,
                input=inputs,
                output=outputs,
                metadata=run_metadata,
            )
            span.update_trace(
                name=name,
                session_id=session_id,
                tags=[self.project_name, self.environment],
            )
            span.end()
        except Exception as exc:
            raise ForwardingError(
                f"Failed to record run '{name}'",
                operation="record_run",
                details={"error_type": type(exc).__name__, "error_msg": str(exc)},
            ) from exc

    def record_score(
        self,
        name: str,
        value: float,
        session_id: str,
        comment: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """
        Record a numeric score (user feedback) against a session.

        Args:
            name: Score name
            value: Numeric value
            session_id: Chat session being scored
            comment: Optional free-text comment
            metadata: Extra metadata (message id, category)

        Raises:
            ForwardingError: If the client rejects the score
        """
        try:
            self._client.create_score(
                name=name,
                value=value,
                session_id=session_id,
                data_type="NUMERIC",
                comment=comment,
                metadata=metadata,
            )
        except Exception as exc:
            raise ForwardingError(
                f"Failed to record score '{name}'",
                operation="record_score",
                details={"error_type": type(exc).__name__, "error_msg": str(exc)},
            ) from exc

    def project_exists(self) -> bool:
        """
        Probe Langfuse with the configured project keys.

        Returns:
            bool: True if the credentials resolve to a reachable project

        Raises:
            ForwardingError: If the probe itself fails
        """
        try:
            return bool(self._client.auth_check())
        except Exception as exc:
            raise ForwardingError(
                "Langfuse connectivity probe failed",
                operation="project_exists",
                details={"error_type": type(exc).__name__, "error_msg": str(exc)},
            ) from exc

    def flush(self) -> None:
        """Send buffered events."""
        self._client.flush()

    def shutdown(self) -> None:
        """Flush and stop the client's background workers."""
        self._client.shutdown()


def build_trace_sink(
    obs_settings: ObservabilitySettings,
    environment: str = "development",
) -> LangfuseTraceSink | None:
    """
    Create the trace sink from settings, or None when tracing is off.

    Missing credentials degrade to no sink rather than failing startup.

    Args:
        obs_settings: Langfuse settings
        environment: Deployment environment tag

    Returns:
        LangfuseTraceSink | None: Configured sink, or None if disabled
    """
    if not obs_settings.enable_tracing:
        logger.info("Langfuse tracing disabled, trace forwarding inactive")
        return None

    if not obs_settings.has_credentials:
        logger.warning("Langfuse keys not configured, trace forwarding inactive")
        return None

    client = Langfuse(
        public_key=obs_settings.public_key,
        secret_key=obs_settings.secret_key,
        host=obs_settings.host,
    )
    logger.info(
        "Langfuse trace sink initialized: host=%s project=%s",
        obs_settings.host, obs_settings.project_name,
    )
    return LangfuseTraceSink(client, obs_settings.project_name, environment)
