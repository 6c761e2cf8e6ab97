"""
Observability module.

Provides structured logging, correlation ID tracking and the Langfuse
trace sink used to forward chat interaction metrics.
"""

from chat_tracking.observability.langfuse_tracer import LangfuseTraceSink, build_trace_sink

__all__ = ["LangfuseTraceSink", "build_trace_sink"]
