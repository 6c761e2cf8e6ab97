"""Service orchestrators."""

from .analytics_service import ChatAnalyticsService, calculate_tokens
from .chat_tracking_service import ChatTrackingService
from .monitoring_service import LLMMonitoringService
from .session_service import SessionService

__all__ = [
    "ChatAnalyticsService",
    "ChatTrackingService",
    "LLMMonitoringService",
    "SessionService",
    "calculate_tokens",
]
