"""API-specific dependencies."""

from .dependencies import get_chat_tracking_service

__all__ = [
    "get_chat_tracking_service",
]
