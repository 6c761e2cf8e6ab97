"""
Dependency injection providers.

The composition root (application lifespan) builds one facade per
process and stores it on app.state; routers receive it from here.

Dependencies: fastapi, chat_tracking.application
System role: DI container for service injection
"""

from fastapi import Request

from chat_tracking.application.services.chat_tracking_service import ChatTrackingService


def get_chat_tracking_service(request: Request) -> ChatTrackingService:
    """
    Get the chat tracking facade built at startup.

    Args:
        request: Incoming request (gives access to app.state)

    Returns:
        ChatTrackingService: Process-wide facade
    """
    return request.app.state.chat_tracking_service
