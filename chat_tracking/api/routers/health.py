"""
Health check API endpoints.

Routes: GET /health

Dependencies: chat_tracking.application.services
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends

from chat_tracking.api.deps import get_chat_tracking_service
from chat_tracking.application.services.chat_tracking_service import ChatTrackingService
from chat_tracking.models.common import HealthStatus

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthStatus)
async def health_check(
    service: ChatTrackingService = Depends(get_chat_tracking_service),
) -> HealthStatus:
    """Database connectivity, trace sink reachability and service states."""
    return await service.get_health_status()
