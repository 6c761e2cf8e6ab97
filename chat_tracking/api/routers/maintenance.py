"""
Maintenance API endpoints.

Routes:
- POST /maintenance/cleanup-expired - Soft-delete expired sessions
- POST /maintenance/hard-delete - Purge sessions past the retention window

Both sweeps are idempotent and intended for a scheduler.

Dependencies: chat_tracking.application.services
System role: Retention sweep HTTP API
"""

import logging

from fastapi import APIRouter, Depends

from chat_tracking.api.deps import get_chat_tracking_service
from chat_tracking.application.services.chat_tracking_service import ChatTrackingService
from chat_tracking.models.common import MaintenanceResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@router.post("/cleanup-expired", response_model=MaintenanceResult)
async def cleanup_expired(
    service: ChatTrackingService = Depends(get_chat_tracking_service),
) -> MaintenanceResult:
    """Soft-delete every session whose expiry has passed."""
    affected = await service.cleanup_expired_sessions()
    return MaintenanceResult(affected=affected)


@router.post("/hard-delete", response_model=MaintenanceResult)
async def hard_delete(
    service: ChatTrackingService = Depends(get_chat_tracking_service),
) -> MaintenanceResult:
    """Permanently delete sessions soft-deleted longer than the retention window."""
    affected = await service.hard_delete_old_data()
    logger.info(f"{__name__}:hard_delete - {affected} sessions purged")
    return MaintenanceResult(affected=affected)
