"""
Analytics API endpoints.

Routes:
- GET /analytics/sessions/{id} - Per-session message statistics
- GET /analytics/stores/{store_id}/daily - One day of store activity
- GET /analytics/stores/{store_id}/performance - Trailing-window performance

Dependencies: chat_tracking.application.services, chat_tracking.models
System role: Reporting HTTP API
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends

from chat_tracking.api.deps import get_chat_tracking_service
from chat_tracking.application.services.chat_tracking_service import ChatTrackingService
from chat_tracking.boundary.db.base import utc_now
from chat_tracking.models.analytics import PerformanceMetrics, SessionStats, StoreDailyStats

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/sessions/{session_id}", response_model=SessionStats)
async def session_stats(
    session_id: UUID,
    service: ChatTrackingService = Depends(get_chat_tracking_service),
) -> SessionStats:
    return await service.get_session_stats(session_id)


@router.get("/stores/{store_id}/daily", response_model=StoreDailyStats)
async def store_daily_stats(
    store_id: str,
    day: date | None = None,
    service: ChatTrackingService = Depends(get_chat_tracking_service),
) -> StoreDailyStats:
    """
    Store statistics for one UTC day.

    Args:
        store_id: Store identifier
        day: Calendar day (defaults to today, UTC)
        service: Injected ChatTrackingService
    """
    return await service.get_store_daily_stats(store_id, day or utc_now().date())


@router.get("/stores/{store_id}/performance", response_model=PerformanceMetrics)
async def store_performance(
    store_id: str,
    days: int = 7,
    service: ChatTrackingService = Depends(get_chat_tracking_service),
) -> PerformanceMetrics:
    """
    Latency percentiles, token usage and error rate over the last `days` days.

    Raises:
        400: days outside 1-30
    """
    return await service.get_performance_metrics(store_id, days)
