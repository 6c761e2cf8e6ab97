"""API routers."""

from .analytics import router as analytics_router
from .health import router as health_router
from .maintenance import router as maintenance_router
from .sessions import router as sessions_router

__all__ = [
    "analytics_router",
    "health_router",
    "maintenance_router",
    "sessions_router",
]
