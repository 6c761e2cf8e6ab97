"""
FastAPI application with assembled routers.

The lifespan is the composition root: it builds the database provider,
the trace sink and the services once per process and tears them down
on shutdown.

Dependencies: fastapi, uvicorn, chat_tracking.api.routers, chat_tracking.application
System role: API entry point with router assembly and server launch
"""

import asyncio
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chat_tracking.api.error_handlers import register_exception_handlers
from chat_tracking.application.services import (
    ChatAnalyticsService,
    ChatTrackingService,
    LLMMonitoringService,
    SessionService,
)
from chat_tracking.boundary.db.connection import Database
from chat_tracking.configs import Settings, get_settings
from chat_tracking.observability.langfuse_tracer import build_trace_sink
from chat_tracking.observability.logger import configure_logging
from chat_tracking.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

from .routers import (
    analytics_router,
    health_router,
    maintenance_router,
    sessions_router,
)

logger = logging.getLogger(__name__)


def build_chat_tracking_service(settings: Settings, database: Database, sink=None) -> ChatTrackingService:
    """
    Wire the facade from its collaborators.

    Args:
        settings: Application settings
        database: Connection/transaction provider
        sink: Optional trace sink

    Returns:
        ChatTrackingService: Facade over session, analytics and monitoring services
    """
    return ChatTrackingService(
        database=database,
        session_service=SessionService(database, settings.session),
        analytics_service=ChatAnalyticsService(database, settings.session),
        monitoring_service=LLMMonitoringService(sink),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    # Startup
    database = Database.from_settings(settings.database)
    await database.create_schema()
    sink = build_trace_sink(settings.observability, settings.environment)

    app.state.database = database
    app.state.trace_sink = sink
    app.state.chat_tracking_service = build_chat_tracking_service(settings, database, sink)
    logger.info("Chat tracking services started (tracing=%s)", sink is not None)

    yield

    # Shutdown
    await app.state.chat_tracking_service.drain()
    if sink is not None:
        await asyncio.to_thread(sink.shutdown)
    await database.dispose()
    logger.info("Chat tracking services stopped")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="Chat Tracking API",
        description="Chat session persistence, interaction tracing and analytics for a RAG chatbot",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    register_exception_handlers(app)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(sessions_router, prefix="/api/v1")
    app.include_router(analytics_router, prefix="/api/v1")
    app.include_router(maintenance_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "chat_tracking.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
