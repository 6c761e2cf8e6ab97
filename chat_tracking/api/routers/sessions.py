"""
Session API endpoints.

Routes:
- POST /sessions - Create new session
- GET /sessions/active - Most recently active live session for a store/user
- GET /sessions/{id} - Session context with recent messages and stats
- POST /sessions/{id}/interactions - Log one user/assistant exchange
- POST /sessions/{id}/feedback - Rate an assistant message

Dependencies: chat_tracking.application.services, chat_tracking.models
System role: Session management HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from chat_tracking.api.deps import get_chat_tracking_service
from chat_tracking.application.services.chat_tracking_service import ChatTrackingService
from chat_tracking.models.chat import (
    FeedbackRequest,
    FeedbackResponse,
    InteractionRecord,
    LogInteractionRequest,
)
from chat_tracking.models.session import (
    ActiveSessionResponse,
    CreateSessionRequest,
    CreateSessionResponse,
    SessionDetailResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=CreateSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    request: CreateSessionRequest,
    service: ChatTrackingService = Depends(get_chat_tracking_service),
) -> CreateSessionResponse:
    """
    Create a new chat session.

    Args:
        request: Store, user and optional metadata
        service: Injected ChatTrackingService

    Returns:
        CreateSessionResponse: New session ID
    """
    session_id = await service.create_session(
        store_id=request.store_id,
        user_id=request.user_id,
        metadata=request.metadata,
    )
    return CreateSessionResponse(session_id=session_id)


@router.get("/active", response_model=ActiveSessionResponse)
async def find_active_session(
    store_id: str = Query(min_length=1),
    user_id: str = Query(min_length=1),
    service: ChatTrackingService = Depends(get_chat_tracking_service),
) -> ActiveSessionResponse:
    """
    Look up the session a returning user can resume.

    Never creates a session; session_id is null when none is live.
    """
    session_id = await service.find_active_session(store_id, user_id)
    return ActiveSessionResponse(session_id=session_id)


@router.get("/{session_id}", response_model=SessionDetailResponse)
async def get_session(
    session_id: UUID,
    message_limit: int = 5,
    service: ChatTrackingService = Depends(get_chat_tracking_service),
) -> SessionDetailResponse:
    """
    Get a live session with its recent messages and statistics.

    Args:
        session_id: Session UUID
        message_limit: Number of recent messages (1-50, default 5)
        service: Injected ChatTrackingService

    Returns:
        SessionDetailResponse: Session, chronological messages and stats

    Raises:
        404: Session missing or no longer live
        400: message_limit out of range
    """
    context = await service.get_session_context(session_id, message_limit)
    stats = await service.get_session_stats(session_id)
    return SessionDetailResponse(
        session=context.session,
        recent_messages=context.recent_messages,
        stats=stats,
    )


@router.post(
    "/{session_id}/interactions",
    response_model=InteractionRecord,
    status_code=status.HTTP_201_CREATED,
)
async def log_interaction(
    session_id: UUID,
    request: LogInteractionRequest,
    service: ChatTrackingService = Depends(get_chat_tracking_service),
) -> InteractionRecord:
    """
    Persist one user/assistant exchange; trace forwarding runs in the background.

    Raises:
        404: Session missing or soft-deleted
        503: Storage failure
    """
    return await service.log_chat_interaction(
        session_id,
        user_message=request.user_message,
        assistant_response=request.assistant_response,
        token_usage=request.token_usage,
        response_time_ms=request.response_time_ms,
        trace_id=request.trace_id,
        business_metadata=request.business_metadata,
    )


@router.post(
    "/{session_id}/feedback",
    response_model=FeedbackResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def add_feedback(
    session_id: UUID,
    request: FeedbackRequest,
    service: ChatTrackingService = Depends(get_chat_tracking_service),
) -> FeedbackResponse:
    """Forward a 1-5 rating of an assistant message to the trace sink."""
    forwarded = await service.add_user_feedback(
        session_id,
        request.message_id,
        request.rating,
        comment=request.comment,
        category=request.category,
    )
    if not forwarded:
        logger.info(f"{__name__}:add_feedback - feedback not forwarded session_id={session_id}")
    return FeedbackResponse(forwarded=forwarded)
