"""
Session domain models and schemas.

Request/response schemas for session operations and the session
context returned to chat callers.

Dependencies: pydantic
System role: Session API contracts
"""

import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from chat_tracking.models.analytics import SessionStats


class CreateSessionRequest(BaseModel):
    """Request schema for creating a new session."""

    store_id: str = Field(min_length=1, description="Owning store identifier")
    user_id: str = Field(min_length=1, description="Owning user identifier")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Optional session metadata")


class CreateSessionResponse(BaseModel):
    """Response schema for a created session."""

    session_id: uuid.UUID
    message: str = "Chat session created"


class ActiveSessionResponse(BaseModel):
    """Most recently active live session for a store/user pair, if any."""

    session_id: uuid.UUID | None


class SessionInfo(BaseModel):
    """Session row as exposed to callers."""

    id: uuid.UUID
    store_id: str
    user_id: str
    metadata: dict[str, Any]
    created_at: datetime
    last_active_at: datetime
    expires_at: datetime | None = None


class MessageRecord(BaseModel):
    """One stored chat message."""

    id: uuid.UUID
    role: Literal["user", "assistant"]
    content: str
    token_count: int | None = None
    response_time_ms: int | None = None
    trace_id: str | None = None
    parent_message_id: uuid.UUID | None = None
    sequence_number: int
    created_at: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)


class SessionContext(BaseModel):
    """Session plus its most recent messages in chronological order."""

    session: SessionInfo
    recent_messages: list[MessageRecord]


class SessionDetailResponse(SessionContext):
    """Session context enriched with message statistics."""

    stats: SessionStats
