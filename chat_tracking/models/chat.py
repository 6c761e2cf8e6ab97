"""
Chat interaction models and schemas.

Interaction payloads logged by the chat tracking facade and the user
feedback forwarded to the trace sink.

Dependencies: pydantic
System role: Chat interaction contracts
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field


class LogInteractionRequest(BaseModel):
    """Request schema for logging one user/assistant exchange."""

    user_message: str = Field(min_length=1, description="User question")
    assistant_response: str = Field(min_length=1, description="Assistant answer")
    token_usage: int | None = Field(default=None, ge=0, description="Tokens reported by the model")
    response_time_ms: int | None = Field(default=None, ge=0, description="Assistant latency")
    trace_id: str | None = Field(default=None, description="External trace identifier")
    business_metadata: dict[str, Any] | None = Field(
        default=None,
        description="inquiryCategory, priority, topicTags, retrievedDocsCount, ...",
    )


class ChatInteraction(LogInteractionRequest):
    """Full interaction forwarded to the trace sink."""

    session_id: uuid.UUID


class InteractionRecord(BaseModel):
    """Identifiers of the message pair persisted for one interaction."""

    session_id: uuid.UUID
    user_message_id: uuid.UUID
    assistant_message_id: uuid.UUID


class FeedbackRequest(BaseModel):
    """Request schema for rating an assistant message."""

    message_id: uuid.UUID
    rating: int = Field(ge=1, le=5, description="1 (poor) to 5 (excellent)")
    comment: str | None = None
    category: str | None = None


class UserFeedback(FeedbackRequest):
    """User feedback forwarded to the trace sink."""

    session_id: uuid.UUID


class FeedbackResponse(BaseModel):
    """Outcome of a feedback submission; forwarding is best-effort."""

    forwarded: bool
