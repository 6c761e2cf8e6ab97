"""
Message ORM model.

One turn of a conversation, ordered inside its session by a
per-session sequence number.

Dependencies: sqlalchemy, chat_tracking.boundary.db.base
System role: Message persistence for chat history and analytics
"""

import enum
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chat_tracking.boundary.db.base import Base, CreatedAtMixin, UUIDMixin


class MessageRole(str, enum.Enum):
    """
    Author of a message.

    USER: Question typed by the end user
    ASSISTANT: Reply produced by the chatbot
    """

    USER = "user"
    ASSISTANT = "assistant"


class MessageModel(Base, UUIDMixin, CreatedAtMixin):
    """
    Message ORM model.

    Attributes:
        id: UUID primary key (auto-generated)
        session_id: Owning session (cascade delete)
        role: USER or ASSISTANT
        content: Message text
        token_count: Token usage, estimated or reported by the model provider
        response_time_ms: Assistant latency in milliseconds
        trace_id: External trace identifier
        parent_message_id: User message an assistant reply answers
        message_metadata: Free-form JSON object (inquiryCategory, error, ...)
        sequence_number: Strictly increasing position inside the session
        is_deleted: Soft-delete flag, the only mutable column

    Constraints:
        (session_id, sequence_number): UNIQUE
    """

    __tablename__ = "messages"

    session_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("sessions.id", ondelete="CASCADE"),
        nullable=False,
    )

    role: Mapped[MessageRole] = mapped_column(
        Enum(MessageRole, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    token_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    response_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    trace_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    parent_message_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("messages.id", ondelete="SET NULL"),
        nullable=True,
    )

    message_metadata: Mapped[dict] = mapped_column(
        "metadata",
        JSON,
        nullable=False,
        default=dict,
    )

    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    session = relationship("SessionModel", back_populates="messages")

    __table_args__ = (
        UniqueConstraint("session_id", "sequence_number", name="uq_messages_session_sequence"),
        Index("idx_messages_session_created", "session_id", "created_at"),
    )
