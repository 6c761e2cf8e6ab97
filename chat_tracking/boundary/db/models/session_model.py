"""
Session ORM model.

Represents one conversation between a user and a store, with its
activity, expiry and soft-deletion timestamps.

Dependencies: sqlalchemy, chat_tracking.boundary.db.base
System role: Session persistence for chat context management
"""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chat_tracking.boundary.db.base import Base, CreatedAtMixin, UUIDMixin, utc_now


class SessionModel(Base, UUIDMixin, CreatedAtMixin):
    """
    Session ORM model.

    A session is live while is_active is true, deleted_at is null and
    expires_at (when set) lies in the future. Messages cascade on delete.

    Attributes:
        id: UUID primary key (auto-generated)
        store_id: Owning store identifier
        user_id: Owning user identifier
        session_metadata: Free-form JSON object supplied at creation
        is_active: Cleared by the expiry sweep
        created_at: Creation timestamp (UTC)
        last_active_at: Bumped on every message write
        expires_at: Optional expiry timestamp
        deleted_at: Soft-deletion timestamp, set by the expiry sweep
    """

    __tablename__ = "sessions"

    store_id: Mapped[str] = mapped_column(String(255), nullable=False)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)

    session_metadata: Mapped[dict] = mapped_column(
        "metadata",
        JSON,
        nullable=False,
        default=dict,
        doc="Opaque session metadata (channel, locale, etc.)",
    )

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    last_active_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    messages = relationship(
        "MessageModel",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_sessions_store_user_active", "store_id", "user_id", "last_active_at"),
        Index("idx_sessions_store_created", "store_id", "created_at"),
    )
