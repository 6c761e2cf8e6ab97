"""
Message CRUD operations.

Sequence-number assignment, recent-history reads and the soft-delete
flag for MessageModel.

Dependencies: sqlalchemy, chat_tracking.boundary.db.models
System role: Message persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chat_tracking.boundary.db.CRUD.base_crud import BaseCRUD
from chat_tracking.boundary.db.models.message_model import MessageModel


class MessageCRUD(BaseCRUD[MessageModel]):
    """CRUD operations for MessageModel."""

    def __init__(self) -> None:
        """Initialize MessageCRUD with MessageModel."""
        super().__init__(MessageModel)

    async def next_sequence_number(self, session: AsyncSession, session_id: UUID) -> int:
        """
        Compute the next sequence number for a session.

        Must run inside the transaction that inserts the message, after
        the session row has been locked by the activity bump.

        Args:
            session: Async database session
            session_id: Session UUID

        Returns:
            int: MAX(sequence_number) + 1, or 1 for an empty session
        """
        stmt = select(func.coalesce(func.max(MessageModel.sequence_number), 0)).where(
            MessageModel.session_id == session_id
        )
        result = await session.execute(stmt)
        return int(result.scalar_one()) + 1

    async def belongs_to_session(
        self,
        session: AsyncSession,
        message_id: UUID,
        session_id: UUID,
    ) -> bool:
        """
        Check that a message exists inside the given session.

        Args:
            session: Async database session
            message_id: Message UUID
            session_id: Expected owning session UUID

        Returns:
            True if the message belongs to the session
        """
        stmt = select(MessageModel.id).where(
            MessageModel.id == message_id,
            MessageModel.session_id == session_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def get_recent(
        self,
        session: AsyncSession,
        session_id: UUID,
        limit: int,
    ) -> Sequence[MessageModel]:
        """
        Fetch the most recent non-deleted messages, newest first.

        Args:
            session: Async database session
            session_id: Session UUID
            limit: Maximum number of messages

        Returns:
            Messages ordered by descending sequence number
        """
        stmt = (
            select(MessageModel)
            .where(MessageModel.session_id == session_id, MessageModel.is_deleted.is_(False))
            .order_by(MessageModel.sequence_number.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def soft_delete(self, session: AsyncSession, message_id: UUID) -> bool:
        """
        Set the soft-delete flag on a message.

        Args:
            session: Async database session (inside a transaction)
            message_id: Message UUID

        Returns:
            True if a live message was flagged
        """
        stmt = (
            update(MessageModel)
            .where(MessageModel.id == message_id, MessageModel.is_deleted.is_(False))
            .values(is_deleted=True)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount > 0


message_crud = MessageCRUD()
