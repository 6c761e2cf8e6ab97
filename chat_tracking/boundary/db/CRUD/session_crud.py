"""
Session CRUD operations.

Provides lookups, activity bumps and retention sweeps for SessionModel.

Dependencies: sqlalchemy, chat_tracking.boundary.db.models
System role: Session persistence operations
"""

from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import ColumnElement, and_, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chat_tracking.boundary.db.CRUD.base_crud import BaseCRUD
from chat_tracking.boundary.db.models.message_model import MessageModel
from chat_tracking.boundary.db.models.session_model import SessionModel


def live_session_clause(now: datetime) -> ColumnElement[bool]:
    """
    SQL predicate selecting live sessions.

    Args:
        now: Reference time for the expiry comparison

    Returns:
        Boolean clause: active, not soft-deleted and not expired
    """
    return and_(
        SessionModel.is_active.is_(True),
        SessionModel.deleted_at.is_(None),
        or_(SessionModel.expires_at.is_(None), SessionModel.expires_at > now),
    )


class SessionCRUD(BaseCRUD[SessionModel]):
    """
    CRUD operations for SessionModel.

    Extends BaseCRUD with liveness-aware lookups and the two
    set-based maintenance sweeps.
    """

    def __init__(self) -> None:
        """Initialize SessionCRUD with SessionModel."""
        super().__init__(SessionModel)

    async def get_live(
        self,
        session: AsyncSession,
        id: UUID,
        now: datetime,
    ) -> SessionModel | None:
        """
        Retrieve a session only if it is live.

        Args:
            session: Async database session
            id: Session UUID
            now: Reference time for expiry

        Returns:
            SessionModel if live, None otherwise
        """
        stmt = select(SessionModel).where(SessionModel.id == id, live_session_clause(now))
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_latest_live_id(
        self,
        session: AsyncSession,
        store_id: str,
        user_id: str,
        now: datetime,
    ) -> UUID | None:
        """
        Find the most recently active live session for a store/user pair.

        Args:
            session: Async database session
            store_id: Store identifier
            user_id: User identifier
            now: Reference time for expiry

        Returns:
            Session UUID or None
        """
        stmt = (
            select(SessionModel.id)
            .where(
                SessionModel.store_id == store_id,
                SessionModel.user_id == user_id,
                live_session_clause(now),
            )
            .order_by(SessionModel.last_active_at.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def touch(self, session: AsyncSession, id: UUID, now: datetime) -> bool:
        """
        Bump last_active_at on a session that is not soft-deleted.

        On PostgreSQL the UPDATE takes the row lock that serializes
        concurrent message writers of the same session.

        Args:
            session: Async database session (inside a transaction)
            id: Session UUID
            now: New activity timestamp

        Returns:
            True if a row was updated
        """
        stmt = (
            update(SessionModel)
            .where(SessionModel.id == id, SessionModel.deleted_at.is_(None))
            .values(last_active_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def soft_delete_expired(self, session: AsyncSession, now: datetime) -> int:
        """
        Deactivate and soft-delete sessions whose expiry has passed.

        Args:
            session: Async database session (inside a transaction)
            now: Reference time

        Returns:
            Number of sessions soft-deleted
        """
        stmt = (
            update(SessionModel)
            .where(
                SessionModel.deleted_at.is_(None),
                SessionModel.expires_at.is_not(None),
                SessionModel.expires_at <= now,
            )
            .values(is_active=False, deleted_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def hard_delete_soft_deleted(
        self,
        session: AsyncSession,
        now: datetime,
        retention: timedelta,
    ) -> int:
        """
        Permanently remove sessions soft-deleted longer than the retention window.

        Messages are deleted explicitly first so the sweep does not depend
        on the dialect enforcing ON DELETE CASCADE.

        Args:
            session: Async database session (inside a transaction)
            now: Reference time
            retention: Age past soft-deletion after which rows are purged

        Returns:
            Number of sessions removed
        """
        cutoff = now - retention
        expired_ids = (
            select(SessionModel.id)
            .where(SessionModel.deleted_at.is_not(None), SessionModel.deleted_at < cutoff)
            .scalar_subquery()
        )

        await session.execute(
            delete(MessageModel)
            .where(MessageModel.session_id.in_(expired_ids))
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(
            delete(SessionModel)
            .where(SessionModel.deleted_at.is_not(None), SessionModel.deleted_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


session_crud = SessionCRUD()
