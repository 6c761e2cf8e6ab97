"""
Session service orchestrator.

Owns the write paths of sessions and messages: creation, lookups,
sequenced message inserts and the retention sweeps.

Dependencies: chat_tracking.boundary.db, chat_tracking.configs
System role: Session store use cases
"""

import logging
from datetime import timedelta
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from chat_tracking.boundary.db.base import utc_now
from chat_tracking.boundary.db.connection import Database
from chat_tracking.boundary.db.CRUD.message_crud import message_crud
from chat_tracking.boundary.db.CRUD.session_crud import session_crud
from chat_tracking.boundary.db.models.message_model import MessageModel, MessageRole
from chat_tracking.boundary.db.models.session_model import SessionModel
from chat_tracking.configs.session import SessionSettings
from chat_tracking.core.exceptions import SessionNotFoundError, ValidationError
from chat_tracking.models.session import MessageRecord, SessionContext, SessionInfo

logger = logging.getLogger(__name__)


def coerce_uuid(value: UUID | str, field: str) -> UUID:
    """
    Parse an identifier supplied as UUID or string.

    Args:
        value: Identifier
        field: Field name reported on failure

    Returns:
        UUID: Parsed identifier

    Raises:
        ValidationError: If value is empty or not a UUID
    """
    if isinstance(value, UUID):
        return value
    if not value:
        raise ValidationError(f"{field} is required", field=field)
    try:
        return UUID(str(value))
    except ValueError:
        raise ValidationError(f"{field} is not a valid UUID: {value}", field=field) from None


def _require_text(value: str | None, field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required", field=field)
    return value


def _non_negative(value: int | None, field: str) -> int | None:
    if value is not None and value < 0:
        raise ValidationError(f"{field} must not be negative", field=field)
    return value


def to_session_info(session: SessionModel) -> SessionInfo:
    """Convert a SessionModel row to its public schema."""
    return SessionInfo(
        id=session.id,
        store_id=session.store_id,
        user_id=session.user_id,
        metadata=session.session_metadata or {},
        created_at=session.created_at,
        last_active_at=session.last_active_at,
        expires_at=session.expires_at,
    )


def to_message_record(message: MessageModel) -> MessageRecord:
    """Convert a MessageModel row to its public schema."""
    return MessageRecord(
        id=message.id,
        role=MessageRole(message.role).value,
        content=message.content,
        token_count=message.token_count,
        response_time_ms=message.response_time_ms,
        trace_id=message.trace_id,
        parent_message_id=message.parent_message_id,
        sequence_number=message.sequence_number,
        created_at=message.created_at,
        metadata=message.message_metadata or {},
    )


class SessionService:
    """
    Session store.

    Every write runs inside one transaction from the Database provider;
    reads open their own scoped session.
    """

    def __init__(self, database: Database, settings: SessionSettings | None = None) -> None:
        """
        Initialize session service.

        Args:
            database: Connection/transaction provider
            settings: Expiry, retention and limit policy
        """
        self.database = database
        self.settings = settings or SessionSettings()

    async def create_session(
        self,
        store_id: str,
        user_id: str,
        metadata: dict[str, Any] | None = None,
    ) -> UUID:
        """
        Create a new live session for a store/user pair.

        Args:
            store_id: Owning store identifier
            user_id: Owning user identifier
            metadata: Optional opaque metadata

        Returns:
            UUID: Created session ID

        Raises:
            ValidationError: If store_id or user_id is empty
            PersistenceError: If the insert fails
        """
        _require_text(store_id, "store_id")
        _require_text(user_id, "user_id")

        session_id = uuid4()
        now = utc_now()

        async with self.database.transaction() as db:
            await session_crud.create(
                db,
                id=session_id,
                store_id=store_id,
                user_id=user_id,
                session_metadata=dict(metadata or {}),
                is_active=True,
                created_at=now,
                last_active_at=now,
                expires_at=now + timedelta(hours=self.settings.expiry_hours),
            )

        logger.info("Session created: session_id=%s store_id=%s", session_id, store_id)
        return session_id

    async def find_active_session(self, store_id: str, user_id: str) -> UUID | None:
        """
        Find the most recently active live session for a store/user pair.

        Does not create a session; resume-or-create is the caller's choice.

        Args:
            store_id: Store identifier
            user_id: User identifier

        Returns:
            UUID | None: Session ID or None if no live session exists
        """
        _require_text(store_id, "store_id")
        _require_text(user_id, "user_id")

        async with self.database.acquire() as db:
            return await session_crud.find_latest_live_id(db, store_id, user_id, utc_now())

    async def get_session_context(
        self,
        session_id: UUID | str,
        message_limit: int | None = None,
    ) -> SessionContext:
        """
        Fetch a live session and its most recent messages.

        Messages are read newest first and returned oldest first.

        Args:
            session_id: Session UUID
            message_limit: Number of recent messages (default from settings)

        Returns:
            SessionContext: Session info and chronological recent messages

        Raises:
            ValidationError: If message_limit is out of range
            SessionNotFoundError: If the session is absent or not live
        """
        sid = coerce_uuid(session_id, "session_id")
        limit = self.settings.default_message_limit if message_limit is None else message_limit
        if not 1 <= limit <= self.settings.max_message_limit:
            raise ValidationError(
                f"message_limit must be between 1 and {self.settings.max_message_limit}",
                field="message_limit",
            )

        async with self.database.acquire() as db:
            session = await session_crud.get_live(db, sid, utc_now())
            if session is None:
                raise SessionNotFoundError(sid)
            messages = await message_crud.get_recent(db, sid, limit)

        return SessionContext(
            session=to_session_info(session),
            recent_messages=[to_message_record(m) for m in reversed(messages)],
        )

    async def save_message(
        self,
        session_id: UUID | str,
        role: MessageRole | str,
        content: str,
        token_count: int | None = None,
        response_time_ms: int | None = None,
        trace_id: str | None = None,
        parent_message_id: UUID | str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> UUID:
        """
        Persist one message with the next sequence number for its session.

        Within one transaction: bump the session's last_active_at, check
        the parent reference, assign MAX(sequence_number)+1 and insert.
        Either everything commits or nothing does.

        Args:
            session_id: Owning session UUID
            role: "user" or "assistant"
            content: Message text
            token_count: Optional token usage
            response_time_ms: Optional latency in milliseconds
            trace_id: Optional external trace identifier
            parent_message_id: Optional earlier message of the same session
            metadata: Optional opaque metadata

        Returns:
            UUID: Created message ID

        Raises:
            ValidationError: On invalid arguments or a foreign parent message
            SessionNotFoundError: If the session is missing or soft-deleted
            PersistenceError: If the storage write fails
        """
        sid = coerce_uuid(session_id, "session_id")
        try:
            message_role = MessageRole(role)
        except ValueError:
            raise ValidationError(f"Unsupported role: {role}", field="role") from None
        if content is None:
            raise ValidationError("content is required", field="content")
        _non_negative(token_count, "token_count")
        _non_negative(response_time_ms, "response_time_ms")
        parent_id = (
            coerce_uuid(parent_message_id, "parent_message_id")
            if parent_message_id is not None
            else None
        )

        message_id = uuid4()

        async def _insert(db: AsyncSession) -> int:
            now = utc_now()
            if not await session_crud.touch(db, sid, now):
                raise SessionNotFoundError(sid)

            if parent_id is not None and not await message_crud.belongs_to_session(db, parent_id, sid):
                raise ValidationError(
                    f"Parent message {parent_id} does not belong to session {sid}",
                    field="parent_message_id",
                )

            sequence_number = await message_crud.next_sequence_number(db, sid)
            await message_crud.create(
                db,
                id=message_id,
                session_id=sid,
                role=message_role,
                content=content,
                token_count=token_count,
                response_time_ms=response_time_ms,
                trace_id=trace_id,
                parent_message_id=parent_id,
                message_metadata=dict(metadata or {}),
                sequence_number=sequence_number,
                created_at=now,
                is_deleted=False,
            )
            return sequence_number

        sequence_number = await self.database.with_transaction(_insert)
        logger.debug(
            "Message saved: session_id=%s message_id=%s role=%s seq=%d",
            sid, message_id, message_role.value, sequence_number,
        )
        return message_id

    async def soft_delete_message(self, message_id: UUID | str) -> bool:
        """
        Flag a message as deleted; it disappears from contexts and stats.

        Args:
            message_id: Message UUID

        Returns:
            bool: True if the message was flagged, False if absent or already deleted
        """
        mid = coerce_uuid(message_id, "message_id")
        async with self.database.transaction() as db:
            return await message_crud.soft_delete(db, mid)

    async def cleanup_expired_sessions(self) -> int:
        """
        Deactivate and soft-delete every session past its expiry.

        Idempotent: already soft-deleted sessions are skipped.

        Returns:
            int: Number of sessions soft-deleted
        """
        async with self.database.transaction() as db:
            cleaned = await session_crud.soft_delete_expired(db, utc_now())

        logger.info("Expired sessions cleaned up: %d", cleaned)
        return cleaned

    async def hard_delete_old_data(self) -> int:
        """
        Permanently delete sessions soft-deleted longer than the retention window.

        Their messages are removed in the same transaction.

        Returns:
            int: Number of sessions permanently deleted
        """
        retention = timedelta(days=self.settings.retention_days)
        async with self.database.transaction() as db:
            deleted = await session_crud.hard_delete_soft_deleted(db, utc_now(), retention)

        logger.info(
            "Old data hard-deleted: %d sessions (retention %d days)",
            deleted, self.settings.retention_days,
        )
        return deleted
