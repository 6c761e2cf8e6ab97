"""
Test suite for message sequence numbers and write atomicity.

Sequence numbers must be strictly increasing per session with no
duplicates, including under concurrent writers, and a failed write
must leave neither a message nor an activity bump behind.

System role: Verification of transactional message writes
"""

import asyncio
import uuid

import pytest
from sqlalchemy import func, select

from chat_tracking.application.services.session_service import SessionService
from chat_tracking.boundary.db.connection import Database
from chat_tracking.boundary.db.models.message_model import MessageModel
from chat_tracking.boundary.db.CRUD.message_crud import MessageCRUD
from chat_tracking.core.exceptions import PersistenceError, ValidationError


async def _sequence_numbers(database: Database, session_id: uuid.UUID) -> list[int]:
    async with database.acquire() as db:
        result = await db.execute(
            select(MessageModel.sequence_number)
            .where(MessageModel.session_id == session_id)
            .order_by(MessageModel.sequence_number)
        )
        return list(result.scalars().all())


class TestSequenceNumbers:
    """Sequence assignment for serial and concurrent writers."""

    @pytest.mark.asyncio
    async def test_serial_writes_should_number_from_one(
        self, session_service: SessionService, database: Database
    ) -> None:
        # Arrange
        session_id = await session_service.create_session("store_a", "user_a")

        # Act
        for i in range(5):
            await session_service.save_message(session_id, "user", f"m{i}")

        # Assert
        assert await _sequence_numbers(database, session_id) == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_sequences_should_be_independent_per_session(
        self, session_service: SessionService, database: Database
    ) -> None:
        """Each session starts its own sequence at 1."""
        first = await session_service.create_session("store_a", "user_a")
        second = await session_service.create_session("store_a", "user_b")

        await session_service.save_message(first, "user", "a")
        await session_service.save_message(first, "user", "b")
        await session_service.save_message(second, "user", "c")

        assert await _sequence_numbers(database, first) == [1, 2]
        assert await _sequence_numbers(database, second) == [1]

    @pytest.mark.asyncio
    async def test_concurrent_writes_should_not_duplicate_sequence_numbers(
        self, session_service: SessionService, database: Database
    ) -> None:
        """Concurrent writers to one session serialize on the activity bump."""
        # Arrange
        session_id = await session_service.create_session("store_a", "user_a")
        writers = 10

        # Act
        message_ids = await asyncio.gather(
            *(session_service.save_message(session_id, "user", f"c{i}") for i in range(writers))
        )

        # Assert
        assert len(set(message_ids)) == writers
        assert await _sequence_numbers(database, session_id) == list(range(1, writers + 1))

    @pytest.mark.asyncio
    async def test_concurrent_writes_across_sessions_should_each_be_dense(
        self, session_service: SessionService, database: Database
    ) -> None:
        first = await session_service.create_session("store_a", "user_a")
        second = await session_service.create_session("store_a", "user_b")

        await asyncio.gather(
            *(session_service.save_message(first, "user", f"a{i}") for i in range(4)),
            *(session_service.save_message(second, "user", f"b{i}") for i in range(4)),
        )

        assert await _sequence_numbers(database, first) == [1, 2, 3, 4]
        assert await _sequence_numbers(database, second) == [1, 2, 3, 4]


class TestWriteAtomicity:
    """A failed save leaves no partial state."""

    @pytest.mark.asyncio
    async def test_failed_save_should_roll_back_activity_bump(
        self, session_service: SessionService, database: Database, load_session
    ) -> None:
        """A parent-reference failure after the bump undoes the bump."""
        # Arrange
        session_id = await session_service.create_session("store_a", "user_a")
        await session_service.save_message(session_id, "user", "first")
        before = (await load_session(session_id)).last_active_at

        # Act
        with pytest.raises(ValidationError):
            await session_service.save_message(
                session_id, "assistant", "orphan", parent_message_id=uuid.uuid4()
            )

        # Assert
        after = (await load_session(session_id)).last_active_at
        assert after == before
        assert await _sequence_numbers(database, session_id) == [1]

    @pytest.mark.asyncio
    async def test_failed_save_should_not_consume_sequence_number(
        self, session_service: SessionService, database: Database
    ) -> None:
        session_id = await session_service.create_session("store_a", "user_a")
        await session_service.save_message(session_id, "user", "first")

        with pytest.raises(ValidationError):
            await session_service.save_message(
                session_id, "assistant", "orphan", parent_message_id=uuid.uuid4()
            )
        await session_service.save_message(session_id, "assistant", "second")

        assert await _sequence_numbers(database, session_id) == [1, 2]

    @pytest.mark.asyncio
    async def test_successful_save_should_bump_last_active_at(
        self, session_service: SessionService, load_session
    ) -> None:
        session_id = await session_service.create_session("store_a", "user_a")
        created = (await load_session(session_id)).last_active_at

        await session_service.save_message(session_id, "user", "hello")

        assert (await load_session(session_id)).last_active_at > created

    @pytest.mark.asyncio
    async def test_message_count_should_match_successful_saves(
        self, session_service: SessionService, database: Database
    ) -> None:
        session_id = await session_service.create_session("store_a", "user_a")
        await session_service.save_message(session_id, "user", "ok")
        with pytest.raises(ValidationError):
            await session_service.save_message(session_id, "bot", "bad role")

        async with database.acquire() as db:
            count = await db.scalar(
                select(func.count(MessageModel.id)).where(MessageModel.session_id == session_id)
            )

        assert count == 1

    @pytest.mark.asyncio
    async def test_failed_insert_should_roll_back_activity_bump(
        self,
        session_service: SessionService,
        database: Database,
        load_session,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A storage failure on the insert itself undoes the bump and writes nothing."""
        # Arrange
        session_id = await session_service.create_session("store_a", "user_a")
        await session_service.save_message(session_id, "user", "first")
        before = (await load_session(session_id)).last_active_at

        async def _taken_sequence_number(self, session, session_id) -> int:
            return 1

        monkeypatch.setattr(MessageCRUD, "next_sequence_number", _taken_sequence_number)

        # Act
        with pytest.raises(PersistenceError):
            await session_service.save_message(session_id, "assistant", "duplicate")

        # Assert
        assert (await load_session(session_id)).last_active_at == before
        assert await _sequence_numbers(database, session_id) == [1]
