"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from chat_tracking.boundary.db.CRUD import session_crud, message_crud

    async with database.transaction() as db:
        await session_crud.touch(db, session_id, now)
"""

from chat_tracking.boundary.db.CRUD.base_crud import BaseCRUD
from chat_tracking.boundary.db.CRUD.session_crud import SessionCRUD, live_session_clause, session_crud
from chat_tracking.boundary.db.CRUD.message_crud import MessageCRUD, message_crud

__all__ = [
    "BaseCRUD",
    "SessionCRUD",
    "session_crud",
    "live_session_clause",
    "MessageCRUD",
    "message_crud",
]
