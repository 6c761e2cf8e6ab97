"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, CreatedAtMixin: Model building blocks
  - Database, get_async_engine: Connection/transaction provider
  - SessionModel, MessageModel, MessageRole: Domain entities
  - session_crud, message_crud: CRUD operation singletons

Dependencies: sqlalchemy, chat_tracking.configs
System role: Database adapter providing persistent storage for chat
sessions and messages with retention sweeps.
"""

from chat_tracking.boundary.db.base import Base, CreatedAtMixin, UUIDMixin, utc_now
from chat_tracking.boundary.db.connection import Database, get_async_engine
from chat_tracking.boundary.db.models import MessageModel, MessageRole, SessionModel
from chat_tracking.boundary.db.CRUD import (
    BaseCRUD,
    MessageCRUD,
    SessionCRUD,
    message_crud,
    session_crud,
)

__all__ = [
    # Base classes
    "Base",
    "CreatedAtMixin",
    "UUIDMixin",
    "utc_now",
    # Connection
    "Database",
    "get_async_engine",
    # Models
    "SessionModel",
    "MessageModel",
    "MessageRole",
    # CRUD classes
    "BaseCRUD",
    "SessionCRUD",
    "MessageCRUD",
    # CRUD singletons
    "session_crud",
    "message_crud",
]
