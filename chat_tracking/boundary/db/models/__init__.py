"""
Database models package.

Exports:
  - SessionModel: Session ORM model
  - MessageModel, MessageRole: Message ORM model and role enum

Dependencies: sqlalchemy, chat_tracking.boundary.db.base
System role: Database model definitions for domain entities
"""

from chat_tracking.boundary.db.models.session_model import SessionModel
from chat_tracking.boundary.db.models.message_model import MessageModel, MessageRole

__all__ = [
    "SessionModel",
    "MessageModel",
    "MessageRole",
]
