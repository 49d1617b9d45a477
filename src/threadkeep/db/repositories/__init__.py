"""
Repository layer for database operations.

Provides a clean API for owner-scoped CRUD operations on database models.
"""

from threadkeep.db.repositories.base import BaseRepository
from threadkeep.db.repositories.conversation import ConversationRepository
from threadkeep.db.repositories.file import FileRepository
from threadkeep.db.repositories.message import MessageRepository

__all__ = [
    "BaseRepository",
    "ConversationRepository",
    "FileRepository",
    "MessageRepository",
]
