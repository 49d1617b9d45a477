"""
Message repository.
"""

import uuid
from typing import List

from sqlalchemy.orm import Session

from threadkeep.db.repositories.base import BaseRepository
from threadkeep.models.db import Message


class MessageRepository(BaseRepository[Message]):
    """Repository for Message model."""

    def __init__(self, session: Session):
        super().__init__(Message, session)

    def get_by_conversation(
        self, conversation_id: uuid.UUID, user_id: str
    ) -> List[Message]:
        """
        Get an owner's messages for a conversation in submission order.

        Args:
            conversation_id: Conversation UUID
            user_id: Owner identity

        Returns:
            List of messages ordered by message_index
        """
        return (
            self.session.query(Message)
            .filter(
                Message.conversation_id == conversation_id,
                Message.user_id == user_id,
            )
            .order_by(Message.message_index.asc(), Message.created_at.asc())
            .all()
        )
