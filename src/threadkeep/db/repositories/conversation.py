"""
Conversation repository.
"""

import uuid
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from threadkeep.db.repositories.base import BaseRepository
from threadkeep.models.db import Conversation, File, Message


class ConversationRepository(BaseRepository[Conversation]):
    """Repository for Conversation model."""

    def __init__(self, session: Session):
        super().__init__(Conversation, session)

    def list_for_owner(
        self,
        user_id: str,
        platform: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Conversation]:
        """
        Get an owner's conversations, most recently updated first.

        Args:
            user_id: Owner identity
            platform: Optional platform filter (e.g., 'chatgpt')
            limit: Maximum number of results
            offset: Number of results to skip

        Returns:
            List of conversations
        """
        query = self.session.query(Conversation).filter(
            Conversation.user_id == user_id
        )
        if platform:
            query = query.filter(Conversation.platform == platform)
        query = query.order_by(
            Conversation.updated_at.desc(), Conversation.created_at.desc()
        ).offset(offset)
        if limit:
            query = query.limit(limit)
        return query.all()

    def count_for_owner(self, user_id: str, platform: Optional[str] = None) -> int:
        """
        Count an owner's conversations.

        Args:
            user_id: Owner identity
            platform: Optional platform filter

        Returns:
            Number of conversations
        """
        query = self.session.query(Conversation).filter(
            Conversation.user_id == user_id
        )
        if platform:
            query = query.filter(Conversation.platform == platform)
        return query.count()

    def platform_counts(self, user_id: str) -> dict[str, int]:
        """Number of conversations per platform for an owner."""
        rows = (
            self.session.query(Conversation.platform, func.count(Conversation.id))
            .filter(Conversation.user_id == user_id)
            .group_by(Conversation.platform)
            .all()
        )
        return {platform or "unknown": count for platform, count in rows}

    def total_code_blocks(self, user_id: str) -> int:
        """Sum of reported code-block counts across an owner's conversations."""
        total = (
            self.session.query(func.coalesce(func.sum(Conversation.code_block_count), 0))
            .filter(Conversation.user_id == user_id)
            .scalar()
        )
        return int(total or 0)

    def delete_for_owner(self, id: uuid.UUID, user_id: str) -> bool:
        """
        Delete a conversation with its messages, detaching its files.

        Children are handled explicitly so the result does not depend on the
        database enforcing ON DELETE actions.

        Args:
            id: Conversation UUID
            user_id: Owner identity

        Returns:
            True if the conversation existed for this owner and was deleted
        """
        conversation = self.get_for_owner(id, user_id)
        if not conversation:
            return False

        self.session.query(Message).filter(Message.conversation_id == id).delete(
            synchronize_session=False
        )
        self.session.query(File).filter(File.conversation_id == id).update(
            {File.conversation_id: None}, synchronize_session=False
        )
        # Drop any loaded children so the ORM doesn't try to cascade them again
        self.session.expire(conversation)
        self.session.delete(conversation)
        self.session.flush()
        self.session.expire_all()
        return True
