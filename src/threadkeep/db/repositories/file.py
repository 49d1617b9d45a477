"""
File repository.
"""

import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from threadkeep.db.repositories.base import BaseRepository
from threadkeep.models.db import File


class FileRepository(BaseRepository[File]):
    """Repository for File model."""

    def __init__(self, session: Session):
        super().__init__(File, session)

    def list_for_owner(
        self,
        user_id: str,
        conversation_id: Optional[uuid.UUID] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[File]:
        """
        Get an owner's files, newest first.

        Args:
            user_id: Owner identity
            conversation_id: Optional conversation filter
            limit: Maximum number of results
            offset: Number of results to skip

        Returns:
            List of files
        """
        query = self.session.query(File).filter(File.user_id == user_id)
        if conversation_id:
            query = query.filter(File.conversation_id == conversation_id)
        query = query.order_by(File.created_at.desc()).offset(offset)
        if limit:
            query = query.limit(limit)
        return query.all()

    def count_for_owner(
        self, user_id: str, conversation_id: Optional[uuid.UUID] = None
    ) -> int:
        """Count an owner's files, optionally for one conversation."""
        query = self.session.query(File).filter(File.user_id == user_id)
        if conversation_id:
            query = query.filter(File.conversation_id == conversation_id)
        return query.count()

    def delete_for_owner(self, id: uuid.UUID, user_id: str) -> bool:
        """Delete a file if it belongs to the owner."""
        file = self.get_for_owner(id, user_id)
        if not file:
            return False
        self.session.delete(file)
        self.session.flush()
        return True
