"""
Extension sync ingestion service for ThreadKeep.

Reconciles a batch of extension-captured conversations, messages and files
into storage. Every record is an idempotent upsert keyed by its identifier,
so a batch can be resent safely after a partial failure or a crash.

Items are independent: each write runs in its own savepoint and is committed
as soon as it succeeds. A failing item is logged and skipped; it never
aborts the batch or rolls back items that were already stored.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from threadkeep.db.repositories import (
    ConversationRepository,
    FileRepository,
    MessageRepository,
)
from threadkeep.exceptions import InvalidSyncPayloadError
from threadkeep.models.payloads import (
    ConversationPayload,
    FilePayload,
    MessagePayload,
)
from threadkeep.utils.code_blocks import extract_code_blocks, has_code

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc)


@dataclass
class SyncResult:
    """Number of records actually persisted by one batch."""

    conversations: int = 0
    messages: int = 0
    files: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "conversations": self.conversations,
            "messages": self.messages,
            "files": self.files,
        }


class SyncService:
    """
    Batch upsert of extension sync payloads for a single owner.

    The owner identity comes from the authentication layer and is trusted as
    is; every record written or matched is scoped to it.
    """

    def __init__(self, session: Session):
        self.session = session
        self.conversation_repo = ConversationRepository(session)
        self.message_repo = MessageRepository(session)
        self.file_repo = FileRepository(session)

    def sync_batch(self, owner_id: str, payload: Any) -> SyncResult:
        """
        Process one sync request body.

        Args:
            owner_id: Authenticated owner identity
            payload: Decoded JSON body with ``conversations`` and optional ``files``

        Returns:
            SyncResult with counts of successfully stored records

        Raises:
            InvalidSyncPayloadError: If ``conversations`` is missing or not a list
        """
        conversations, files = self._unpack(payload)
        result = SyncResult()

        for raw_conversation in conversations:
            conversation_id = self._write(
                "conversation",
                lambda: self._upsert_conversation(owner_id, raw_conversation),
            )
            if conversation_id is None:
                # Messages of a conversation that didn't store are skipped entirely
                continue
            result.conversations += 1

            raw_messages = raw_conversation.get("messages")
            if not isinstance(raw_messages, list):
                continue

            for index, raw_message in enumerate(raw_messages):
                message_id = self._write(
                    "message",
                    lambda: self._upsert_message(
                        owner_id, conversation_id, index, raw_message
                    ),
                )
                if message_id is not None:
                    result.messages += 1

        for raw_file in files:
            file_id = self._write(
                "file", lambda: self._upsert_file(owner_id, raw_file)
            )
            if file_id is not None:
                result.files += 1

        logger.info(
            f"Sync completed for owner={owner_id}: "
            f"conversations={result.conversations}/{len(conversations)}, "
            f"messages={result.messages}, files={result.files}/{len(files)}"
        )
        return result

    # ===== Internals =====

    @staticmethod
    def _unpack(payload: Any) -> tuple[list[Any], list[Any]]:
        """Validate the top-level shape and return (conversations, files)."""
        if not isinstance(payload, dict):
            raise InvalidSyncPayloadError()

        conversations = payload.get("conversations")
        if not isinstance(conversations, list):
            raise InvalidSyncPayloadError()

        files = payload.get("files")
        if not isinstance(files, list):
            files = []

        return conversations, files

    def _write(self, kind: str, operation: Callable[[], T]) -> Optional[T]:
        """
        Run one item write in a savepoint and commit it on success.

        Any failure (validation, ownership conflict, database error) rolls back
        only this item's savepoint, is logged, and yields None. A failed commit
        rolls back the session, which only holds this item at that point.
        """
        try:
            with self.session.begin_nested():
                value = operation()
        except Exception as e:
            logger.warning(f"Sync {kind} skipped: {type(e).__name__}: {e}")
            return None

        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.warning(f"Sync {kind} not committed: {type(e).__name__}: {e}")
            return None

        return value

    def _upsert_conversation(self, owner_id: str, raw: Any) -> uuid.UUID:
        payload = ConversationPayload.model_validate(raw)
        now = _utc_now()

        conversation, created = self.conversation_repo.upsert_for_owner(
            payload.id or uuid.uuid4(),
            owner_id,
            platform=payload.platform,
            platform_url=payload.url,
            title=payload.title,
            message_count=len(payload.messages),
            code_block_count=len(payload.code_blocks),
            first_message_at=payload.first_message_at or now,
            last_message_at=payload.last_message_at or now,
            extra_data={
                "project": payload.project,
                "tags": payload.tags,
                "syncedAt": now.isoformat(),
            },
            updated_at=now,
        )
        logger.debug(
            f"{'Created' if created else 'Updated'} conversation {conversation.id}"
        )
        return conversation.id

    def _upsert_message(
        self,
        owner_id: str,
        conversation_id: uuid.UUID,
        index: int,
        raw: Any,
    ) -> uuid.UUID:
        payload = MessagePayload.model_validate(raw)

        message, _ = self.message_repo.upsert_for_owner(
            payload.id or uuid.uuid4(),
            owner_id,
            conversation_id=conversation_id,
            sender=payload.sender,
            content=payload.content,
            has_code=has_code(payload.content),
            code_blocks=extract_code_blocks(payload.content),
            # Offset within this submission only; a partial resend overwrites it
            message_index=index,
            updated_at=_utc_now(),
        )
        return message.id

    def _upsert_file(self, owner_id: str, raw: Any) -> uuid.UUID:
        payload = FilePayload.model_validate(raw)

        file, _ = self.file_repo.upsert_for_owner(
            payload.id or uuid.uuid4(),
            owner_id,
            conversation_id=self._resolve_conversation_ref(
                owner_id, payload.conversation_id
            ),
            filename=payload.filename,
            file_type=payload.file_type,
            file_size=payload.file_size,
            source_url=payload.source_url,
            platform=payload.platform,
            extra_data=payload.metadata,
            updated_at=_utc_now(),
        )
        return file.id

    def _resolve_conversation_ref(
        self, owner_id: str, reference: Optional[str]
    ) -> Optional[uuid.UUID]:
        """
        Map a submitted conversation reference to a stored conversation ID.

        Returns None (orphaned file) unless the reference names a conversation
        owned by the same owner.
        """
        if not reference:
            return None
        try:
            conversation_id = uuid.UUID(str(reference))
        except ValueError:
            logger.debug(f"Dropping malformed conversation reference {reference!r}")
            return None

        conversation = self.conversation_repo.get_for_owner(conversation_id, owner_id)
        if conversation is None:
            logger.debug(f"Dropping unknown conversation reference {conversation_id}")
            return None
        return conversation.id


