"""
Normalized sync payload models.

The browser extension has shipped several payload shapes over time, so the
same attribute can arrive under more than one key (``filename`` or ``name``,
``size`` or ``fileSize``, ...). These models collapse every variant into one
canonical record per entity before anything touches the database.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


class SyncPayload(BaseModel):
    """
    Base class for one loosely-shaped JSON object from a sync batch.

    ``source_keys`` maps each field to the submitted keys it may be read from,
    in priority order. The first non-blank value wins; a blank or missing
    value falls back to the field default.
    """

    # Numeric titles, names and tags are kept in their string form
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    source_keys: ClassVar[dict[str, tuple[str, ...]]] = {}

    @model_validator(mode="before")
    @classmethod
    def _collapse_aliases(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        normalized = {}
        for field_name in cls.model_fields:
            for key in cls.source_keys.get(field_name, (field_name,)):
                value = data.get(key)
                if not _is_blank(value):
                    normalized[field_name] = value
                    break
        return normalized

    @field_validator("*", mode="after")
    @classmethod
    def _assume_utc(cls, value: Any) -> Any:
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class MessagePayload(SyncPayload):
    """One message nested under a submitted conversation."""

    id: Optional[uuid.UUID] = None
    sender: str = "assistant"
    content: str = ""


class ConversationPayload(SyncPayload):
    """One submitted conversation. Messages are normalized separately."""

    source_keys: ClassVar[dict[str, tuple[str, ...]]] = {
        "url": ("url", "platformUrl"),
        "code_blocks": ("codeBlocks",),
        "first_message_at": ("firstMessageAt", "timestamp"),
        "last_message_at": ("lastMessageAt",),
    }

    id: Optional[uuid.UUID] = None
    platform: str = "unknown"
    url: Optional[str] = None
    title: str = "Untitled"
    messages: list[Any] = []
    code_blocks: list[Any] = []
    first_message_at: Optional[datetime] = None
    last_message_at: Optional[datetime] = None
    project: Optional[str] = None
    tags: list[str] = []

    @field_validator("messages", "code_blocks", mode="before")
    @classmethod
    def _list_or_empty(cls, value: Any) -> Any:
        # A non-array collection counts as empty rather than failing the record
        return value if isinstance(value, list) else []

    @field_validator("tags", mode="before")
    @classmethod
    def _scalar_tags_only(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [
            tag
            for tag in value
            if isinstance(tag, (str, int, float)) and not isinstance(tag, bool)
        ]


class FilePayload(SyncPayload):
    """One standalone file from the batch's ``files`` list."""

    source_keys: ClassVar[dict[str, tuple[str, ...]]] = {
        "conversation_id": ("conversationId",),
        "filename": ("filename", "name"),
        "file_type": ("type", "fileType"),
        "file_size": ("size", "fileSize"),
        "source_url": ("url", "sourceUrl"),
    }

    id: Optional[uuid.UUID] = None
    # Kept raw: an unusable reference is dropped, not treated as an error
    conversation_id: Optional[str] = None
    filename: str = "unknown"
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    source_url: Optional[str] = None
    platform: Optional[str] = None
    metadata: dict[str, Any] = {}
