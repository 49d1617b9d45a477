"""
API schemas for ThreadKeep.

Pydantic models for response validation. Sync request bodies are normalized
per item by ``threadkeep.models.payloads`` instead, so one malformed item
cannot reject a whole batch.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

# ===== Sync Schemas =====


class SyncCounts(BaseModel):
    """Records persisted by one sync batch."""

    conversations: int = 0
    messages: int = 0
    files: int = 0


class SyncResponse(BaseModel):
    """Response for POST /extension/sync."""

    success: bool = True
    synced: SyncCounts


# ===== Conversation Schemas =====


class ConversationResponse(BaseModel):
    """Response schema for Conversation."""

    id: UUID
    platform: str
    platform_url: Optional[str] = None
    title: str
    message_count: int
    code_block_count: int
    first_message_at: datetime
    last_message_at: datetime
    metadata: dict[str, Any] = Field(
        default_factory=dict, validation_alias="extra_data"
    )
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    """Response schema for Message."""

    id: UUID
    conversation_id: Optional[UUID] = None
    sender: str
    content: str
    has_code: bool
    code_blocks: list[str] = Field(default_factory=list)
    message_index: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FileResponse(BaseModel):
    """Response schema for File."""

    id: UUID
    conversation_id: Optional[UUID] = None
    filename: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    source_url: Optional[str] = None
    platform: Optional[str] = None
    metadata: dict[str, Any] = Field(
        default_factory=dict, validation_alias="extra_data"
    )
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DashboardStats(BaseModel):
    """Owner-wide totals shown on the dashboard."""

    totalConversations: int = 0
    totalMessages: int = 0
    totalFiles: int = 0
    totalCodeBlocks: int = 0
    platforms: dict[str, int] = Field(default_factory=dict)


class ConversationListResponse(BaseModel):
    """Paginated conversation list with dashboard stats."""

    conversations: list[ConversationResponse]
    total: int
    page: int
    limit: int
    stats: DashboardStats


class ConversationDetailResponse(BaseModel):
    """A conversation with its messages and files."""

    conversation: ConversationResponse
    messages: list[MessageResponse] = Field(default_factory=list)
    files: list[FileResponse] = Field(default_factory=list)


class FileListResponse(BaseModel):
    """List of an owner's files."""

    files: list[FileResponse]
    total: int


class DeleteResponse(BaseModel):
    """Response for delete endpoints."""

    success: bool = True
