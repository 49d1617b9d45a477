"""
SQLAlchemy database models for ThreadKeep.

These models represent the database schema for conversations, messages and
files captured by the browser extension.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class Conversation(Base):
    """A captured AI chat conversation."""

    __tablename__ = "extension_conversations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # Owner identity: registered user id or anonymous device id
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    platform: Mapped[str] = mapped_column(
        String(50), nullable=False, server_default="unknown", index=True
    )  # 'chatgpt', 'claude', 'gemini', ...
    platform_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    title: Mapped[str] = mapped_column(
        Text, nullable=False, server_default="Untitled"
    )

    # Counters taken from the submitted payload, not recomputed from storage
    message_count: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default="0"
    )
    code_block_count: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default="0"
    )

    first_message_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    last_message_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    extra_data: Mapped[dict] = mapped_column(
        "metadata", JSONB, nullable=False, server_default="{}"
    )  # project, tags, syncedAt

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_extension_conversations_user_updated", "user_id", "updated_at"),
    )

    # Relationships
    messages: Mapped[list["Message"]] = relationship(
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Message.message_index",
    )
    files: Mapped[list["File"]] = relationship(
        back_populates="conversation", passive_deletes=True
    )

    def __repr__(self) -> str:
        return (
            f"<Conversation(id={self.id}, "
            f"platform={self.platform!r}, "
            f"title={self.title!r})>"
        )


class Message(Base):
    """A single message within a captured conversation."""

    __tablename__ = "extension_messages"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    conversation_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("extension_conversations.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    sender: Mapped[str] = mapped_column(
        String(50), nullable=False, server_default="assistant"
    )  # 'user' or 'assistant'
    content: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    has_code: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default="false"
    )
    code_blocks: Mapped[list] = mapped_column(
        JSONB, nullable=False, server_default="[]"
    )
    # Offset within the most recently submitted batch, not a stable ordering key
    message_index: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default="0"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index(
            "idx_extension_messages_conversation_index",
            "conversation_id",
            "message_index",
        ),
    )

    # Relationships
    conversation: Mapped[Optional["Conversation"]] = relationship(
        back_populates="messages"
    )

    def __repr__(self) -> str:
        return (
            f"<Message(id={self.id}, "
            f"sender={self.sender!r}, "
            f"index={self.message_index})>"
        )


class File(Base):
    """A file captured from an AI chat platform."""

    __tablename__ = "extension_files"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    conversation_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("extension_conversations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    filename: Mapped[str] = mapped_column(
        Text, nullable=False, server_default="unknown"
    )
    file_type: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    file_size: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    source_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    platform: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    extra_data: Mapped[dict] = mapped_column(
        "metadata", JSONB, nullable=False, server_default="{}"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # Relationships
    conversation: Mapped[Optional["Conversation"]] = relationship(
        back_populates="files"
    )

    def __repr__(self) -> str:
        return f"<File(id={self.id}, filename={self.filename!r})>"
