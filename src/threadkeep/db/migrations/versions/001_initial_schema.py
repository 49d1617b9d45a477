"""Initial schema: extension conversations, messages and files

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "extension_conversations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(255), nullable=False, index=True),
        sa.Column(
            "platform",
            sa.String(50),
            nullable=False,
            server_default="unknown",
            index=True,
        ),
        sa.Column("platform_url", sa.Text(), nullable=True),
        sa.Column("title", sa.Text(), nullable=False, server_default="Untitled"),
        sa.Column("message_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "code_block_count", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("first_message_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_message_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "metadata", postgresql.JSONB(), nullable=False, server_default="{}"
        ),
        *_timestamps(),
    )
    op.create_index(
        "idx_extension_conversations_user_updated",
        "extension_conversations",
        ["user_id", "updated_at"],
    )

    op.create_table(
        "extension_messages",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "conversation_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("extension_conversations.id", ondelete="CASCADE"),
            nullable=True,
            index=True,
        ),
        sa.Column("user_id", sa.String(255), nullable=False, index=True),
        sa.Column(
            "sender", sa.String(50), nullable=False, server_default="assistant"
        ),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("has_code", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column(
            "code_blocks", postgresql.JSONB(), nullable=False, server_default="[]"
        ),
        sa.Column("message_index", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index(
        "idx_extension_messages_conversation_index",
        "extension_messages",
        ["conversation_id", "message_index"],
    )

    op.create_table(
        "extension_files",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(255), nullable=False, index=True),
        sa.Column(
            "conversation_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("extension_conversations.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        sa.Column("filename", sa.Text(), nullable=False, server_default="unknown"),
        sa.Column("file_type", sa.String(255), nullable=True),
        sa.Column("file_size", sa.BigInteger(), nullable=True),
        sa.Column("source_url", sa.Text(), nullable=True),
        sa.Column("platform", sa.String(50), nullable=True),
        sa.Column(
            "metadata", postgresql.JSONB(), nullable=False, server_default="{}"
        ),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("extension_files")
    op.drop_index(
        "idx_extension_messages_conversation_index", table_name="extension_messages"
    )
    op.drop_table("extension_messages")
    op.drop_index(
        "idx_extension_conversations_user_updated",
        table_name="extension_conversations",
    )
    op.drop_table("extension_conversations")
