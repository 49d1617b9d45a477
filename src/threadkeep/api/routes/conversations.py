"""
Dashboard conversation API routes.

Owner-scoped endpoints over the records the extension syncs:
- GET /extension/conversations - Paginated list with dashboard stats
- GET /extension/conversations/{id} - Conversation with messages and files
- DELETE /extension/conversations/{id} - Delete a conversation
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from threadkeep.api.auth import OwnerIdentity, get_current_owner
from threadkeep.api.schemas import (
    ConversationDetailResponse,
    ConversationListResponse,
    ConversationResponse,
    DashboardStats,
    DeleteResponse,
    FileResponse,
    MessageResponse,
)
from threadkeep.db.connection import get_db
from threadkeep.db.repositories import (
    ConversationRepository,
    FileRepository,
    MessageRepository,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/extension/conversations", tags=["conversations"])


def _build_stats(db: Session, owner_id: str) -> DashboardStats:
    """Aggregate owner-wide totals for the dashboard header."""
    conversation_repo = ConversationRepository(db)
    return DashboardStats(
        totalConversations=conversation_repo.count_for_owner(owner_id),
        totalMessages=MessageRepository(db).count_for_owner(owner_id),
        totalFiles=FileRepository(db).count_for_owner(owner_id),
        totalCodeBlocks=conversation_repo.total_code_blocks(owner_id),
        platforms=conversation_repo.platform_counts(owner_id),
    )


@router.get("", response_model=ConversationListResponse)
async def list_conversations(
    platform: Optional[str] = Query(None, description="Filter by platform ('all' for no filter)"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    owner: OwnerIdentity = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> ConversationListResponse:
    """
    List the owner's conversations, most recently updated first.

    ``total`` honors the platform filter; ``stats`` always covers everything
    the owner has stored.
    """
    platform_filter = platform if platform and platform != "all" else None
    repo = ConversationRepository(db)

    conversations = repo.list_for_owner(
        owner.id,
        platform=platform_filter,
        limit=limit,
        offset=(page - 1) * limit,
    )

    return ConversationListResponse(
        conversations=[ConversationResponse.model_validate(c) for c in conversations],
        total=repo.count_for_owner(owner.id, platform=platform_filter),
        page=page,
        limit=limit,
        stats=_build_stats(db, owner.id),
    )


@router.get("/{id}", response_model=ConversationDetailResponse)
async def get_conversation(
    id: UUID,
    owner: OwnerIdentity = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> ConversationDetailResponse:
    """Get a conversation with its messages (in submission order) and files."""
    conversation = ConversationRepository(db).get_for_owner(id, owner.id)
    if not conversation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Conversation not found",
        )

    messages = MessageRepository(db).get_by_conversation(id, owner.id)
    files = FileRepository(db).list_for_owner(owner.id, conversation_id=id)

    return ConversationDetailResponse(
        conversation=ConversationResponse.model_validate(conversation),
        messages=[MessageResponse.model_validate(m) for m in messages],
        files=[FileResponse.model_validate(f) for f in files],
    )


@router.delete("/{id}", response_model=DeleteResponse)
async def delete_conversation(
    id: UUID,
    owner: OwnerIdentity = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> DeleteResponse:
    """Delete a conversation and its messages. Its files are kept, detached."""
    deleted = ConversationRepository(db).delete_for_owner(id, owner.id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Conversation not found",
        )

    db.commit()
    logger.info(f"Deleted conversation {id} for owner={owner.id}")
    return DeleteResponse(success=True)
