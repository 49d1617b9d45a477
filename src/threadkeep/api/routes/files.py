"""
Dashboard file API routes.

- GET /extension/files - List the owner's files
- DELETE /extension/files/{id} - Delete a file
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from threadkeep.api.auth import OwnerIdentity, get_current_owner
from threadkeep.api.schemas import DeleteResponse, FileListResponse, FileResponse
from threadkeep.db.connection import get_db
from threadkeep.db.repositories import FileRepository

router = APIRouter(prefix="/extension/files", tags=["files"])


@router.get("", response_model=FileListResponse)
async def list_files(
    conversation_id: Optional[UUID] = Query(None, description="Filter by conversation"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    owner: OwnerIdentity = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> FileListResponse:
    """List the owner's files, newest first."""
    repo = FileRepository(db)
    files = repo.list_for_owner(
        owner.id, conversation_id=conversation_id, limit=limit, offset=offset
    )
    return FileListResponse(
        files=[FileResponse.model_validate(f) for f in files],
        total=repo.count_for_owner(owner.id, conversation_id=conversation_id),
    )


@router.delete("/{id}", response_model=DeleteResponse)
async def delete_file(
    id: UUID,
    owner: OwnerIdentity = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> DeleteResponse:
    """Delete one of the owner's files."""
    if not FileRepository(db).delete_for_owner(id, owner.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found",
        )
    db.commit()
    return DeleteResponse(success=True)
