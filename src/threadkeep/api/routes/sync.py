"""
Extension sync API routes.

Endpoint the browser extension calls to push captured conversations,
messages and files:
- POST /extension/sync - Submit a sync batch (also served at POST /sync)
"""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from threadkeep.api.auth import OwnerIdentity, get_current_owner
from threadkeep.api.schemas import SyncCounts, SyncResponse
from threadkeep.db.connection import get_db
from threadkeep.exceptions import InvalidSyncPayloadError
from threadkeep.services.sync_service import SyncService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sync"])


@router.post(
    "/extension/sync",
    response_model=SyncResponse,
    summary="Submit a sync batch",
)
@router.post("/sync", response_model=SyncResponse, include_in_schema=False)
async def sync_batch(
    request: Request,
    owner: OwnerIdentity = Depends(get_current_owner),
    db: Session = Depends(get_db),
) -> SyncResponse:
    """
    Upsert a batch of conversations (with nested messages) and files.

    Every record is keyed by its client-supplied identifier, so resending a
    batch is safe. Items that fail are skipped; the response only counts
    records that were actually stored.
    """
    start_time = time.time()

    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request body must be JSON",
        )

    try:
        result = SyncService(db).sync_batch(owner.id, payload)
    except InvalidSyncPayloadError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )
    except Exception as e:
        logger.error(f"Extension sync failed: {e}", exc_info=True)
        raise

    logger.debug(
        f"Sync request for owner={owner.id} took "
        f"{int((time.time() - start_time) * 1000)}ms"
    )

    return SyncResponse(success=True, synced=SyncCounts(**result.to_dict()))
