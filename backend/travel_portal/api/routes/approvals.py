"""Approval queue across all request modules."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from travel_portal.core.deps import get_current_user
from travel_portal.db.session import get_session
from travel_portal.schemas.dashboard import ApprovalQueueResponse, QueueItemOut
from travel_portal.services import approvals as approvals_svc
from travel_portal.services.modules import MODULES

router = APIRouter()


@router.get("", response_model=ApprovalQueueResponse, summary="Requests waiting on the current user's role")
async def approval_queue(
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user=Depends(get_current_user),
    module: str | None = Query(default=None, enum=list(MODULES)),
):
    items = await approvals_svc.approval_queue(db, current_user, module=module)
    return ApprovalQueueResponse(
        items=[QueueItemOut.model_validate(item) for item in items],
        total=len(items),
    )
