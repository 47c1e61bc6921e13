from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from travel_portal.core.deps import get_current_user
from travel_portal.db.session import get_session
from travel_portal.schemas.dashboard import DashboardSummary
from travel_portal.services import approvals as approvals_svc

router = APIRouter()


@router.get("/summary", response_model=DashboardSummary, summary="My request counts and pending approvals")
async def dashboard_summary(
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user=Depends(get_current_user),
):
    return DashboardSummary(**await approvals_svc.dashboard_summary(db, current_user))
