"""In-app notifications for the current user."""
import uuid
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from travel_portal.core.deps import get_current_user
from travel_portal.db.session import get_session
from travel_portal.models.notification import Notification
from travel_portal.schemas.notification import NotificationListResponse, NotificationOut

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user=Depends(get_current_user),
    unread_only: bool = Query(default=False),
    limit: int = Query(default=50, ge=1, le=200),
):
    mine = Notification.user_id == current_user.id
    stmt = select(Notification).where(mine)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    rows = (await db.execute(stmt.order_by(Notification.created_at.desc()).limit(limit))).scalars().all()

    total = (await db.execute(select(func.count()).select_from(Notification).where(mine))).scalar_one()
    unread = (
        await db.execute(
            select(func.count()).select_from(Notification).where(mine, Notification.is_read.is_(False))
        )
    ).scalar_one()
    return NotificationListResponse(
        items=[NotificationOut.model_validate(n) for n in rows],
        total=total,
        unread=unread,
    )


@router.post("/{notification_id}/read", response_model=NotificationOut)
async def mark_read(
    notification_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user=Depends(get_current_user),
):
    notification = (
        await db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == current_user.id,
            )
        )
    ).scalar_one_or_none()
    if notification is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found.")
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.now(timezone.utc)
        await db.commit()
    return NotificationOut.model_validate(notification)


@router.post("/read-all")
async def mark_all_read(
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user=Depends(get_current_user),
):
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == current_user.id, Notification.is_read.is_(False))
        .values(is_read=True, read_at=datetime.now(timezone.utc))
    )
    await db.commit()
    return {"updated": result.rowcount}
