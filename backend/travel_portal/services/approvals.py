"""Cross-module approval queue and dashboard counts."""
import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from travel_portal.services.modules import MODULES, ModuleConfig

logger = logging.getLogger(__name__)


@dataclass
class QueueItem:
    module: str
    id: str
    requestor_name: str
    department: str | None
    status: str
    submitted_at: datetime | None
    created_at: datetime


def pending_statuses_for(config: ModuleConfig, user) -> set[str]:
    """Statuses (canonical and legacy) this user is expected to act on."""
    workflow = config.workflow
    if user.is_system_admin:
        pending = set(workflow.pending_statuses)
        return pending | {alias for alias, canonical in workflow.status_aliases.items() if canonical in pending}
    if config.approve_permission not in user.permissions or not user.role_name:
        return set()
    return workflow.statuses_pending_for_role(user.role_name)


async def approval_queue(db: AsyncSession, user, module: str | None = None) -> list[QueueItem]:
    items: list[QueueItem] = []
    for key, config in MODULES.items():
        if module and key != module:
            continue
        statuses = pending_statuses_for(config, user)
        if not statuses:
            continue
        rows = (
            await db.execute(
                select(config.model)
                .where(config.model.status.in_(statuses))
                .order_by(config.model.submitted_at.asc())
            )
        ).scalars().all()
        items += [
            QueueItem(
                module=key,
                id=row.id,
                requestor_name=row.requestor_name,
                department=row.department,
                status=config.workflow.normalize_status(row.status),
                submitted_at=row.submitted_at,
                created_at=row.created_at,
            )
            for row in rows
        ]
    items.sort(key=lambda item: item.submitted_at or item.created_at)
    return items


async def dashboard_summary(db: AsyncSession, user) -> dict:
    """Per-module status counts of the user's own requests plus their queue size."""
    modules: dict[str, dict[str, int]] = {}
    pending_total = 0
    for key, config in MODULES.items():
        rows = (
            await db.execute(
                select(config.model.status, func.count())
                .where(config.model.requestor_id == user.id)
                .group_by(config.model.status)
            )
        ).all()
        counts: Counter[str] = Counter()
        for status, count in rows:
            counts[config.workflow.normalize_status(status)] += count
        modules[key] = dict(counts)

        statuses = pending_statuses_for(config, user)
        if statuses:
            pending_total += (
                await db.execute(
                    select(func.count()).select_from(config.model).where(config.model.status.in_(statuses))
                )
            ).scalar_one()
    return {"modules": modules, "pending_approvals": pending_total}
