"""Status-change notifications.

The API side only builds a StatusChangeEvent and hands it to Celery after the
transition has been committed. The worker side (`write_notifications`) turns
the event into in-app Notification rows and emails. A broker outage must never
undo or fail a committed transition, so enqueue errors are logged and dropped.
"""
import logging
import uuid
from typing import Any

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from travel_portal.models.notification import Notification
from travel_portal.models.user import Role, User
from travel_portal.services import email as email_svc
from travel_portal.workflow.definitions import APPROVED
from travel_portal.workflow.engine import Transition

logger = logging.getLogger(__name__)

SUBMITTED = "submitted"
STATUS_CHANGED = "status_changed"


class StatusChangeEvent(BaseModel):
    module: str
    entity_id: str
    event: str = STATUS_CHANGED
    requestor_id: uuid.UUID | None = None
    requestor_name: str
    requestor_email: str | None = None
    previous_status: str | None = None
    next_status: str
    actor_name: str | None = None
    comments: str | None = None


def submitted_event(module: str, row: Any) -> StatusChangeEvent:
    return StatusChangeEvent(
        module=module,
        entity_id=row.id,
        event=SUBMITTED,
        requestor_id=row.requestor_id,
        requestor_name=row.requestor_name,
        requestor_email=row.email,
        next_status=row.status,
        actor_name=row.requestor_name,
    )


def transition_event(module: str, row: Any, transition: Transition, actor_name: str, comments: str | None) -> StatusChangeEvent:
    return StatusChangeEvent(
        module=module,
        entity_id=row.id,
        requestor_id=row.requestor_id,
        requestor_name=row.requestor_name,
        requestor_email=row.email,
        previous_status=transition.previous_status,
        next_status=transition.next_status,
        actor_name=actor_name,
        comments=comments,
    )


def dispatch_status_change(event: StatusChangeEvent) -> None:
    """Enqueue the notification task. Runs as a FastAPI background task."""
    from travel_portal.workers.notification_tasks import send_status_notifications

    try:
        send_status_notifications.delay(event.model_dump(mode="json"))
    except Exception:
        logger.exception(
            "Could not enqueue notification for %s %s (%s)",
            event.module, event.entity_id, event.next_status,
        )


# ─── Worker side ───

def next_roles(event: StatusChangeEvent) -> set[str]:
    """Roles that have to act next on the request."""
    from travel_portal.services.modules import get_module

    workflow = get_module(event.module).workflow
    stage = workflow.stage_for(event.next_status)
    if stage is not None:
        return {stage.role}
    if event.next_status == APPROVED:
        return {workflow.processing_role}
    return set()


def requestor_message(event: StatusChangeEvent, label: str) -> tuple[str, str]:
    if event.event == SUBMITTED:
        return (
            f"{label} {event.entity_id} submitted",
            f"Your {label.lower()} has been submitted and is now '{event.next_status}'.",
        )
    message = f"Your {label.lower()} moved from '{event.previous_status}' to '{event.next_status}'"
    if event.actor_name:
        message += f" by {event.actor_name}"
    if event.comments:
        message += f". Comments: {event.comments}"
    return f"{label} {event.entity_id}: {event.next_status}", message + "."


def write_notifications(db: Session, event: StatusChangeEvent) -> int:
    """Stage Notification rows for the requestor and next approvers; send emails.

    Returns the number of notifications added. The caller commits.
    """
    from travel_portal.services.modules import get_module

    label = get_module(event.module).label
    link = email_svc.request_link(event.module, event.entity_id)
    created = 0

    if event.requestor_id is not None:
        title, message = requestor_message(event, label)
        db.add(Notification(
            user_id=event.requestor_id,
            title=title,
            message=message,
            event_type=f"{event.module}_{event.event}",
            category="status_update",
            entity_type=event.module,
            entity_id=event.entity_id,
        ))
        created += 1
        email_svc.send_status_email(event.requestor_email, title, message, link)

    roles = next_roles(event)
    if not roles:
        return created

    approvers = db.execute(
        select(User)
        .join(Role, User.role_id == Role.id)
        .where(Role.name.in_(roles), User.is_active.is_(True), User.deleted_at.is_(None))
    ).scalars().all()

    title = f"Action required: {label} {event.entity_id}"
    message = f"{label} from {event.requestor_name} is waiting for you ('{event.next_status}')."
    for approver in approvers:
        if approver.id == event.requestor_id:
            continue
        db.add(Notification(
            user_id=approver.id,
            title=title,
            message=message,
            event_type=f"{event.module}_approval_request",
            category="approval_request",
            entity_type=event.module,
            entity_id=event.entity_id,
        ))
        created += 1
        email_svc.send_status_email(approver.email, title, message, link)

    logger.info(
        "Notifications for %s %s (%s): %d created",
        event.module, event.entity_id, event.next_status, created,
    )
    return created
