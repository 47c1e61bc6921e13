"""Celery task that fans a status change out to in-app notifications and email."""
import logging

from travel_portal.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="travel_portal.workers.notification_tasks.send_status_notifications")
def send_status_notifications(payload: dict) -> dict:
    """Write Notification rows for one StatusChangeEvent payload."""
    from travel_portal.db.session import get_sync_session
    from travel_portal.services.notifications import StatusChangeEvent, write_notifications

    event = StatusChangeEvent.model_validate(payload)
    db = get_sync_session()
    try:
        created = write_notifications(db, event)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("send_status_notifications failed for %s %s", event.module, event.entity_id)
        raise
    finally:
        db.close()
    return {"module": event.module, "entity_id": event.entity_id, "created": created}
