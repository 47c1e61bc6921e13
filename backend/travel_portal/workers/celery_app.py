"""Celery application for post-commit side effects (notifications, email)."""
from celery import Celery

from travel_portal.core.config import settings

celery_app = Celery(
    "travel_portal_worker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[
        "travel_portal.workers.notification_tasks",
    ],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    broker_connection_retry_on_startup=True,
    # Notification fan-out is fire-and-forget; nobody reads the results.
    task_ignore_result=True,
    task_default_queue="notifications",
    task_routes={
        "travel_portal.workers.notification_tasks.*": {"queue": "notifications"},
    },
)
