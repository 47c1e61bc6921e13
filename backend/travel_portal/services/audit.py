"""Audit log helper: append-only writes to audit_logs table.

Workflow transitions are recorded in the per-module approval-step tables; this
log covers everything else (logins, edits, deletes, document uploads).
"""
import json
import logging
import uuid
from typing import Any

from travel_portal.models.audit import AuditLog

logger = logging.getLogger(__name__)


def log(
    db,
    action: str,
    entity_type: str,
    entity_id: uuid.UUID | str | None = None,
    actor_id: uuid.UUID | str | None = None,
    actor_email: str | None = None,
    before: Any | None = None,
    after: Any | None = None,
    notes: str | None = None,
    ip_address: str | None = None,
) -> AuditLog:
    """Stage a single audit log entry on the session.

    Only `db.add` is called, so the helper works with both the async API
    session and the sync worker session; the caller flushes or commits as
    part of its own transaction.

    Args:
        action: Short verb, e.g. 'user_login', 'trf.updated', 'visa.document_uploaded'.
        entity_type: Module or table name, e.g. 'trf', 'user'.
        entity_id: Request id (TSR-…) or UUID of the affected record.
        actor_email: Denormalised email (preserved if user is later deleted).
        before: Dict snapshot of state before the action (JSON-serialisable).
        after: Dict snapshot of state after the action.
    """
    entry = AuditLog(
        actor_id=uuid.UUID(str(actor_id)) if actor_id else None,
        actor_email=actor_email,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        before_state=json.dumps(before, default=str) if before is not None else None,
        after_state=json.dumps(after, default=str) if after is not None else None,
        ip_address=ip_address,
        notes=notes,
    )
    db.add(entry)
    logger.debug("Audit: %s %s/%s", action, entity_type, entity_id)
    return entry
