"""Request lifecycle service shared by every module.

All functions take an AsyncSession and a ModuleConfig-resolvable module key.
Workflow rules live in travel_portal.workflow; this module loads rows, checks
who may act, persists the resolved transition together with its approval-step
row, and returns what the route layer needs to respond and notify.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from travel_portal.services import audit as audit_svc
from travel_portal.services import deduplication, uploads
from travel_portal.services.modules import ModuleConfig, get_module
from travel_portal.services.request_ids import generate_request_id
from travel_portal.workflow.definitions import (
    APPROVE,
    CANCEL,
    CANCELLED,
    COMPLETE,
    DRAFT,
    PROCESS,
    REJECT,
    REJECTED,
    REQUESTOR,
    STEP_SUBMITTED,
)
from travel_portal.workflow.engine import Transition, resolve_transition
from travel_portal.workflow.history import HistoryEntry, build_workflow_history

logger = logging.getLogger(__name__)


# ─── Errors ───

class RequestNotFound(Exception):
    def __init__(self, config: ModuleConfig, request_id: str):
        self.request_id = request_id
        super().__init__(f"{config.label} '{request_id}' not found.")


class RequestNotEditable(Exception):
    """The request's status does not allow the edit or delete (HTTP 400)."""


class InvalidChanges(Exception):
    """An edit leaves the request in a state its create schema would refuse (HTTP 400)."""


class PermissionDenied(Exception):
    """The user may not perform this operation on the request (HTTP 403)."""


class DuplicateSubmission(Exception):
    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(
            f"An identical submission was received moments ago. Try again in {retry_after} seconds."
        )


@dataclass
class RequestDetail:
    request: Any
    steps: list[Any]
    history: list[HistoryEntry]
    available_actions: list[str]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _can_view_all(config: ModuleConfig, user) -> bool:
    return user.is_system_admin or config.view_all_permission in user.permissions


def _is_owner(row, user) -> bool:
    return row.requestor_id is not None and row.requestor_id == user.id


def _step(config: ModuleConfig, row, role: str, actor, status: str, comments: str | None = None):
    return config.step_model(
        request_id=row.id,
        role=role,
        actor_name=actor.name,
        actor_id=actor.id,
        status=status,
        comments=comments,
    )


def _snapshot(row, fields) -> dict[str, Any]:
    return {name: getattr(row, name, None) for name in fields}


# ─── Load ───

async def get_request(db: AsyncSession, module: str, request_id: str, user=None):
    """Load a request row; raises RequestNotFound, or PermissionDenied for other users' rows."""
    config = get_module(module)
    row = (
        await db.execute(select(config.model).where(config.model.id == request_id))
    ).scalar_one_or_none()
    if row is None:
        raise RequestNotFound(config, request_id)
    if user is not None and not _is_owner(row, user) and not _can_view_all(config, user):
        if not (config.approve_permission in user.permissions or config.process_permission in user.permissions):
            raise PermissionDenied(f"You do not have access to {config.label.lower()} '{request_id}'.")
    return row


async def list_steps(db: AsyncSession, module: str, request_id: str) -> list[Any]:
    config = get_module(module)
    return list(
        (
            await db.execute(
                select(config.step_model)
                .where(config.step_model.request_id == request_id)
                .order_by(config.step_model.created_at.asc())
            )
        ).scalars().all()
    )


async def get_request_detail(db: AsyncSession, module: str, request_id: str, user) -> RequestDetail:
    config = get_module(module)
    row = await get_request(db, module, request_id, user)
    steps = await list_steps(db, module, request_id)
    history = build_workflow_history(
        config.workflow,
        row.status,
        steps,
        requestor_name=row.requestor_name,
        context=config.workflow_context(row),
    )
    return RequestDetail(
        request=row,
        steps=steps,
        history=history,
        available_actions=config.workflow.allowed_actions(row.status),
    )


async def list_requests(
    db: AsyncSession,
    module: str,
    user,
    status: str | None = None,
    page: int = 1,
    page_size: int = 20,
    mine_only: bool = False,
) -> tuple[list[Any], int]:
    """Page through a module's requests; users without view-all see only their own."""
    config = get_module(module)
    model = config.model
    filters = []
    if mine_only or not _can_view_all(config, user):
        filters.append(model.requestor_id == user.id)
    if status:
        wanted = config.workflow.normalize_status(status)
        aliases = {alias for alias, canonical in config.workflow.status_aliases.items() if canonical == wanted}
        filters.append(model.status.in_({wanted, *aliases}))

    total = (
        await db.execute(select(func.count()).select_from(model).where(*filters))
    ).scalar_one()
    rows = (
        await db.execute(
            select(model)
            .where(*filters)
            .order_by(model.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
    ).scalars().all()
    return list(rows), total


# ─── Create ───

async def create_request(
    db: AsyncSession,
    module: str,
    payload: dict[str, Any],
    user,
    draft: bool = False,
):
    """Insert a new request plus its Requestor step.

    `payload` is the validated body as plain JSON-compatible data. Requestor
    identity falls back to the logged-in user when the body does not carry it.
    """
    config = get_module(module)
    fingerprint = None
    if config.deduplicate and not draft:
        fingerprint = deduplication.generate_fingerprint(user.id, f"create_{module}", payload)
        is_duplicate, retry_after = deduplication.check_and_mark(fingerprint)
        if is_duplicate:
            raise DuplicateSubmission(retry_after)

    try:
        row = await _insert_request(db, config, dict(payload), user, draft)
    except Exception:
        if fingerprint is not None:
            deduplication.release(fingerprint)
        raise
    return row


async def _insert_request(db: AsyncSession, config: ModuleConfig, payload: dict[str, Any], user, draft: bool):
    items = payload.pop("items", None)
    identity = {
        "requestor_name": payload.pop("requestor_name", None) or user.name,
        "staff_id": payload.pop("staff_id", None) or user.staff_id,
        "department": payload.pop("department", None) or user.department,
        "email": payload.pop("email", None) or user.email,
    }
    now = _now()
    row = config.model(
        id=generate_request_id(config.id_prefix, config.id_context(payload)),
        requestor_id=user.id,
        status=DRAFT if draft else config.workflow.initial_status,
        submitted_at=None if draft else now,
        **identity,
        **payload,
    )
    if config.item_model is not None and items:
        row.items = [config.item_model(**item) for item in items]
    db.add(row)
    await db.flush()
    if not draft:
        db.add(_step(config, row, REQUESTOR, user, STEP_SUBMITTED))
    await db.commit()
    logger.info("%s %s created by %s (%s)", config.label, row.id, user.email, row.status)
    return row


# ─── Update / delete ───

async def update_request(
    db: AsyncSession,
    module: str,
    request_id: str,
    changes: dict[str, Any],
    user,
    submit: bool = True,
):
    """Edit a request still owned by its requestor.

    Allowed while Draft, at the first approval stage, or Rejected. A Draft or
    Rejected request is (re)submitted to the first stage when `submit` is set.
    """
    config = get_module(module)
    row = await get_request(db, module, request_id)
    if not _is_owner(row, user) and not user.is_system_admin:
        raise PermissionDenied(f"Only the requestor can edit {config.label.lower()} '{request_id}'.")
    status = config.workflow.normalize_status(row.status)
    if status not in config.workflow.editable_statuses:
        raise RequestNotEditable(f"{config.label} with status '{row.status}' can no longer be edited.")

    if config.check_changes is not None:
        problem = config.check_changes(row, changes)
        if problem:
            raise InvalidChanges(problem)

    before = _snapshot(row, changes)
    items = changes.pop("items", None)
    for name, value in changes.items():
        setattr(row, name, value)
    if config.item_model is not None and items is not None:
        row.items = [config.item_model(**item) for item in items]

    resubmitted = submit and status in (DRAFT, REJECTED)
    if resubmitted:
        row.status = config.workflow.initial_status
        row.submitted_at = _now()
        db.add(_step(config, row, REQUESTOR, user, STEP_SUBMITTED))
    row.updated_at = _now()

    audit_svc.log(
        db,
        action=f"{module}.updated",
        entity_type=module,
        entity_id=row.id,
        actor_id=user.id,
        actor_email=user.email,
        before=before,
        after=_snapshot(row, changes),
        notes="Resubmitted" if resubmitted else None,
    )
    await db.commit()
    return row, resubmitted


async def delete_request(db: AsyncSession, module: str, request_id: str, user) -> None:
    config = get_module(module)
    row = await get_request(db, module, request_id)
    if not _is_owner(row, user) and not user.is_system_admin:
        raise PermissionDenied(f"Only the requestor can delete {config.label.lower()} '{request_id}'.")
    if config.workflow.normalize_status(row.status) not in config.workflow.deletable_statuses:
        raise RequestNotEditable(
            f"{config.label} with status '{row.status}' cannot be deleted."
        )
    audit_svc.log(
        db,
        action=f"{module}.deleted",
        entity_type=module,
        entity_id=row.id,
        actor_id=user.id,
        actor_email=user.email,
        before={"status": row.status, "requestor_name": row.requestor_name},
    )
    stale_files = []
    if module == "visa":
        stale_files = [doc.file_path for doc in await uploads.list_visa_documents(db, row.id)]
    await db.delete(row)
    await db.commit()
    for path in stale_files:
        uploads.remove_file(path)
    logger.info("%s %s deleted by %s", config.label, request_id, user.email)


def ensure_documents_open(module: str, row) -> None:
    """Supporting documents stay editable until the request is cancelled or final."""
    config = get_module(module)
    status = config.workflow.normalize_status(row.status)
    if status == CANCELLED or status in config.workflow.final_statuses:
        raise RequestNotEditable(
            f"Documents of {config.label.lower()} '{row.id}' can no longer be changed (status '{row.status}')."
        )


# ─── Workflow actions ───

def _authorize(config: ModuleConfig, row, user, action: str) -> str | None:
    """Raise PermissionDenied unless `user` may take `action`; return the cancelling role."""
    canonical = config.workflow.normalize_action(action)
    if user.is_system_admin:
        return user.role_name if canonical == CANCEL and not _is_owner(row, user) else None

    if canonical in (APPROVE, REJECT):
        stage = config.workflow.stage_for(row.status)
        if config.approve_permission not in user.permissions:
            raise PermissionDenied(f"You are not allowed to approve {config.label.lower()}s.")
        if stage is not None and stage.role != user.role_name:
            raise PermissionDenied(f"This request is waiting for the {stage.role}.")
        return None
    if canonical in (PROCESS, COMPLETE):
        if config.process_permission not in user.permissions:
            raise PermissionDenied(f"You are not allowed to process {config.label.lower()}s.")
        return None
    if canonical == CANCEL:
        if _is_owner(row, user):
            return REQUESTOR
        stage = config.workflow.stage_for(row.status)
        if config.approve_permission in user.permissions and stage is not None and stage.role == user.role_name:
            return user.role_name
        raise PermissionDenied(f"Only the requestor can cancel {config.label.lower()} '{row.id}'.")
    return None


async def apply_action(
    db: AsyncSession,
    module: str,
    request_id: str,
    action: str,
    user,
    comments: str | None = None,
    details: dict[str, Any] | None = None,
) -> tuple[Any, Transition]:
    """Apply one workflow action: status update and exactly one step row, one commit."""
    config = get_module(module)
    row = await get_request(db, module, request_id)
    actor_role = _authorize(config, row, user, action)
    transition = resolve_transition(
        config.workflow,
        row.status,
        action,
        context=config.workflow_context(row),
        comments=comments,
        details=details,
        actor_role=actor_role,
    )

    now = _now()
    row.status = transition.next_status
    row.updated_at = now
    if transition.action == PROCESS:
        row.processing_started_at = now
    if transition.action == COMPLETE:
        row.processing_completed_at = now
    if details:
        row.processing_details = {**(row.processing_details or {}), **details}
    if transition.action == REJECT and hasattr(row, "rejection_reason"):
        row.rejection_reason = comments

    db.add(_step(config, row, transition.step_role, user, transition.step_status, comments))
    await db.commit()
    logger.info(
        "%s %s: %s -> %s by %s",
        config.label, row.id, transition.previous_status, transition.next_status, user.email,
    )
    return row, transition
