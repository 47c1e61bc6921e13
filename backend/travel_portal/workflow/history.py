"""Display-only reconstruction of a request's approval timeline.

The step tables only hold what has happened. For the detail view we also want
the stages still ahead, so the expected chain is rebuilt from the workflow
definition and merged with the recorded rows. Nothing here is persisted.
"""
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from travel_portal.workflow.definitions import (
    APPROVED,
    CANCELLED,
    DRAFT,
    REJECTED,
    REQUESTOR,
    STEP_SUBMITTED,
    Context,
    WorkflowDefinition,
)

PLACEHOLDER_NAME = "TBD"

NOT_STARTED = "Not Started"
CURRENT = "Current"
PENDING = "Pending"
COMPLETED = "Completed"


@dataclass
class HistoryEntry:
    role: str
    name: str
    status: str
    date: datetime | None = None
    comments: str | None = None
    recorded: bool = False


def _latest_by_role(completed_steps: Iterable[Any]) -> dict[str, Any]:
    latest: dict[str, Any] = {}
    for step in sorted(completed_steps, key=lambda s: getattr(s, "created_at", None) or datetime.min):
        # A fresh submission (e.g. an edited rejected request) starts a new cycle.
        if step.role == REQUESTOR and step.status == STEP_SUBMITTED:
            latest = {}
        latest[step.role] = step
    return latest


def _from_row(step: Any) -> HistoryEntry:
    return HistoryEntry(
        role=step.role,
        name=step.actor_name or PLACEHOLDER_NAME,
        status=step.status,
        date=getattr(step, "created_at", None),
        comments=getattr(step, "comments", None),
        recorded=True,
    )


def build_workflow_history(
    definition: WorkflowDefinition,
    current_status: str,
    completed_steps: Iterable[Any],
    requestor_name: str,
    context: Context | None = None,
) -> list[HistoryEntry]:
    status = definition.normalize_status(current_status)
    recorded = _latest_by_role(completed_steps)
    history: list[HistoryEntry] = []

    if REQUESTOR in recorded:
        history.append(_from_row(recorded[REQUESTOR]))
    else:
        history.append(HistoryEntry(
            role=REQUESTOR,
            name=requestor_name,
            status=PENDING if status == DRAFT else STEP_SUBMITTED,
        ))

    post_approval = status in definition.post_approval_statuses
    for stage in definition.approval_stages:
        if stage.role in recorded:
            history.append(_from_row(recorded[stage.role]))
            continue
        if not stage.applies_to(context):
            continue
        if status in (REJECTED, CANCELLED):
            placeholder = NOT_STARTED
        elif status == stage.status:
            placeholder = CURRENT
        elif post_approval:
            placeholder = APPROVED
        else:
            placeholder = PENDING
        history.append(HistoryEntry(role=stage.role, name=PLACEHOLDER_NAME, status=placeholder))

    role = definition.processing_role
    if role in recorded:
        history.append(_from_row(recorded[role]))
    elif status in definition.processing_statuses:
        history.append(HistoryEntry(role=role, name=PLACEHOLDER_NAME, status=CURRENT))
    elif status in definition.final_statuses:
        history.append(HistoryEntry(role=role, name=PLACEHOLDER_NAME, status=COMPLETED))

    return history
