"""Transition resolution for the declarative workflows.

`resolve_transition` is pure: it looks at a definition, the row's current
status and the requested action, and either returns the resulting Transition
or raises a WorkflowError. Persisting the result is the caller's job
(see services/requests.py).
"""
from dataclasses import dataclass

from travel_portal.workflow.definitions import (
    ACTIONS,
    APPROVE,
    CANCEL,
    CANCELLED,
    REJECT,
    REJECTED,
    REQUESTOR,
    STEP_APPROVED,
    STEP_CANCELLED,
    STEP_REJECTED,
    Context,
    WorkflowDefinition,
)


class WorkflowError(Exception):
    """Base class for rejected workflow actions; mapped to HTTP 400."""


class InvalidTransition(WorkflowError):
    def __init__(self, definition: WorkflowDefinition, status: str, action: str):
        self.module = definition.module
        self.status = status
        self.action = action
        super().__init__(
            f"Cannot {action} {definition.label.lower()} with status '{status}'."
        )


class MissingComments(WorkflowError):
    def __init__(self, definition: WorkflowDefinition):
        super().__init__(f"Comments are required to reject a {definition.label.lower()}.")


class MissingDetails(WorkflowError):
    def __init__(self, definition: WorkflowDefinition):
        super().__init__(
            f"Processing details are required to complete a {definition.label.lower()}."
        )


@dataclass(frozen=True)
class Transition:
    action: str
    previous_status: str
    next_status: str
    step_role: str
    step_status: str


def _has_text(value: str | None) -> bool:
    return bool(value and value.strip())


def resolve_transition(
    definition: WorkflowDefinition,
    current_status: str,
    action: str,
    *,
    context: Context | None = None,
    comments: str | None = None,
    details: dict | None = None,
    actor_role: str | None = None,
) -> Transition:
    """Return the transition for `action` at `current_status` or raise.

    `actor_role` only matters for cancellation, where the step row records who
    cancelled; approval and processing steps take their role from the stage.
    """
    canonical_action = definition.normalize_action(action)
    status = definition.normalize_status(current_status)

    if canonical_action not in ACTIONS:
        raise InvalidTransition(definition, current_status, action)

    if canonical_action in (APPROVE, REJECT):
        stage = definition.stage_for(status)
        if stage is None:
            raise InvalidTransition(definition, current_status, action)
        if canonical_action == APPROVE:
            return Transition(
                action=APPROVE,
                previous_status=current_status,
                next_status=definition.next_approval_status(status, context),
                step_role=stage.role,
                step_status=STEP_APPROVED,
            )
        if definition.reject_requires_comments and not _has_text(comments):
            raise MissingComments(definition)
        return Transition(
            action=REJECT,
            previous_status=current_status,
            next_status=REJECTED,
            step_role=stage.role,
            step_status=STEP_REJECTED,
        )

    if canonical_action == CANCEL:
        if status not in definition.cancellable_statuses:
            raise InvalidTransition(definition, current_status, action)
        return Transition(
            action=CANCEL,
            previous_status=current_status,
            next_status=CANCELLED,
            step_role=actor_role or REQUESTOR,
            step_status=STEP_CANCELLED,
        )

    for stage in definition.processing_stages:
        if stage.action == canonical_action and status in stage.from_statuses:
            if stage.requires_details and not details:
                raise MissingDetails(definition)
            return Transition(
                action=canonical_action,
                previous_status=current_status,
                next_status=stage.target(context),
                step_role=definition.processing_role,
                step_status=stage.step_status,
            )
    raise InvalidTransition(definition, current_status, action)
