"""Declarative approval workflows for every request module.

Each module (trf, claims, visa, transport, accommodation) is described once as
data: the ordered approval stages, the admin processing stages that follow
approval, which statuses may be cancelled or deleted, and the legacy status and
action names still found in older rows. The engine and the history builder
read these tables; no route handler hardcodes a status chain.
"""
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from travel_portal.core.config import settings

# ─── Shared statuses ───

DRAFT = "Draft"
APPROVED = "Approved"
REJECTED = "Rejected"
CANCELLED = "Cancelled"

PENDING_DEPARTMENT_FOCAL = "Pending Department Focal"
PENDING_LINE_MANAGER = "Pending Line Manager"
PENDING_HOD = "Pending HOD"

# ─── Roles ───

REQUESTOR = "Requestor"
DEPARTMENT_FOCAL = "Department Focal"
LINE_MANAGER = "Line Manager"
HOD = "HOD"

# ─── Actions ───

APPROVE = "approve"
REJECT = "reject"
CANCEL = "cancel"
PROCESS = "process"
COMPLETE = "complete"
ACTIONS = (APPROVE, REJECT, CANCEL, PROCESS, COMPLETE)

# ─── Approval-step row statuses ───

STEP_SUBMITTED = "Submitted"
STEP_APPROVED = "Approved"
STEP_REJECTED = "Rejected"
STEP_CANCELLED = "Cancelled"
STEP_PROCESSING = "Processing"
STEP_COMPLETED = "Completed"

Context = Mapping[str, Any]


@dataclass(frozen=True)
class ApprovalStage:
    """A status in which the request waits for one approver role."""

    status: str
    role: str
    # Returns False when the stage does not apply to a given request (e.g. HOD for cheap domestic trips).
    applies: Callable[[Context], bool] | None = None

    def applies_to(self, context: Context | None) -> bool:
        if self.applies is None or context is None:
            return True
        return self.applies(context)


@dataclass(frozen=True)
class ProcessingStage:
    """An admin action taken after the approval chain finishes."""

    action: str
    from_statuses: frozenset[str]
    to_status: str | Callable[[Context], str]
    step_status: str
    requires_details: bool = False

    def target(self, context: Context | None) -> str:
        if callable(self.to_status):
            return self.to_status(context or {})
        return self.to_status


@dataclass(frozen=True)
class WorkflowDefinition:
    module: str
    label: str
    approval_stages: tuple[ApprovalStage, ...]
    processing_role: str
    processing_stages: tuple[ProcessingStage, ...]
    processing_statuses: frozenset[str]
    final_statuses: frozenset[str]
    deletable_statuses: frozenset[str]
    reject_requires_comments: bool = False
    status_aliases: Mapping[str, str] = field(default_factory=dict)
    action_aliases: Mapping[str, str] = field(default_factory=dict)

    # ─── Status sets ───

    @property
    def initial_status(self) -> str:
        return self.approval_stages[0].status

    @property
    def pending_statuses(self) -> tuple[str, ...]:
        return tuple(stage.status for stage in self.approval_stages)

    @property
    def cancellable_statuses(self) -> frozenset[str]:
        return frozenset({DRAFT, *self.pending_statuses})

    @property
    def editable_statuses(self) -> frozenset[str]:
        return frozenset({DRAFT, self.initial_status, REJECTED})

    @property
    def statuses(self) -> frozenset[str]:
        """Every canonical status a row of this module may hold."""
        return frozenset({
            DRAFT,
            *self.pending_statuses,
            APPROVED,
            REJECTED,
            CANCELLED,
            *self.processing_statuses,
            *self.final_statuses,
        })

    @property
    def post_approval_statuses(self) -> frozenset[str]:
        return frozenset({APPROVED, *self.processing_statuses, *self.final_statuses})

    # ─── Lookups ───

    def normalize_status(self, status: str) -> str:
        return self.status_aliases.get(status, status)

    def normalize_action(self, action: str) -> str:
        return self.action_aliases.get(action, action)

    def stage_for(self, status: str) -> ApprovalStage | None:
        status = self.normalize_status(status)
        for stage in self.approval_stages:
            if stage.status == status:
                return stage
        return None

    def next_approval_status(self, status: str, context: Context | None = None) -> str:
        """Status after approving at `status`, skipping stages that do not apply."""
        status = self.normalize_status(status)
        remaining = False
        for stage in self.approval_stages:
            if remaining and stage.applies_to(context):
                return stage.status
            if stage.status == status:
                remaining = True
        return APPROVED

    def statuses_pending_for_role(self, role: str) -> set[str]:
        """Canonical and legacy statuses that wait on `role`."""
        own = {stage.status for stage in self.approval_stages if stage.role == role}
        legacy = {alias for alias, canonical in self.status_aliases.items() if canonical in own}
        return own | legacy

    def allowed_actions(self, status: str) -> list[str]:
        """Actions a caller could attempt next; used for UI hints."""
        status = self.normalize_status(status)
        actions: list[str] = []
        if self.stage_for(status) is not None:
            actions += [APPROVE, REJECT]
        if status in self.cancellable_statuses:
            actions.append(CANCEL)
        for stage in self.processing_stages:
            if status in stage.from_statuses and stage.action not in actions:
                actions.append(stage.action)
        return actions


# ─── Module predicates ───

VISA_TRAVEL_TYPES = frozenset({"Overseas", "Home Leave Passage"})


def trf_requires_hod(context: Context) -> bool:
    """HOD signs off overseas and home-leave trips, and anything above the cost threshold."""
    if context.get("travel_type") in VISA_TRAVEL_TYPES:
        return True
    cost = context.get("estimated_cost")
    if cost in (None, ""):
        return False
    try:
        return Decimal(str(cost)) > Decimal(str(settings.TRF_HOD_COST_THRESHOLD))
    except InvalidOperation:
        return False


def trf_completed_status(context: Context) -> str:
    if context.get("travel_type") in VISA_TRAVEL_TYPES:
        return "Awaiting Visa"
    return "TRF Processed"


def _standard_chain(hod_applies: Callable[[Context], bool] | None = None) -> tuple[ApprovalStage, ...]:
    return (
        ApprovalStage(PENDING_DEPARTMENT_FOCAL, DEPARTMENT_FOCAL),
        ApprovalStage(PENDING_LINE_MANAGER, LINE_MANAGER),
        ApprovalStage(PENDING_HOD, HOD, applies=hod_applies),
    )


def _admin_processing(in_progress: str, done: str) -> tuple[ProcessingStage, ...]:
    return (
        ProcessingStage(PROCESS, frozenset({APPROVED}), in_progress, STEP_PROCESSING),
        ProcessingStage(COMPLETE, frozenset({APPROVED, in_progress}), done, STEP_COMPLETED, requires_details=True),
    )


# ─── Definitions ───

TRF = WorkflowDefinition(
    module="trf",
    label="Travel request",
    approval_stages=_standard_chain(hod_applies=trf_requires_hod),
    processing_role="Ticketing Admin",
    processing_stages=(
        ProcessingStage(PROCESS, frozenset({APPROVED}), "Processing Flights", STEP_PROCESSING),
        ProcessingStage(
            COMPLETE,
            frozenset({APPROVED, "Processing Flights", "Processing Accommodation"}),
            trf_completed_status,
            STEP_COMPLETED,
            requires_details=True,
        ),
    ),
    processing_statuses=frozenset({"Processing Flights", "Processing Accommodation"}),
    final_statuses=frozenset({"Awaiting Visa", "TRF Processed"}),
    deletable_statuses=frozenset({DRAFT, PENDING_DEPARTMENT_FOCAL, REJECTED}),
    reject_requires_comments=True,
    status_aliases={"TSR Processed": "TRF Processed"},
)

CLAIMS = WorkflowDefinition(
    module="claims",
    label="Expense claim",
    approval_stages=_standard_chain(),
    processing_role="Claims Admin",
    processing_stages=_admin_processing("Processing with Claims Admin", "Processed"),
    processing_statuses=frozenset({"Processing with Claims Admin"}),
    final_statuses=frozenset({"Processed"}),
    deletable_statuses=frozenset({DRAFT, PENDING_DEPARTMENT_FOCAL, REJECTED, CANCELLED}),
    status_aliases={
        "Pending Verification": PENDING_DEPARTMENT_FOCAL,
        "Pending HOD Approval": PENDING_HOD,
        "Pending Finance Approval": "Processing with Claims Admin",
    },
    action_aliases={"verify": APPROVE, "approve_hod": APPROVE},
)

VISA = WorkflowDefinition(
    module="visa",
    label="Visa application",
    approval_stages=_standard_chain(),
    processing_role="Visa Admin",
    processing_stages=_admin_processing("Processing with Visa Admin", "Processed"),
    processing_statuses=frozenset({"Processing with Visa Admin"}),
    final_statuses=frozenset({"Processed"}),
    deletable_statuses=frozenset({DRAFT, PENDING_DEPARTMENT_FOCAL, REJECTED, CANCELLED}),
    reject_requires_comments=True,
    status_aliases={
        "Pending Line Manager/HOD": PENDING_LINE_MANAGER,
        "Pending Visa Clerk": "Processing with Visa Admin",
        "Processing with Embassy": "Processing with Visa Admin",
        "Visa Issued": "Processed",
    },
)

TRANSPORT = WorkflowDefinition(
    module="transport",
    label="Transport request",
    approval_stages=_standard_chain(),
    processing_role="Transport Admin",
    processing_stages=_admin_processing("Processing with Transport Admin", "Completed"),
    processing_statuses=frozenset({"Processing with Transport Admin"}),
    final_statuses=frozenset({"Completed"}),
    deletable_statuses=frozenset({DRAFT, PENDING_DEPARTMENT_FOCAL, REJECTED, CANCELLED}),
    status_aliases={"Processing": "Processing with Transport Admin"},
)

ACCOMMODATION = WorkflowDefinition(
    module="accommodation",
    label="Accommodation request",
    approval_stages=_standard_chain(),
    processing_role="Accommodation Admin",
    processing_stages=_admin_processing("Processing with Accommodation Admin", "Completed"),
    processing_statuses=frozenset({"Processing with Accommodation Admin"}),
    final_statuses=frozenset({"Completed"}),
    deletable_statuses=frozenset({DRAFT, PENDING_DEPARTMENT_FOCAL, REJECTED, CANCELLED}),
    status_aliases={"Processing": "Processing with Accommodation Admin"},
)

WORKFLOWS: dict[str, WorkflowDefinition] = {
    wf.module: wf for wf in (TRF, CLAIMS, VISA, TRANSPORT, ACCOMMODATION)
}


def get_workflow(module: str) -> WorkflowDefinition:
    try:
        return WORKFLOWS[module]
    except KeyError:
        raise KeyError(f"Unknown workflow module '{module}'.") from None
