"""Registry tying each request module to its tables, workflow and permissions."""
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from travel_portal.models.accommodation import AccommodationApprovalStep, AccommodationRequest
from travel_portal.models.expense_claim import ClaimApprovalStep, ExpenseClaim, ExpenseClaimItem
from travel_portal.models.transport import TransportApprovalStep, TransportRequest
from travel_portal.models.travel_request import TravelRequest, TrfApprovalStep
from travel_portal.models.visa import VisaApplication, VisaApprovalStep
from travel_portal.workflow.definitions import (
    ACCOMMODATION,
    CLAIMS,
    TRANSPORT,
    TRF,
    VISA,
    WorkflowDefinition,
)

VIEW_REPORTS = "view_reports"


@dataclass(frozen=True)
class ModuleConfig:
    key: str
    model: type
    step_model: type
    workflow: WorkflowDefinition
    id_prefix: str
    id_context: Callable[[dict[str, Any]], str]
    # Row attributes the workflow predicates read (e.g. the TRF HOD rule).
    context_fields: tuple[str, ...] = ()
    item_model: type | None = None
    deduplicate: bool = False
    # Returns an error message when an edit, merged with the row, is invalid.
    check_changes: Callable[[Any, dict[str, Any]], str | None] | None = None

    @property
    def label(self) -> str:
        return self.workflow.label

    @property
    def approve_permission(self) -> str:
        return f"approve_{self.key}"

    @property
    def process_permission(self) -> str:
        return f"process_{self.key}"

    @property
    def view_all_permission(self) -> str:
        return f"view_all_{self.key}"

    def workflow_context(self, row: Any) -> dict[str, Any]:
        return {name: getattr(row, name, None) for name in self.context_fields}


# ─── Id contexts ───

def _first_destination(payload: dict[str, Any]) -> str:
    itinerary = payload.get("itinerary") or []
    if itinerary and itinerary[0].get("destination"):
        return str(itinerary[0]["destination"])[:3]
    return "TRF"


def _first_transport_type(payload: dict[str, Any]) -> str:
    details = payload.get("transport_details") or []
    if details and details[0].get("transport_type"):
        return str(details[0]["transport_type"]).replace(" ", "")
    return "GEN"


# ─── Edit checks ───

def _external_party_named(row: Any, changes: dict[str, Any]) -> str | None:
    travel_type = changes.get("travel_type", row.travel_type)
    name = changes.get("external_party_name", row.external_party_name)
    if travel_type == "External Parties" and not name:
        return "external_party_name is required for External Parties travel."
    return None


MODULES: dict[str, ModuleConfig] = {
    "trf": ModuleConfig(
        key="trf",
        model=TravelRequest,
        step_model=TrfApprovalStep,
        workflow=TRF,
        id_prefix="TSR",
        id_context=_first_destination,
        context_fields=("travel_type", "estimated_cost"),
        deduplicate=True,
        check_changes=_external_party_named,
    ),
    "claims": ModuleConfig(
        key="claims",
        model=ExpenseClaim,
        step_model=ClaimApprovalStep,
        workflow=CLAIMS,
        id_prefix="CLM",
        id_context=lambda payload: (payload.get("purpose_of_claim") or "").split(" ")[0],
        item_model=ExpenseClaimItem,
        deduplicate=True,
    ),
    "visa": ModuleConfig(
        key="visa",
        model=VisaApplication,
        step_model=VisaApprovalStep,
        workflow=VISA,
        id_prefix="VIS",
        id_context=lambda payload: payload.get("destination") or "",
    ),
    "transport": ModuleConfig(
        key="transport",
        model=TransportRequest,
        step_model=TransportApprovalStep,
        workflow=TRANSPORT,
        id_prefix="TRN",
        id_context=_first_transport_type,
    ),
    "accommodation": ModuleConfig(
        key="accommodation",
        model=AccommodationRequest,
        step_model=AccommodationApprovalStep,
        workflow=ACCOMMODATION,
        id_prefix="ACCOM",
        id_context=lambda payload: payload.get("location") or "",
    ),
}


def get_module(key: str) -> ModuleConfig:
    try:
        return MODULES[key]
    except KeyError:
        raise KeyError(f"Unknown request module '{key}'.") from None
