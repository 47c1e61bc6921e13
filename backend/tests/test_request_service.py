"""Tests for the request lifecycle service.

Uses mocked AsyncSession doubles following the existing test patterns; the
ORM objects are real (transient) model instances.
"""
import uuid
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from travel_portal.models.expense_claim import ClaimApprovalStep, ExpenseClaim, ExpenseClaimItem
from travel_portal.models.travel_request import TravelRequest, TrfApprovalStep
from travel_portal.models.visa import VisaApplication, VisaApprovalStep
from travel_portal.services import deduplication
from travel_portal.services import requests as request_svc
from travel_portal.workflow.engine import InvalidTransition, MissingDetails


# ─── Helpers ──────────────────────────────────────────────────────────────────

REQUESTOR_ID = uuid.UUID("0b8e2a4e-5d7c-4c1e-9a43-2f6f0e1d9a10")


class FakeUser:
    def __init__(self, role_name="Requestor", permissions=(), user_id=None, name="Test User"):
        self.id = user_id or uuid.uuid4()
        self.name = name
        self.email = f"{name.lower().replace(' ', '.')}@example.com"
        self.staff_id = "S00001"
        self.department = "Operations"
        self.role_name = role_name
        self.permissions = set(permissions)
        self.is_system_admin = role_name == "System Administrator"
        self.is_active = True


def _requestor():
    return FakeUser(user_id=REQUESTOR_ID, name="Alice Tan")


def _claim(status="Pending Line Manager") -> ExpenseClaim:
    return ExpenseClaim(
        id="CLM-20250702-1423-QWSDF-P4Z5",
        requestor_id=REQUESTOR_ID,
        requestor_name="Alice Tan",
        email="alice.tan@example.com",
        status=status,
        claim_for_month_of=date(2025, 6, 1),
        purpose_of_claim="Site visit",
        total_amount=Decimal("120.00"),
    )


def _mock_db(row=None) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = row
    result.scalars.return_value.all.return_value = []

    db = MagicMock()
    db.execute = AsyncMock(return_value=result)
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.delete = AsyncMock()
    return db


def _added(db, model):
    return [c.args[0] for c in db.add.call_args_list if isinstance(c.args[0], model)]


# ─── apply_action ─────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_approve_updates_status_and_appends_exactly_one_step():
    row = _claim("Pending Line Manager")
    db = _mock_db(row)
    manager = FakeUser(role_name="Line Manager", permissions={"approve_claims"}, name="Lee Manager")

    updated, transition = await request_svc.apply_action(db, "claims", row.id, "approve", manager, comments="OK")

    assert updated.status == "Pending HOD"
    assert transition.previous_status == "Pending Line Manager"
    assert db.add.call_count == 1
    step = db.add.call_args.args[0]
    assert isinstance(step, ClaimApprovalStep)
    assert (step.role, step.status, step.actor_name, step.comments) == ("Line Manager", "Approved", "Lee Manager", "OK")
    assert step.request_id == row.id
    db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_missing_request_raises_not_found():
    db = _mock_db(None)
    with pytest.raises(request_svc.RequestNotFound):
        await request_svc.apply_action(db, "claims", "CLM-NOPE", "approve", FakeUser(permissions={"approve_claims"}))
    db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_invalid_transition_writes_nothing():
    row = _claim("Approved")
    db = _mock_db(row)
    hod = FakeUser(role_name="HOD", permissions={"approve_claims"})

    with pytest.raises(InvalidTransition):
        await request_svc.apply_action(db, "claims", row.id, "approve", hod)

    assert row.status == "Approved"
    db.add.assert_not_called()
    db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_approver_must_hold_the_stage_role():
    row = _claim("Pending HOD")
    db = _mock_db(row)
    manager = FakeUser(role_name="Line Manager", permissions={"approve_claims"})

    with pytest.raises(request_svc.PermissionDenied):
        await request_svc.apply_action(db, "claims", row.id, "approve", manager)
    db.add.assert_not_called()


@pytest.mark.asyncio
async def test_approve_requires_module_permission():
    row = _claim("Pending Line Manager")
    db = _mock_db(row)
    manager = FakeUser(role_name="Line Manager", permissions={"approve_visa"})

    with pytest.raises(request_svc.PermissionDenied):
        await request_svc.apply_action(db, "claims", row.id, "approve", manager)


@pytest.mark.asyncio
async def test_system_admin_can_approve_any_stage():
    row = _claim("Pending HOD")
    db = _mock_db(row)
    admin = FakeUser(role_name="System Administrator")

    updated, _ = await request_svc.apply_action(db, "claims", row.id, "approve", admin)
    assert updated.status == "Approved"
    assert db.add.call_args.args[0].role == "HOD"


@pytest.mark.asyncio
async def test_requestor_cancel_is_recorded_as_requestor():
    row = _claim("Pending Department Focal")
    db = _mock_db(row)

    updated, _ = await request_svc.apply_action(db, "claims", row.id, "cancel", _requestor())
    assert updated.status == "Cancelled"
    step = db.add.call_args.args[0]
    assert (step.role, step.status) == ("Requestor", "Cancelled")


@pytest.mark.asyncio
async def test_other_user_cannot_cancel():
    row = _claim("Pending Department Focal")
    db = _mock_db(row)
    with pytest.raises(request_svc.PermissionDenied):
        await request_svc.apply_action(db, "claims", row.id, "cancel", FakeUser(name="Bob"))


@pytest.mark.asyncio
async def test_approver_can_cancel_only_at_their_own_stage():
    row = _claim("Pending HOD")
    db = _mock_db(row)
    focal = FakeUser(role_name="Department Focal", permissions={"approve_claims"})

    with pytest.raises(request_svc.PermissionDenied):
        await request_svc.apply_action(db, "claims", row.id, "cancel", focal)
    assert row.status == "Pending HOD"
    db.add.assert_not_called()
    db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_stage_approver_cancel_is_recorded_under_their_role():
    row = _claim("Pending HOD")
    db = _mock_db(row)
    hod = FakeUser(role_name="HOD", permissions={"approve_claims"})

    updated, _ = await request_svc.apply_action(db, "claims", row.id, "cancel", hod)
    assert updated.status == "Cancelled"
    step = db.add.call_args.args[0]
    assert (step.role, step.status) == ("HOD", "Cancelled")


@pytest.mark.asyncio
async def test_complete_processing_merges_details():
    row = _claim("Processing with Claims Admin")
    row.processing_details = {"batch": "B1"}
    db = _mock_db(row)
    admin = FakeUser(role_name="Claims Admin", permissions={"process_claims"})

    updated, transition = await request_svc.apply_action(
        db, "claims", row.id, "complete", admin, details={"payment_reference": "PAY-42"}
    )

    assert updated.status == "Processed"
    assert updated.processing_details == {"batch": "B1", "payment_reference": "PAY-42"}
    assert updated.processing_completed_at is not None
    assert transition.step_role == "Claims Admin"
    assert db.add.call_args.args[0].status == "Completed"


@pytest.mark.asyncio
async def test_complete_without_details_is_rejected():
    row = _claim("Processing with Claims Admin")
    db = _mock_db(row)
    admin = FakeUser(role_name="Claims Admin", permissions={"process_claims"})
    with pytest.raises(MissingDetails):
        await request_svc.apply_action(db, "claims", row.id, "complete", admin)


@pytest.mark.asyncio
async def test_visa_rejection_stores_reason():
    row = VisaApplication(
        id="VIS-20250702-1423-USA-5X9R",
        requestor_id=REQUESTOR_ID,
        requestor_name="Alice Tan",
        status="Pending HOD",
        destination="USA",
        visa_type="Business",
        travel_purpose="Conference",
    )
    db = _mock_db(row)
    hod = FakeUser(role_name="HOD", permissions={"approve_visa"})

    await request_svc.apply_action(db, "visa", row.id, "reject", hod, comments="Passport expires too soon")

    assert row.status == "Rejected"
    assert row.rejection_reason == "Passport expires too soon"
    assert isinstance(db.add.call_args.args[0], VisaApprovalStep)


@pytest.mark.asyncio
async def test_trf_line_manager_approval_skips_hod_for_cheap_domestic_trip():
    row = TravelRequest(
        id="TSR-20250702-1423-KUL-PCYX",
        requestor_id=REQUESTOR_ID,
        requestor_name="Alice Tan",
        status="Pending Line Manager",
        travel_type="Domestic",
        purpose="Client meeting",
        estimated_cost=Decimal("450.00"),
        itinerary=[],
    )
    db = _mock_db(row)
    manager = FakeUser(role_name="Line Manager", permissions={"approve_trf"})

    updated, _ = await request_svc.apply_action(db, "trf", row.id, "approve", manager)

    assert updated.status == "Approved"
    assert isinstance(db.add.call_args.args[0], TrfApprovalStep)


# ─── create_request ───────────────────────────────────────────────────────────

CLAIM_PAYLOAD = {
    "claim_for_month_of": date(2025, 6, 1),
    "purpose_of_claim": "Medical checkup",
    "total_amount": Decimal("80.00"),
    "is_medical_claim": True,
    "items": [{"item_date": date(2025, 6, 3), "details": "Clinic", "other_expenses": Decimal("80.00")}],
}


@pytest.fixture
def clean_dedup():
    deduplication.clear()
    yield
    deduplication.clear()


@pytest.mark.asyncio
async def test_create_claim_inserts_row_items_and_submitted_step(clean_dedup):
    db = _mock_db()
    user = _requestor()

    row = await request_svc.create_request(db, "claims", dict(CLAIM_PAYLOAD), user)

    assert row.id.startswith("CLM-")
    assert row.status == "Pending Department Focal"
    assert row.requestor_name == "Alice Tan"
    assert row.submitted_at is not None
    assert len(row.items) == 1 and isinstance(row.items[0], ExpenseClaimItem)
    steps = _added(db, ClaimApprovalStep)
    assert len(steps) == 1
    assert (steps[0].role, steps[0].status) == ("Requestor", "Submitted")
    db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_identical_claim_within_window_is_refused(clean_dedup):
    user = _requestor()
    await request_svc.create_request(_mock_db(), "claims", dict(CLAIM_PAYLOAD), user)

    with pytest.raises(request_svc.DuplicateSubmission) as exc_info:
        await request_svc.create_request(_mock_db(), "claims", dict(CLAIM_PAYLOAD), user)
    assert exc_info.value.retry_after > 0


@pytest.mark.asyncio
async def test_failed_submission_releases_fingerprint(clean_dedup):
    user = _requestor()
    failing = _mock_db()
    failing.commit = AsyncMock(side_effect=RuntimeError("db down"))

    with pytest.raises(RuntimeError):
        await request_svc.create_request(failing, "claims", dict(CLAIM_PAYLOAD), user)

    row = await request_svc.create_request(_mock_db(), "claims", dict(CLAIM_PAYLOAD), user)
    assert row.status == "Pending Department Focal"


@pytest.mark.asyncio
async def test_draft_has_no_submitted_step(clean_dedup):
    db = _mock_db()
    row = await request_svc.create_request(db, "claims", dict(CLAIM_PAYLOAD), _requestor(), draft=True)
    assert row.status == "Draft"
    assert row.submitted_at is None
    assert _added(db, ClaimApprovalStep) == []


# ─── update / delete ─────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_editing_rejected_request_resubmits_it():
    row = _claim("Rejected")
    db = _mock_db(row)

    updated, resubmitted = await request_svc.update_request(
        db, "claims", row.id, {"purpose_of_claim": "Site visit (corrected)"}, _requestor()
    )

    assert resubmitted is True
    assert updated.status == "Pending Department Focal"
    assert updated.purpose_of_claim == "Site visit (corrected)"
    assert [(s.role, s.status) for s in _added(db, ClaimApprovalStep)] == [("Requestor", "Submitted")]


@pytest.mark.asyncio
async def test_request_under_review_cannot_be_edited():
    row = _claim("Pending HOD")
    db = _mock_db(row)
    with pytest.raises(request_svc.RequestNotEditable):
        await request_svc.update_request(db, "claims", row.id, {"purpose_of_claim": "x"}, _requestor())


@pytest.mark.asyncio
async def test_delete_outside_deletable_statuses_raises():
    row = _claim("Pending Line Manager")
    db = _mock_db(row)
    with pytest.raises(request_svc.RequestNotEditable):
        await request_svc.delete_request(db, "claims", row.id, _requestor())
    db.delete.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_rejected_claim():
    row = _claim("Rejected")
    db = _mock_db(row)
    await request_svc.delete_request(db, "claims", row.id, _requestor())
    db.delete.assert_awaited_once_with(row)
    db.commit.assert_awaited_once()


def _trf(status="Rejected", travel_type="Domestic", external_party_name=None) -> TravelRequest:
    return TravelRequest(
        id="TSR-20250702-1423-KUL-PCYX",
        requestor_id=REQUESTOR_ID,
        requestor_name="Alice Tan",
        status=status,
        travel_type=travel_type,
        purpose="Client meeting",
        itinerary=[],
        external_party_name=external_party_name,
    )


@pytest.mark.asyncio
async def test_switching_to_external_parties_requires_a_name():
    row = _trf()
    db = _mock_db(row)

    with pytest.raises(request_svc.InvalidChanges, match="external_party_name"):
        await request_svc.update_request(db, "trf", row.id, {"travel_type": "External Parties"}, _requestor())
    assert row.travel_type == "Domestic"
    db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_clearing_external_party_name_is_refused():
    row = _trf(travel_type="External Parties", external_party_name="Acme Sdn Bhd")
    db = _mock_db(row)

    with pytest.raises(request_svc.InvalidChanges):
        await request_svc.update_request(db, "trf", row.id, {"external_party_name": None}, _requestor())


@pytest.mark.asyncio
async def test_external_parties_edit_with_name_is_accepted():
    row = _trf()
    db = _mock_db(row)

    updated, _ = await request_svc.update_request(
        db, "trf", row.id, {"travel_type": "External Parties", "external_party_name": "Acme Sdn Bhd"}, _requestor()
    )
    assert updated.travel_type == "External Parties"
    db.commit.assert_awaited_once()


def test_documents_open_until_visa_is_closed():
    visa = VisaApplication(id="VIS-1", requestor_name="Alice Tan", status="Pending Line Manager")
    request_svc.ensure_documents_open("visa", visa)

    for status in ("Processed", "Visa Issued", "Cancelled"):
        visa.status = status
        with pytest.raises(request_svc.RequestNotEditable):
            request_svc.ensure_documents_open("visa", visa)
