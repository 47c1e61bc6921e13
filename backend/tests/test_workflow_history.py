"""Tests for approval-timeline reconstruction shown on request detail pages."""
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from travel_portal.workflow.definitions import CLAIMS, TRF, VISA
from travel_portal.workflow.history import build_workflow_history

T0 = datetime(2025, 7, 2, 9, 0, tzinfo=timezone.utc)


def _step(role: str, status: str, minutes: int, name: str = "Someone", comments: str | None = None):
    return SimpleNamespace(
        role=role,
        actor_name=name,
        status=status,
        created_at=T0 + timedelta(minutes=minutes),
        comments=comments,
    )


def _statuses(history):
    return [(entry.role, entry.status) for entry in history]


# ─── Pending ──────────────────────────────────────────────────────────────────

def test_new_request_shows_current_focal_and_pending_rest():
    history = build_workflow_history(
        CLAIMS,
        "Pending Department Focal",
        [_step("Requestor", "Submitted", 0, name="Alice")],
        requestor_name="Alice",
    )
    assert _statuses(history) == [
        ("Requestor", "Submitted"),
        ("Department Focal", "Current"),
        ("Line Manager", "Pending"),
        ("HOD", "Pending"),
    ]
    assert history[0].name == "Alice"
    assert history[0].recorded is True
    assert all(entry.name == "TBD" for entry in history[1:])


def test_recorded_steps_are_used_verbatim():
    steps = [
        _step("Requestor", "Submitted", 0),
        _step("Department Focal", "Approved", 5, name="Dana", comments="Fine"),
    ]
    history = build_workflow_history(CLAIMS, "Pending Line Manager", steps, requestor_name="Alice")
    focal = history[1]
    assert (focal.name, focal.status, focal.comments) == ("Dana", "Approved", "Fine")
    assert focal.date == T0 + timedelta(minutes=5)
    assert history[2].status == "Current"


# ─── Terminal states ─────────────────────────────────────────────────────────

def test_approved_marks_every_non_requestor_step_approved():
    history = build_workflow_history(CLAIMS, "Approved", [], requestor_name="Alice")
    assert [entry.status for entry in history[1:]] == ["Approved", "Approved", "Approved"]
    assert history[0].status == "Submitted"


def test_rejected_leaves_remaining_steps_not_started():
    steps = [
        _step("Requestor", "Submitted", 0),
        _step("Department Focal", "Approved", 5),
        _step("Line Manager", "Rejected", 10, comments="No budget"),
    ]
    history = build_workflow_history(VISA, "Rejected", steps, requestor_name="Alice")
    assert _statuses(history) == [
        ("Requestor", "Submitted"),
        ("Department Focal", "Approved"),
        ("Line Manager", "Rejected"),
        ("HOD", "Not Started"),
    ]


def test_cancelled_request_has_no_current_step():
    history = build_workflow_history(CLAIMS, "Cancelled", [], requestor_name="Alice")
    assert "Current" not in [entry.status for entry in history]


# ─── Processing ───────────────────────────────────────────────────────────────

def test_processing_role_appears_once_processing_starts():
    approved = build_workflow_history(CLAIMS, "Approved", [], requestor_name="Alice")
    assert "Claims Admin" not in [entry.role for entry in approved]

    processing = build_workflow_history(CLAIMS, "Processing with Claims Admin", [], requestor_name="Alice")
    assert processing[-1].role == "Claims Admin"
    assert processing[-1].status == "Current"
    assert [entry.status for entry in processing[1:-1]] == ["Approved", "Approved", "Approved"]

    done = build_workflow_history(CLAIMS, "Processed", [], requestor_name="Alice")
    assert done[-1].status == "Completed"


def test_legacy_status_is_normalised_before_reconstruction():
    history = build_workflow_history(CLAIMS, "Pending Finance Approval", [], requestor_name="Alice")
    assert history[-1].role == "Claims Admin"
    assert history[-1].status == "Current"


# ─── Skipped stages and resubmission ─────────────────────────────────────────

def test_skipped_hod_stage_is_omitted_when_context_given():
    context = {"travel_type": "Domestic", "estimated_cost": 200}
    history = build_workflow_history(TRF, "Pending Line Manager", [], requestor_name="Alice", context=context)
    assert [entry.role for entry in history] == ["Requestor", "Department Focal", "Line Manager"]


def test_overseas_trip_keeps_hod_stage():
    context = {"travel_type": "Overseas", "estimated_cost": 200}
    history = build_workflow_history(TRF, "Pending HOD", [], requestor_name="Alice", context=context)
    assert history[-1].role == "HOD"
    assert history[-1].status == "Current"


def test_resubmission_starts_a_new_cycle():
    steps = [
        _step("Requestor", "Submitted", 0),
        _step("Department Focal", "Rejected", 5),
        _step("Requestor", "Submitted", 30),
    ]
    history = build_workflow_history(CLAIMS, "Pending Department Focal", steps, requestor_name="Alice")
    assert history[1].status == "Current"
    assert history[0].date == T0 + timedelta(minutes=30)


def test_draft_requestor_step_is_pending():
    history = build_workflow_history(CLAIMS, "Draft", [], requestor_name="Alice")
    assert history[0].status == "Pending"
    assert history[0].name == "Alice"
