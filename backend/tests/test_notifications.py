"""Tests for status-change notification dispatch and fan-out."""
import uuid
from unittest.mock import MagicMock, patch

from travel_portal.models.notification import Notification
from travel_portal.services.notifications import (
    SUBMITTED,
    StatusChangeEvent,
    dispatch_status_change,
    next_roles,
    requestor_message,
    write_notifications,
)

REQUESTOR_ID = uuid.UUID("f96955d0-752f-4e0c-b1dc-d26d8dd1460e")


class FakeApprover:
    def __init__(self, email, user_id=None):
        self.id = user_id or uuid.uuid4()
        self.email = email


def _event(**overrides) -> StatusChangeEvent:
    data = dict(
        module="claims",
        entity_id="CLM-20250702-1423-QWSDF-P4Z5",
        requestor_id=REQUESTOR_ID,
        requestor_name="Alice Tan",
        requestor_email="alice.tan@example.com",
        previous_status="Pending Department Focal",
        next_status="Pending Line Manager",
        actor_name="Dana Focal",
    )
    data.update(overrides)
    return StatusChangeEvent(**data)


def _sync_db(approvers):
    db = MagicMock()
    db.execute.return_value.scalars.return_value.all.return_value = approvers
    return db


def _notifications(db) -> list[Notification]:
    return [c.args[0] for c in db.add.call_args_list if isinstance(c.args[0], Notification)]


# ─── Dispatch ─────────────────────────────────────────────────────────────────

def test_dispatch_enqueues_json_payload():
    with patch("travel_portal.workers.notification_tasks.send_status_notifications") as task:
        dispatch_status_change(_event())
    payload = task.delay.call_args.args[0]
    assert payload["requestor_id"] == str(REQUESTOR_ID)
    assert payload["next_status"] == "Pending Line Manager"


def test_dispatch_swallows_broker_errors():
    with patch("travel_portal.workers.notification_tasks.send_status_notifications") as task:
        task.delay.side_effect = ConnectionError("redis down")
        dispatch_status_change(_event())  # must not raise


# ─── Recipients ───────────────────────────────────────────────────────────────

def test_next_roles_follow_the_pending_stage():
    assert next_roles(_event(next_status="Pending HOD")) == {"HOD"}


def test_next_roles_for_legacy_status():
    assert next_roles(_event(next_status="Pending Verification")) == {"Department Focal"}


def test_approved_goes_to_processing_admin():
    assert next_roles(_event(module="visa", next_status="Approved")) == {"Visa Admin"}


def test_terminal_status_has_no_next_roles():
    assert next_roles(_event(next_status="Rejected")) == set()


def test_requestor_message_mentions_actor_and_comments():
    title, message = requestor_message(_event(next_status="Rejected", comments="Missing receipts"), "Expense claim")
    assert title == "Expense claim CLM-20250702-1423-QWSDF-P4Z5: Rejected"
    assert "Dana Focal" in message
    assert "Missing receipts" in message


# ─── Fan-out ──────────────────────────────────────────────────────────────────

def test_write_notifications_for_requestor_and_next_approvers():
    approvers = [FakeApprover("lm1@example.com"), FakeApprover("lm2@example.com")]
    db = _sync_db(approvers)
    with patch("travel_portal.services.notifications.email_svc.send_status_email") as send:
        created = write_notifications(db, _event())

    assert created == 3
    rows = _notifications(db)
    assert rows[0].user_id == REQUESTOR_ID
    assert rows[0].category == "status_update"
    assert {r.user_id for r in rows[1:]} == {a.id for a in approvers}
    assert all(r.event_type == "claims_approval_request" for r in rows[1:])
    assert send.call_count == 3


def test_requestor_is_not_notified_twice_when_also_approver():
    db = _sync_db([FakeApprover("alice.tan@example.com", user_id=REQUESTOR_ID)])
    with patch("travel_portal.services.notifications.email_svc.send_status_email"):
        created = write_notifications(db, _event())
    assert created == 1


def test_submitted_event_message():
    db = _sync_db([])
    event = _event(event=SUBMITTED, previous_status=None, next_status="Pending Department Focal")
    with patch("travel_portal.services.notifications.email_svc.send_status_email"):
        write_notifications(db, event)
    first = _notifications(db)[0]
    assert first.event_type == "claims_submitted"
    assert "submitted" in first.title


def test_final_status_skips_approver_lookup():
    db = _sync_db([])
    with patch("travel_portal.services.notifications.email_svc.send_status_email"):
        created = write_notifications(db, _event(previous_status="Processing with Claims Admin", next_status="Processed"))
    assert created == 1
    db.execute.assert_not_called()
