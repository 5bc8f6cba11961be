from datetime import datetime, timedelta, timezone
from unittest import mock

import pytest

from launchpad.errors import StoreError
from launchpad.helpers.admin_panel import AdminPanel, status_label, submission_label
from launchpad.helpers.gate import SessionGate
from launchpad.helpers.notify import ERROR, SUCCESS
from launchpad.models import LoginActivity, Submission

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def admin(sign_in, admin_email):
    return sign_in(admin_email)


@pytest.fixture
def seeded(services, admin):
    """Three submissions (T1 < T2 < T3) and one login row."""
    ids = []
    for i, game in enumerate(["First", "Second", "Third"], start=1):
        ids.append(services.records.insert("submissions", {
            "userId": f"user-{i}",
            "userEmail": f"p{i}@player.com",
            "gameName": game,
            "uid": f"{i}{i}{i}",
            "level": str(10 * i),
            "status": "pending",
            "submittedAt": T0 + timedelta(minutes=i),
        }))
    login_id = services.records.insert("userLogins", {
        "userId": "user-1",
        "email": "p1@player.com",
        "identifierType": "email",
        "loggedInAt": T0,
        "userAgent": "ua",
    })
    return ids, login_id


@pytest.fixture
def panel(services, seeded):
    panel = AdminPanel(services.records)
    assert panel.refresh() == []
    return panel


def test_lists_are_newest_first(panel):
    assert [s["gameName"] for s in panel.submissions] == ["Third", "Second", "First"]
    assert len(panel.login_activities) == 1


def test_mark_then_cancel_changes_nothing(panel, seeded):
    ids, _ = seeded
    panel.mark("submissions", ids[0])
    panel.cancel()

    assert panel.pending is None
    assert panel.confirm() == []
    assert Submission.query.count() == 3
    assert len(panel.submissions) == 3


def test_mark_then_confirm_removes_exactly_one(panel, seeded):
    ids, _ = seeded
    panel.mark("submissions", ids[1])

    notes = panel.confirm()

    assert [n.kind for n in notes] == [SUCCESS]
    assert "Second - 222 - p2@player.com" in notes[0].message
    assert Submission.query.count() == 2
    assert ids[1] not in [s["id"] for s in panel.submissions]
    assert len(panel.submissions) == 2
    assert panel.pending is None


def test_delete_login_activity(panel, seeded):
    _, login_id = seeded
    panel.mark("userLogins", login_id)

    notes = panel.confirm()

    assert "p1@player.com" in notes[0].message
    assert LoginActivity.query.count() == 0
    assert panel.login_activities == []


def test_failed_delete_leaves_list_alone(panel, services, seeded):
    ids, _ = seeded
    panel.mark("submissions", ids[0])

    with mock.patch.object(services.records, "delete", side_effect=StoreError("permission-denied")):
        notes = panel.confirm()

    assert [n.kind for n in notes] == [ERROR]
    assert notes[0].title == "Delete failed"
    assert len(panel.submissions) == 3
    assert Submission.query.count() == 3
    assert panel.pending is None


def test_mark_unknown_row(panel):
    with pytest.raises(LookupError):
        panel.mark("submissions", "missing")
    with pytest.raises(LookupError):
        panel.mark("accounts", "anything")


def test_refresh_with_inactive_store(services, admin):
    panel = AdminPanel(services.records)
    with mock.patch.object(services.records, "is_active", return_value=False):
        notes = panel.refresh()
    assert notes[0].title == "Database error"
    assert panel.submissions == []


def test_refresh_reports_each_failed_list(services, admin):
    panel = AdminPanel(services.records)
    with mock.patch.object(services.records, "query", side_effect=StoreError("permission-denied")):
        notes = panel.refresh()
    assert [n.title for n in notes] == ["Error loading login activity", "Error loading submissions"]


def test_sign_out_during_delete_drops_the_result(services, seeded, admin_email):
    ids, _ = seeded
    gate = SessionGate(services.identity, {admin_email}).watch()
    panel = AdminPanel(services.records, gate=gate)
    panel.refresh()
    panel.mark("submissions", ids[2])

    real_delete = services.records.delete

    def delete_then_sign_out(collection, doc_id):
        real_delete(collection, doc_id)
        services.identity.sign_out()

    with mock.patch.object(services.records, "delete", side_effect=delete_then_sign_out):
        notes = panel.confirm()

    assert notes == []
    assert len(panel.submissions) == 3
    assert Submission.query.count() == 2


def test_labels():
    assert status_label("approved") == "Approved"
    assert status_label("on-hold") == "on-hold"
    assert submission_label({"uid": "9", "userId": "u-1"}) == "9 - u-1"
