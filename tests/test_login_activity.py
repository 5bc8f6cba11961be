from unittest import mock

import pytest
from sqlalchemy.exc import IntegrityError

from launchpad.config import PHONE_IDENTIFIER_DOMAIN
from launchpad.errors import InvalidStateError, PermissionDeniedError, ServiceUnavailableError, WorkflowError
from launchpad.helpers.login_activity import LoginActivityRecorder
from launchpad.models import LoginActivity


@pytest.fixture
def recorder(services):
    return LoginActivityRecorder(services.records)


def test_second_call_for_same_account_is_a_no_op(recorder, sign_in):
    account = sign_in("twice@player.com")

    first = recorder.record("twice@player.com", "secret123", account.uid, "email", user_agent="phone-browser")
    second = recorder.record("twice@player.com", "changed-pass", account.uid, "email", user_agent="laptop")

    assert first is not None
    assert second is None
    rows = LoginActivity.query.filter_by(user_id=account.uid).all()
    assert len(rows) == 1
    assert rows[0].user_agent == "phone-browser"


def test_phone_style_row_keeps_digits_and_synthetic_email(recorder, sign_in):
    account = sign_in("01712345678" + PHONE_IDENTIFIER_DOMAIN)
    recorder.record("01712345678", "secret123", account.uid, "phone")

    row = LoginActivity.query.filter_by(user_id=account.uid).one()
    assert row.identifier == "01712345678"
    assert row.email == "01712345678" + PHONE_IDENTIFIER_DOMAIN
    assert row.identifier_type == "phone"
    assert row.logged_in_at is not None
    assert row.user_agent == "N/A"


def test_email_row_uses_the_address_as_credential(recorder, sign_in):
    account = sign_in("mail@player.com")
    recorder.record("mail@player.com", "secret123", account.uid, "email", user_agent="ua")

    row = LoginActivity.query.filter_by(user_id=account.uid).one()
    assert row.identifier is None
    assert row.email == "mail@player.com"
    assert row.identifier_type == "email"


def test_password_is_omitted_by_default(recorder, sign_in):
    account = sign_in("omit@player.com")
    recorder.record("omit@player.com", "secret123", account.uid, "email")
    assert LoginActivity.query.filter_by(user_id=account.uid).one().password is None


def test_plain_policy_keeps_password(services, sign_in):
    account = sign_in("plain@player.com")
    LoginActivityRecorder(services.records, password_policy="plain").record(
        "plain@player.com", "secret123", account.uid, "email"
    )
    assert LoginActivity.query.filter_by(user_id=account.uid).one().password == "secret123"


def test_unknown_password_policy(services):
    with pytest.raises(ValueError):
        LoginActivityRecorder(services.records, password_policy="hashed")


def test_inactive_store_writes_nothing(recorder, services, sign_in):
    account = sign_in("down@player.com")
    with mock.patch.object(services.records, "is_active", return_value=False):
        with pytest.raises(ServiceUnavailableError):
            recorder.record("down@player.com", "secret123", account.uid, "email")
    assert LoginActivity.query.count() == 0


def test_missing_account_id(recorder, ctx):
    with pytest.raises(InvalidStateError):
        recorder.record("who@player.com", "secret123", None, "email")
    assert LoginActivity.query.count() == 0


def test_store_permission_error_is_classified(recorder, services, sign_in):
    account = sign_in("denied@player.com")
    services.identity.sign_out()

    with pytest.raises(PermissionDeniedError) as exc:
        recorder.record("denied@player.com", "secret123", account.uid, "email")
    assert "Permission Denied" in exc.value.message
    assert LoginActivity.query.count() == 0


def test_rejected_row_is_reported_not_skipped(recorder, services, sign_in):
    account = sign_in("lost@player.com")
    rejected = IntegrityError("INSERT INTO login_activity", {}, Exception("CHECK constraint failed"))

    with mock.patch.object(services.records, "_commit_row", side_effect=rejected):
        with pytest.raises(WorkflowError):
            recorder.record("lost@player.com", "secret123", account.uid, "email")
    assert LoginActivity.query.count() == 0
