from unittest import mock

import pytest

from launchpad.helpers.email import is_phone_style_email, normalize_email, send_submission_receipt_via_email


def test_normalize_email():
    assert normalize_email("  Someone@Mail.COM ") == "someone@mail.com"
    assert normalize_email(None) == ""


def test_is_phone_style_email():
    assert is_phone_style_email("01712345678@phone.facebook.login")
    assert not is_phone_style_email("someone@mail.com")


@pytest.fixture
def send():
    with mock.patch("launchpad.helpers.email.resend.Emails.send") as send:
        yield send


def test_phone_style_accounts_are_skipped(app, send):
    app.config["RESEND_API_KEY"] = "re_test"
    assert send_submission_receipt_via_email("01712345678@phone.facebook.login", "Free Fire", "123") is False
    send.assert_not_called()


def test_without_api_key_only_logs(app, send):
    assert send_submission_receipt_via_email("gamer@player.com", "Free Fire", "123") is False
    send.assert_not_called()


def test_sends_receipt(app, send):
    app.config["RESEND_API_KEY"] = "re_test"
    app.config["RESEND_FROM_EMAIL"] = "Launchpad <noreply@launchpad.test>"

    assert send_submission_receipt_via_email("gamer@player.com", "Free Fire", "123") is True

    params = send.call_args[0][0]
    assert params["to"] == ["gamer@player.com"]
    assert params["from"] == "Launchpad <noreply@launchpad.test>"
    assert "Free Fire" in params["subject"]
    assert "123" in params["html"]


def test_send_failure_is_swallowed(app, send):
    app.config["RESEND_API_KEY"] = "re_test"
    send.side_effect = RuntimeError("resend down")

    assert send_submission_receipt_via_email("gamer@player.com", "Free Fire", "123") is False
