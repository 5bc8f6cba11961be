import logging

import resend
from flask import current_app

from launchpad.config import PHONE_IDENTIFIER_DOMAIN

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def is_phone_style_email(email: str) -> bool:
    """True for the synthetic credential ids made from bare numbers."""
    return normalize_email(email).endswith(PHONE_IDENTIFIER_DOMAIN)


def send_submission_receipt_via_email(email: str, game_name: str, uid: str) -> bool:
    """
    Email the submitter a receipt for their game profile via Resend.

    - Phone-style accounts have no real inbox, so they are skipped.
    - If RESEND_API_KEY is not set, just log it (local dev).

    Returns True only when Resend accepted the message.
    """
    if not email or is_phone_style_email(email):
        return False

    api_key = current_app.config.get("RESEND_API_KEY")
    from_email = current_app.config.get("RESEND_FROM_EMAIL")

    # Dev / fallback path
    if not api_key:
        logger.info("[RECEIPT - DEV ONLY] %s -> %s (%s)", email, game_name, uid)
        return False

    html = f"""
      <div style="font-family: system-ui, -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; padding: 16px;">
        <p>Hey gamer 👋</p>
        <p>We received your profile for <strong>{game_name}</strong> (UID {uid}).</p>
        <p>An admin will review it and you will hear from us within 24 hours.</p>
      </div>
    """

    resend.api_key = api_key
    try:
        params = {
            "from": from_email,
            "to": [email],
            "subject": f"We received your {game_name} profile",
            "html": html,
        }
        resend.Emails.send(params)
        logger.info("[RECEIPT] Sent submission receipt to %s", email)
        return True
    except Exception as e:
        # Don't fail the submission if email fails; just log it.
        logger.error("[RECEIPT] Failed to send via Resend: %s", e)
        return False
