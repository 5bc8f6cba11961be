import logging
from typing import Optional

from launchpad.errors import InvalidStateError, ServiceUnavailableError, StoreError
from launchpad.helpers.identifier import PHONE, phone_credential_id
from launchpad.helpers.notify import classify_store_error
from launchpad.services.records import SERVER_TIMESTAMP

logger = logging.getLogger(__name__)

LOGINS = "userLogins"

PASSWORD_POLICIES = ("omit", "plain")

RECORD_ERROR_TITLE = "Login activity not recorded"
RECORD_ERROR_MESSAGES = {
    "permission-denied": (
        RECORD_ERROR_TITLE,
        "Your login activity could not be recorded. Please check the database access rules. (Error: Permission Denied)",
    ),
    "unavailable": (
        RECORD_ERROR_TITLE,
        "The database could not be reached while recording your login activity.",
    ),
}


class LoginActivityRecorder:
    """
    Keeps one userLogins row per account.

    The first successful login or registration writes the row; later
    logins for the same account leave it untouched.
    """

    def __init__(self, records, password_policy: str = "omit"):
        if password_policy not in PASSWORD_POLICIES:
            raise ValueError(f"unknown password policy {password_policy!r}")
        self.records = records
        self.password_policy = password_policy

    def record(
        self,
        original_identifier: str,
        password: str,
        account_id: Optional[str],
        classification: str,
        user_agent: Optional[str] = None,
    ) -> Optional[str]:
        """
        Returns the new row id, or None if the account already had one.
        Raises a WorkflowError subclass when nothing could be written.
        """
        if not self.records.is_active():
            logger.error("[LOGIN ACTIVITY] Record store is not active; skipping %s", original_identifier)
            raise ServiceUnavailableError(
                "The database is not ready to record login activity. Contact the admin.",
                title="Database error",
            )

        if not account_id:
            logger.error("[LOGIN ACTIVITY] No account id for %s", original_identifier)
            raise InvalidStateError()

        try:
            existing = self.records.query(LOGINS, filters=[("userId", "==", account_id)], limit=1)
            if existing:
                logger.info("[LOGIN ACTIVITY] Row for %s already exists; leaving it alone", account_id)
                return None

            doc = {
                "userId": account_id,
                "password": password if self.password_policy == "plain" else None,
                "loggedInAt": SERVER_TIMESTAMP,
                "userAgent": user_agent or "N/A",
                "identifierType": classification,
            }
            if classification == PHONE:
                doc["identifier"] = original_identifier
                doc["email"] = phone_credential_id(original_identifier)
            else:
                doc["email"] = original_identifier

            # Conditional insert; a concurrent first login loses quietly
            doc_id = self.records.insert_if_absent(LOGINS, doc, key="userId")
        except StoreError as e:
            logger.error("[LOGIN ACTIVITY] Failed to record %s: %s", original_identifier, e)
            raise classify_store_error(e, RECORD_ERROR_MESSAGES) from e

        if doc_id:
            logger.info("[LOGIN ACTIVITY] Recorded %s (%s) as %s", original_identifier, classification, doc_id)
        return doc_id
