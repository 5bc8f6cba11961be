import logging
import re
from typing import List, NamedTuple, Optional

from launchpad.errors import AuthRequiredError, ServiceUnavailableError, StoreError, UnknownError
from launchpad.helpers.notify import BusyFlag, Notification, classify_store_error, failure, success
from launchpad.services.records import SERVER_TIMESTAMP

logger = logging.getLogger(__name__)

SUBMISSIONS = "submissions"

FORM_FIELDS = ("gameName", "uid", "level")
LEVEL_RE = re.compile(r"^[0-9]+$")

SUBMIT_FAILED = "Submission failed"
SUBMIT_ERROR_MESSAGES = {
    "permission-denied": (
        "Permission error",
        "You are not allowed to submit this form. This may be caused by the database "
        "access rules. Contact the admin or check the rules.",
    ),
    "unavailable": (
        "Server error",
        "Could not reach the server. Check your internet connection or try again shortly.",
    ),
    "deadline-exceeded": (
        "Timed out",
        "Submitting is taking too long. Your connection may be slow. Please try again.",
    ),
}


def empty_form() -> dict:
    return {name: "" for name in FORM_FIELDS}


def validate_submission(form: dict) -> dict:
    """Per-field messages; empty dict when the form is good."""
    errors = {}
    if not form.get("gameName"):
        errors["gameName"] = "Please enter your game name."
    if not form.get("uid"):
        errors["uid"] = "Please enter your game UID."

    level = form.get("level")
    if not level:
        errors["level"] = "Please enter your current level."
    elif not LEVEL_RE.match(level):
        errors["level"] = "Level must be a number."
    return errors


class SubmissionOutcome(NamedTuple):
    doc_id: Optional[str]
    form: dict
    field_errors: dict
    notifications: List[Notification]

    @property
    def ok(self) -> bool:
        return self.doc_id is not None


class SubmissionWorkflow:
    def __init__(self, identity, records):
        self.identity = identity
        self.records = records
        self.busy = BusyFlag()

    def submit(self, form: dict) -> SubmissionOutcome:
        # Only the three known fields are read; anything else posted is ignored
        values = {name: (form.get(name) or "").strip() for name in FORM_FIELDS}

        errors = validate_submission(values)
        if errors:
            return SubmissionOutcome(None, values, errors, [])

        with self.busy.hold():
            account = self.identity.current_account()
            if account is None or not account.uid:
                logger.info("[SUBMISSION] No signed-in account; refusing")
                return self._failed(values, AuthRequiredError())

            if not self.records.is_active():
                logger.error("[SUBMISSION] Record store is not active")
                return self._failed(values, ServiceUnavailableError())

            doc = {
                "userId": account.uid,
                "userEmail": account.email,
                "gameName": values["gameName"],
                "uid": values["uid"],
                "level": values["level"],
                "status": "pending",
                "submittedAt": SERVER_TIMESTAMP,
            }

            try:
                doc_id = self.records.insert(SUBMISSIONS, doc)
            except StoreError as e:
                logger.error("[SUBMISSION] Store rejected submission from %s: %s", account.uid, e)
                return self._failed(values, classify_store_error(e, SUBMIT_ERROR_MESSAGES))
            except Exception:
                logger.exception("[SUBMISSION] Unexpected failure saving submission")
                return self._failed(values, UnknownError(
                    "An unknown error occurred while submitting. Please try again shortly.",
                    title=SUBMIT_FAILED,
                ))

        logger.info("[SUBMISSION] Saved %s for %s", doc_id, account.uid)
        return SubmissionOutcome(
            doc_id,
            empty_form(),
            {},
            [success(
                "Submitted successfully",
                "Your details have been submitted. You will get an email within 24 hours.",
            )],
        )

    @staticmethod
    def _failed(values: dict, exc) -> SubmissionOutcome:
        return SubmissionOutcome(None, values, {}, [failure(exc)])
