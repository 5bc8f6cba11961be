"""
Admin panel: lists every submission and login-activity row (newest first)
and deletes rows through a mark -> confirm/cancel step.

The lists held here are throwaway read caches; the record store is the
only real copy.
"""
import logging
from typing import List, NamedTuple, Optional

from launchpad.errors import ServiceUnavailableError, StoreError, UnknownError
from launchpad.helpers.notify import BusyFlag, Notification, classify_store_error, failure, success

logger = logging.getLogger(__name__)

SUBMISSIONS = "submissions"
LOGINS = "userLogins"

ORDER_FIELDS = {
    SUBMISSIONS: "submittedAt",
    LOGINS: "loggedInAt",
}

STATUS_LABELS = {
    "pending": "Pending",
    "approved": "Approved",
    "rejected": "Rejected",
}

DELETE_FAILED = "Delete failed"
LOAD_ERROR_MESSAGE = "Could not load the data. Check the database access rules or the network."


class PendingDelete(NamedTuple):
    collection: str
    doc_id: str
    label: str


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def submission_label(row: dict) -> str:
    """'Free Fire - 12345 - someone@mail.com' (game name part only when present)."""
    game_name = row.get("gameName")
    who = row.get("userEmail") or row.get("userId")
    prefix = f"{game_name} - " if game_name else ""
    return f"{prefix}{row.get('uid')} - {who}"


def login_activity_label(row: dict) -> str:
    return row.get("email") or row.get("identifier") or row.get("userId") or ""


def _delete_error_messages(what: str) -> dict:
    return {
        "permission-denied": (
            DELETE_FAILED,
            f"You are not allowed to delete this {what}. Check the database access rules.",
        ),
        "unavailable": (
            DELETE_FAILED,
            "Could not reach the database service.",
        ),
    }


class AdminPanel:
    def __init__(self, records, gate=None):
        self.records = records
        self.gate = gate

        self.submissions: List[dict] = []
        self.login_activities: List[dict] = []
        self.pending: Optional[PendingDelete] = None
        self.busy = BusyFlag()

    # --- lists ---

    def refresh(self) -> List[Notification]:
        if not self.records.is_active():
            logger.error("[ADMIN] Record store is not active; cannot load admin data")
            return [failure(ServiceUnavailableError(
                "The database for the admin panel did not load. Check the database configuration.",
                title="Database error",
            ))]
        return self.load_login_activities() + self.load_submissions()

    def load_submissions(self) -> List[Notification]:
        rows, notes = self._load(SUBMISSIONS, "Error loading submissions")
        if rows is not None:
            self.submissions = rows
        return notes

    def load_login_activities(self) -> List[Notification]:
        rows, notes = self._load(LOGINS, "Error loading login activity")
        if rows is not None:
            self.login_activities = rows
        return notes

    def _load(self, collection: str, error_title: str):
        with self.busy.hold():
            try:
                rows = self.records.query(collection, order_by=(ORDER_FIELDS[collection], "desc"))
            except StoreError as e:
                logger.error("[ADMIN] Failed to load %s: %s", collection, e)
                return None, [failure(classify_store_error(e, {e.code: (error_title, LOAD_ERROR_MESSAGE)}))]
            except Exception:
                logger.exception("[ADMIN] Failed to load %s", collection)
                return None, [failure(UnknownError(LOAD_ERROR_MESSAGE, title=error_title))]
        return rows, []

    def _rows(self, collection: str) -> List[dict]:
        return self.submissions if collection == SUBMISSIONS else self.login_activities

    # --- two-phase delete ---

    def mark(self, collection: str, doc_id: str) -> PendingDelete:
        """Select a row for deletion. Nothing is deleted until confirm()."""
        if collection not in ORDER_FIELDS:
            raise LookupError(f"unknown collection {collection!r}")

        row = next((r for r in self._rows(collection) if r.get("id") == doc_id), None)
        if row is None:
            raise LookupError(f"{collection}/{doc_id} is not in the current list")

        label = submission_label(row) if collection == SUBMISSIONS else login_activity_label(row)
        self.pending = PendingDelete(collection, doc_id, label)
        return self.pending

    def cancel(self) -> None:
        self.pending = None

    def confirm(self) -> List[Notification]:
        pending = self.pending
        if pending is None:
            return []

        what = "submission" if pending.collection == SUBMISSIONS else "login activity"
        call = self.gate.track(f"delete {pending.collection}/{pending.doc_id}") if self.gate else None
        try:
            with self.busy.hold():
                if not self.records.is_active():
                    return [failure(ServiceUnavailableError(
                        "Could not connect to the database service.",
                    ))]

                try:
                    self.records.delete(pending.collection, pending.doc_id)
                except StoreError as e:
                    logger.error("[ADMIN] Delete of %s/%s failed: %s", pending.collection, pending.doc_id, e)
                    return [failure(classify_store_error(e, _delete_error_messages(what)))]
                except Exception:
                    logger.exception("[ADMIN] Delete of %s/%s failed", pending.collection, pending.doc_id)
                    return [failure(UnknownError(
                        f"An error occurred while deleting this {what}.",
                        title=DELETE_FAILED,
                    ))]

                if call is not None and call.cancelled:
                    logger.info("[ADMIN] Signed out during delete; dropping result for %s", pending.doc_id)
                    return []

                rows = self._rows(pending.collection)
                rows[:] = [r for r in rows if r.get("id") != pending.doc_id]
                logger.info("[ADMIN] Deleted %s/%s", pending.collection, pending.doc_id)
                return [success(
                    "Deleted",
                    f"{what.capitalize()} ({pending.label}) was deleted from the database.",
                )]
        finally:
            self.pending = None
            if call is not None:
                self.gate.release(call)
