from contextlib import contextmanager
from typing import NamedTuple

from flask import flash

from launchpad.errors import StoreError, WorkflowError, PermissionDeniedError, ServiceUnavailableError, UnknownError

SUCCESS = "success"
ERROR = "error"


class Notification(NamedTuple):
    kind: str
    title: str
    message: str


def success(title: str, message: str) -> Notification:
    return Notification(SUCCESS, title, message)


def failure(exc: WorkflowError) -> Notification:
    return Notification(ERROR, exc.title, exc.message)


def classify_store_error(exc: Exception, messages: dict = None) -> WorkflowError:
    """
    Turn a record store failure into a user-facing error.

    ``messages`` maps a store code to a (title, message) override so each
    workflow can word the common cases its own way.
    """
    messages = messages or {}
    if not isinstance(exc, StoreError):
        return UnknownError()

    title, message = messages.get(exc.code, (None, None))
    if exc.code == "permission-denied":
        return PermissionDeniedError(message, title)
    if exc.code in ("unavailable", "deadline-exceeded"):
        return ServiceUnavailableError(message, title)
    return UnknownError(message or f"Database error: {exc.message} (Code: {exc.code})", title)


class BusyFlag:
    """
    Set while a workflow run is in flight. ``hold()`` always clears it,
    whichever way the block exits.

    Pages are rendered after the run finishes, so templates never see it
    set; it stays internal to the workflow objects.
    """

    def __init__(self):
        self.is_busy = False

    @contextmanager
    def hold(self):
        self.is_busy = True
        try:
            yield self
        finally:
            self.is_busy = False


def flash_notifications(notifications) -> None:
    """Hand notifications to the templates via Flask's flash()."""
    for note in notifications:
        flash({"title": note.title, "message": note.message}, note.kind)
