"""
Error taxonomy for the login, submission and admin workflows.

Two families live here:

- Backend failures (IdentityError, StoreError) raised by the service
  handles with a short machine code, e.g. "user-not-found" or
  "permission-denied".
- Workflow errors (WorkflowError subclasses) that carry the title and
  message shown to the user. Workflows translate backend failures into
  these at their boundary; nothing below ever reaches a template raw.
"""
from typing import Optional


class IdentityError(Exception):
    """The identity store refused a verify/create call."""

    def __init__(self, code: str, message: Optional[str] = None):
        self.code = code
        self.message = message or code
        super().__init__(f"{code}: {self.message}")


class StoreError(Exception):
    """The record store failed a read, write or delete."""

    def __init__(self, code: str, message: Optional[str] = None):
        self.code = code
        self.message = message or code
        super().__init__(f"{code}: {self.message}")


class WorkflowError(Exception):
    title = "Something went wrong"
    default_message = "An unexpected problem occurred. Please try again."

    def __init__(self, message: Optional[str] = None, title: Optional[str] = None):
        self.message = message or self.default_message
        if title:
            self.title = title
        super().__init__(self.message)


class ValidationError(WorkflowError):
    title = "Form error"
    default_message = "Please check the highlighted fields."

    def __init__(self, message=None, field_errors=None, title=None):
        super().__init__(message, title)
        self.field_errors = dict(field_errors or {})


class AuthRequiredError(WorkflowError):
    title = "Sign-in required"
    default_message = "You need to be signed in to do that. Please refresh the page or log in again."


class ServiceUnavailableError(WorkflowError):
    title = "Service error"
    default_message = "Could not reach the database service. Please try again shortly."


class PermissionDeniedError(WorkflowError):
    title = "Permission error"
    default_message = (
        "The database refused this action. Check the access policy for this "
        "collection or contact the admin."
    )


class CredentialError(WorkflowError):
    title = "Login failed"
    default_message = "There was a problem signing you in."

    def __init__(self, message=None, title=None, code=None):
        super().__init__(message, title)
        self.code = code


class InvalidStateError(WorkflowError):
    title = "Error"
    default_message = "No account id was available, so the login activity could not be recorded."


class UnknownError(WorkflowError):
    pass
