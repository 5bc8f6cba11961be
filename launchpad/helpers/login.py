"""
Login-or-register: one form that signs people in, or creates their
account the first time they use a credential.

Flow:
1) normalize the identifier (email, or bare number -> synthetic email)
2) verify the credential
3) if verification says "no such user / wrong password", try to create
   the account with the same credential instead
4) on either success, record login activity once per account

Nothing here retries on its own; every retry is the user pressing the
button again.
"""
import logging
from typing import List, NamedTuple, Optional

from launchpad.errors import (
    CredentialError,
    IdentityError,
    ServiceUnavailableError,
    UnknownError,
    ValidationError,
    WorkflowError,
)
from launchpad.helpers.identifier import INVALID_IDENTIFIER_MESSAGE, normalize_identifier
from launchpad.helpers.notify import BusyFlag, Notification, failure, success

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

# Verification failures that mean "maybe this is a new account"
CREDENTIAL_REJECTION_CODES = frozenset({"invalid-credential", "user-not-found", "wrong-password"})

LOGIN_FAILED = "Login failed"
CREATE_FAILED = "Could not create account"


class LoginOutcome(NamedTuple):
    account: Optional[object]
    created: bool
    notifications: List[Notification]

    @property
    def ok(self) -> bool:
        return self.account is not None


def validate_login_form(identifier: str, password: str) -> dict:
    """Field errors for the login form; empty dict when it can be submitted."""
    errors = {}
    if not (identifier or "").strip():
        errors["identifier"] = "Please enter your email or Facebook number."
    if len(password or "") < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
    return errors


def sign_in_error(exc: IdentityError) -> WorkflowError:
    """Map a verification failure that does not fall back to registration."""
    if exc.code == "too-many-requests":
        return CredentialError(
            "Too many attempts. Your account has been temporarily locked.",
            title=LOGIN_FAILED,
            code=exc.code,
        )
    if exc.code == "network-request-failed":
        return ServiceUnavailableError(
            "Network problem. Check your internet connection.",
            title=LOGIN_FAILED,
        )
    if exc.code in ("configuration-not-found", "operation-not-allowed"):
        return CredentialError(
            "Authentication is not configured correctly, or this sign-in method is disabled.",
            title="Login error",
            code=exc.code,
        )
    if exc.code == "invalid-email":
        return ValidationError(INVALID_IDENTIFIER_MESSAGE)

    logger.error("[LOGIN] Unhandled sign-in error: %s", exc)
    return UnknownError("There was a problem signing you in.", title=LOGIN_FAILED)


def create_error(exc: IdentityError) -> WorkflowError:
    """Map a registration failure."""
    if exc.code == "email-already-in-use":
        # verification already failed, so the password was wrong
        return CredentialError(
            "Wrong password. An account with this email or number already exists.",
            title=LOGIN_FAILED,
            code=exc.code,
        )
    if exc.code == "invalid-email":
        return ValidationError(INVALID_IDENTIFIER_MESSAGE)
    if exc.code == "weak-password":
        return CredentialError(
            "That password is too weak. Please use a stronger password.",
            title=CREATE_FAILED,
            code=exc.code,
        )
    if exc.code == "operation-not-allowed":
        return CredentialError(
            "Creating accounts this way is not allowed. Contact the admin.",
            title=CREATE_FAILED,
            code=exc.code,
        )

    logger.error("[LOGIN] Unhandled create-account error: %s", exc)
    return UnknownError("There was a problem creating your account.", title=CREATE_FAILED)


class LoginOrRegister:
    def __init__(self, identity, recorder):
        self.identity = identity
        self.recorder = recorder
        self.busy = BusyFlag()

    def run(self, identifier: str, password: str, user_agent: Optional[str] = None) -> LoginOutcome:
        with self.busy.hold():
            try:
                normalized = normalize_identifier(identifier)
            except ValidationError as e:
                return self._failed(e)

            logger.info("[LOGIN] Attempt for %s (%s)", normalized.original, normalized.classification)

            try:
                account = self.identity.verify_credential(normalized.credential_id, password)
            except IdentityError as e:
                logger.info("[LOGIN] Sign in failed with %s for %s", e.code, normalized.credential_id)
                if e.code not in CREDENTIAL_REJECTION_CODES:
                    return self._failed(sign_in_error(e))
                return self._register(normalized, password, user_agent)
            except Exception:
                logger.exception("[LOGIN] Unexpected sign-in failure")
                return self._failed(UnknownError("There was a problem signing you in.", title=LOGIN_FAILED))

            notes = [success("Login successful", "Welcome!")]
            notes.extend(self._record(normalized, password, account, user_agent))
            return LoginOutcome(account, False, notes)

    def _register(self, normalized, password, user_agent) -> LoginOutcome:
        try:
            account = self.identity.create_account(normalized.credential_id, password)
        except IdentityError as e:
            logger.info("[LOGIN] Account creation failed with %s for %s", e.code, normalized.credential_id)
            return self._failed(create_error(e))
        except Exception:
            logger.exception("[LOGIN] Unexpected create-account failure")
            return self._failed(UnknownError("There was a problem creating your account.", title=CREATE_FAILED))

        notes = [success("Account created and you are logged in", "Welcome!")]
        notes.extend(self._record(normalized, password, account, user_agent))
        return LoginOutcome(account, True, notes)

    def _record(self, normalized, password, account, user_agent) -> List[Notification]:
        """Activity logging never undoes the sign-in; failures become a second notice."""
        try:
            self.recorder.record(
                normalized.original,
                password,
                getattr(account, "uid", None),
                normalized.classification,
                user_agent=user_agent,
            )
        except WorkflowError as e:
            return [failure(e)]
        except Exception:
            logger.exception("[LOGIN ACTIVITY] Unexpected failure while recording login")
            return [failure(UnknownError(
                "An unknown problem occurred while recording login activity.",
                title="Unknown error",
            ))]
        return []

    @staticmethod
    def _failed(exc: WorkflowError) -> LoginOutcome:
        return LoginOutcome(None, False, [failure(exc)])
