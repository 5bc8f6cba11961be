"""
Session gate: decides which screen the current account may see.

States follow identity changes:

    unknown --(account)--> authenticated-user | authenticated-admin
    unknown --(none)-----> anonymous
    any ------(none)-----> anonymous   (pending privileged calls cancelled)

Identity listeners live on flask.g, so a gate only hears sign-in/out
events from its own request. Cancellation of a tracked call therefore
covers a sign-out in that same request; a sign-out from another request
is picked up by the next gated request, which redirects.
"""
import logging
from enum import Enum
from functools import wraps
from typing import Optional

from flask import g, redirect

from launchpad.helpers.access import Capability, capability_for
from launchpad.services import get_services

logger = logging.getLogger(__name__)

LOGIN_URL = "/login"
HOME_URL = "/"


class GateState(Enum):
    UNKNOWN = "unknown"
    ANONYMOUS = "anonymous"
    AUTHENTICATED_USER = "authenticated-user"
    AUTHENTICATED_ADMIN = "authenticated-admin"


class PendingCall:
    """Handle for an in-flight privileged call; its result is dropped once cancelled."""

    def __init__(self, label: str = ""):
        self.label = label
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class SessionGate:
    def __init__(self, identity, admin_emails):
        self.identity = identity
        self.admin_emails = admin_emails
        self.state = GateState.UNKNOWN
        self.account = None
        self._pending = []
        self._unsubscribe = None

    def watch(self) -> "SessionGate":
        if self._unsubscribe is None:
            self._unsubscribe = self.identity.on_account_changed(self.on_account_changed)
        return self

    def stop(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def on_account_changed(self, account):
        previous = self.state
        self.account = account

        capability = capability_for(account, self.admin_emails)
        if capability is None:
            self.state = GateState.ANONYMOUS
        elif capability is Capability.ADMIN:
            self.state = GateState.AUTHENTICATED_ADMIN
        else:
            self.state = GateState.AUTHENTICATED_USER

        if self.state is GateState.ANONYMOUS and previous is not GateState.ANONYMOUS:
            self.cancel_pending()

        if previous is not self.state:
            logger.debug("[GATE] %s -> %s", previous.value, self.state.value)

    @property
    def is_admin(self) -> bool:
        return self.state is GateState.AUTHENTICATED_ADMIN

    def redirect_for(self, screen: str) -> Optional[str]:
        """URL to send the viewer to instead of ``screen``, or None to stay."""
        if self.state is GateState.UNKNOWN:
            return None

        if screen == "login":
            return HOME_URL if self.state is not GateState.ANONYMOUS else None

        if self.state is GateState.ANONYMOUS:
            return LOGIN_URL

        if screen == "admin" and not self.is_admin:
            return HOME_URL

        return None

    # --- pending privileged calls ---

    def track(self, label: str = "") -> PendingCall:
        call = PendingCall(label)
        if self.state is GateState.ANONYMOUS:
            call.cancel()
        self._pending.append(call)
        return call

    def release(self, call: PendingCall):
        if call in self._pending:
            self._pending.remove(call)

    def cancel_pending(self):
        for call in self._pending:
            if not call.cancelled:
                logger.info("[GATE] Cancelling pending call %s", call.label or "<unnamed>")
            call.cancel()
        self._pending = []


def gated(screen: str):
    """
    Route decorator: build a gate for this request, redirect if the
    viewer may not see ``screen``, otherwise expose it as ``g.gate``.
    """
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            services = get_services()
            gate = SessionGate(services.identity, services.admin_emails).watch()
            target = gate.redirect_for(screen)
            if target:
                return redirect(target)

            g.gate = gate
            return view(*args, **kwargs)
        return wrapped
    return decorator
