from enum import Enum
from typing import Optional

from launchpad.errors import StoreError
from launchpad.helpers.email import normalize_email


class Capability(Enum):
    ADMIN = "admin"
    USER = "user"


def parse_admin_emails(raw) -> frozenset:
    """'a@x.com, b@y.com' -> {'a@x.com', 'b@y.com'}"""
    if isinstance(raw, str):
        raw = raw.split(",")
    return frozenset(normalize_email(e) for e in (raw or []) if normalize_email(e))


def capability_for(account, admin_emails) -> Optional[Capability]:
    """None for anonymous callers."""
    if account is None:
        return None
    if normalize_email(account.email) in admin_emails:
        return Capability.ADMIN
    return Capability.USER


class AccessPolicy:
    """
    Rules the record store re-checks on every call:

    - anonymous callers get nothing
    - admins may read and delete anything
    - everyone else may only insert rows carrying their own userId and
      only read rows filtered to their own userId
    """

    def __init__(self, identity, admin_emails):
        self.identity = identity
        self.admin_emails = admin_emails

    def check(self, action: str, collection: str, filters=(), document=None) -> None:
        account = self.identity.current_account()
        capability = capability_for(account, self.admin_emails)

        if capability is None:
            raise StoreError("permission-denied", f"{action} on {collection} requires a signed-in account")
        if capability is Capability.ADMIN:
            return

        if action == "insert":
            if (document or {}).get("userId") == account.uid:
                return
        elif action == "read":
            if ("userId", "==", account.uid) in [tuple(f) for f in filters]:
                return

        raise StoreError("permission-denied", f"{action} on {collection} is not allowed for this account")
