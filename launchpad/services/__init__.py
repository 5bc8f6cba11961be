from flask import current_app

from .identity import AccountHandle, IdentityStore, SqlIdentityStore
from .records import SERVER_TIMESTAMP, RecordStore, SqlRecordStore


class Services:
    """Process-wide handles built once by create_app()."""

    def __init__(self, identity, records, admin_emails):
        self.identity = identity
        self.records = records
        self.admin_emails = admin_emails


def get_services() -> Services:
    return current_app.extensions["launchpad"]


__all__ = [
    "AccountHandle",
    "IdentityStore",
    "SqlIdentityStore",
    "RecordStore",
    "SqlRecordStore",
    "SERVER_TIMESTAMP",
    "Services",
    "get_services",
]
