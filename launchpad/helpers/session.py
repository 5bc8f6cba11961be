from flask import session

from launchpad.helpers.admin_panel import PendingDelete


def set_pending_delete(pending: PendingDelete):
    session["pending_delete"] = {
        "collection": pending.collection,
        "doc_id": pending.doc_id,
        "label": pending.label,
    }


def get_pending_delete():
    raw = session.get("pending_delete")
    if not raw:
        return None
    return PendingDelete(raw.get("collection"), raw.get("doc_id"), raw.get("label") or "")


def clear_pending_delete():
    session.pop("pending_delete", None)