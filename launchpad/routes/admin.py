from flask import Blueprint, abort, g, redirect, render_template

from launchpad.helpers.admin_panel import AdminPanel, status_label
from launchpad.helpers.gate import gated
from launchpad.helpers.notify import flash_notifications, success
from launchpad.helpers.session import clear_pending_delete, get_pending_delete, set_pending_delete
from launchpad.services import get_services

admin_bp = Blueprint("admin", __name__)

def build_panel() -> AdminPanel:
    """Fresh panel for this request, carrying any row marked on an earlier one."""
    panel = AdminPanel(get_services().records, gate=g.gate)
    panel.pending = get_pending_delete()
    return panel

@admin_bp.route("/admin")
@gated("admin")
def admin_page():
    panel = build_panel()
    flash_notifications(panel.refresh())
    return render_template(
        "admin.html",
        panel=panel,
        status_label=status_label,
    )

@admin_bp.route("/admin/delete/<collection>/<doc_id>", methods=["POST"])
@gated("admin")
def mark_delete(collection, doc_id):
    panel = build_panel()
    if panel.refresh():
        # /admin reloads and reports the failure itself
        return redirect("/admin")
    try:
        set_pending_delete(panel.mark(collection, doc_id))
    except LookupError:
        abort(404)
    return redirect("/admin")

@admin_bp.route("/admin/delete/confirm", methods=["POST"])
@gated("admin")
def confirm_delete():
    panel = build_panel()
    clear_pending_delete()
    flash_notifications(panel.confirm())
    return redirect("/admin")

@admin_bp.route("/admin/delete/cancel", methods=["POST"])
@gated("admin")
def cancel_delete():
    clear_pending_delete()
    return redirect("/admin")

@admin_bp.route("/admin/logout", methods=["POST"])
def admin_logout():
    get_services().identity.sign_out()
    flash_notifications([success("Logged out", "You have left the control panel.")])
    return redirect("/login")
