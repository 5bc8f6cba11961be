from flask import Blueprint, render_template, request, g

from launchpad.helpers.gate import gated
from launchpad.services import get_services

index_bp = Blueprint("index", __name__)

@index_bp.route("/")
@gated("home")
def index():
    """
    Home screen:
    - Anonymous viewers are sent to /login by the gate.
    - Admins also get a link to the control panel.
    """
    return render_template(
        "home.html",
        account=g.gate.account,
        is_admin=g.gate.is_admin,
    )

@index_bp.app_context_processor
def inject_nav_context():
    path = (request.path or "")
    if path.startswith("/login"):
        return dict(nav_account=None)

    gate = g.get("gate")
    if gate is not None:
        return dict(nav_account=gate.account)

    return dict(nav_account=get_services().identity.current_account())
