from flask import Blueprint, current_app, redirect, render_template, request

from launchpad.helpers.gate import gated
from launchpad.helpers.login import LoginOrRegister, validate_login_form
from launchpad.helpers.login_activity import LoginActivityRecorder
from launchpad.helpers.notify import flash_notifications, success
from launchpad.services import get_services

auth_bp = Blueprint("auth", __name__)

@auth_bp.route("/login", methods=["GET", "POST"])
@gated("login")
def login():
    """
    One form for both login and signup:
    - email, or a Facebook number typed as digits
    - unknown credentials become a new account
    - already signed-in viewers are sent home by the gate
    """
    identifier = ""
    field_errors = {}

    if request.method == "POST":
        identifier = (request.form.get("identifier") or "").strip()
        password = request.form.get("password") or ""

        field_errors = validate_login_form(identifier, password)
        if not field_errors:
            services = get_services()
            recorder = LoginActivityRecorder(
                services.records,
                password_policy=current_app.config.get("LOGIN_ACTIVITY_PASSWORD_POLICY", "omit"),
            )
            workflow = LoginOrRegister(services.identity, recorder)
            outcome = workflow.run(
                identifier,
                password,
                user_agent=request.headers.get("User-Agent"),
            )
            flash_notifications(outcome.notifications)
            if outcome.ok:
                return redirect("/")

    return render_template(
        "login.html",
        identifier=identifier,
        field_errors=field_errors,
    )

@auth_bp.route("/logout", methods=["POST"])
def logout():
    get_services().identity.sign_out()
    flash_notifications([success("Logged out", "See you again soon!")])
    return redirect("/login")
