from flask import Blueprint, g, render_template, request

from launchpad.helpers.email import send_submission_receipt_via_email
from launchpad.helpers.gate import gated
from launchpad.helpers.notify import flash_notifications
from launchpad.helpers.submission import SubmissionWorkflow, empty_form
from launchpad.services import get_services

submission_bp = Blueprint("submission", __name__)

@submission_bp.route("/submission", methods=["GET", "POST"])
@gated("submission")
def submission_page():
    form = empty_form()
    field_errors = {}

    if request.method == "POST":
        services = get_services()
        workflow = SubmissionWorkflow(services.identity, services.records)
        outcome = workflow.submit(request.form)

        form = outcome.form
        field_errors = outcome.field_errors
        flash_notifications(outcome.notifications)

        if outcome.ok:
            account = services.identity.current_account()
            send_submission_receipt_via_email(
                account.email,
                (request.form.get("gameName") or "").strip(),
                (request.form.get("uid") or "").strip(),
            )

    return render_template(
        "submission.html",
        form=form,
        field_errors=field_errors,
        account=g.gate.account,
    )
