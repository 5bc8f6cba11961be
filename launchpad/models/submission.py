from launchpad.extensions import db
from launchpad.models.account import new_id

SUBMISSION_STATUSES = ("pending", "approved", "rejected")


class Submission(db.Model):
    __tablename__ = "submission"

    # wire field name -> column attribute
    FIELDS = {
        "userId": "user_id",
        "userEmail": "user_email",
        "gameName": "game_name",
        "uid": "uid",
        "level": "level",
        "status": "status",
        "submittedAt": "submitted_at",
    }

    # allowed values, enforced by the record store on insert
    CHOICES = {"status": SUBMISSION_STATUSES}

    id = db.Column(db.String(32), primary_key=True, default=new_id)

    # Not a real FK: rows outlive the accounts that wrote them
    user_id = db.Column(db.String(32), nullable=False, index=True)
    user_email = db.Column(db.String(255), nullable=True)

    game_name = db.Column(db.String(160), nullable=False)
    uid = db.Column(db.String(120), nullable=False)
    level = db.Column(db.String(20), nullable=False)

    status = db.Column(db.String(20), nullable=False, default="pending")
    submitted_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
