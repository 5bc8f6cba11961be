from launchpad.extensions import db
from launchpad.models.account import new_id


class LoginActivity(db.Model):
    __tablename__ = "login_activity"

    FIELDS = {
        "userId": "user_id",
        "identifier": "identifier",
        "email": "email",
        "identifierType": "identifier_type",
        "password": "password",
        "loggedInAt": "logged_in_at",
        "userAgent": "user_agent",
    }

    id = db.Column(db.String(32), primary_key=True, default=new_id)

    # One row per account; the unique index backs insert_if_absent
    user_id = db.Column(db.String(32), nullable=False, unique=True, index=True)

    # Raw digits for phone-style logins, empty for email logins
    identifier = db.Column(db.String(255), nullable=True)
    # Credential id actually used to sign in
    email = db.Column(db.String(255), nullable=False)
    identifier_type = db.Column(db.String(10), nullable=False)

    password = db.Column(db.String(255), nullable=True)
    logged_in_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    user_agent = db.Column(db.String(512), nullable=True)
