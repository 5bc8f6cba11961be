from datetime import datetime
from uuid import uuid4

from launchpad.extensions import db


def new_id() -> str:
    return uuid4().hex


class Account(db.Model):
    __tablename__ = "account"

    # Opaque id, never shown as a number
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # Consecutive wrong passwords; reset on a good login
    failed_logins = db.Column(db.Integer, nullable=False, default=0)
    locked_until = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
