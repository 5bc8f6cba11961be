import logging

from flask import Flask

from .config import Config
from .extensions import db
from launchpad.helpers.access import AccessPolicy, parse_admin_emails
from launchpad.helpers.time import utc_to_local
from launchpad.services import Services, SqlIdentityStore, SqlRecordStore

logger = logging.getLogger(__name__)


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db.init_app(app)

    # One identity handle and one record handle per process
    admin_emails = parse_admin_emails(app.config.get("ADMIN_EMAILS"))
    identity = SqlIdentityStore.from_config(db, app.config)
    records = SqlRecordStore(db, policy=AccessPolicy(identity, admin_emails))
    app.extensions["launchpad"] = Services(identity, records, admin_emails)

    if app.config.get("LOGIN_ACTIVITY_PASSWORD_POLICY") == "plain":
        logger.warning("[CONFIG] LOGIN_ACTIVITY_PASSWORD_POLICY=plain: passwords are stored as typed in userLogins")

    # Jinja filter used by templates: {{ dt|local_dt('%d %b %Y...') }}
    @app.template_filter("local_dt")
    def local_dt(dt, fmt: str = "%d %b %Y, %I:%M %p") -> str:
        dt_local = utc_to_local(dt, app.config.get("DISPLAY_TIMEZONE"))
        return dt_local.strftime(fmt) if dt_local else ""

    from launchpad.routes import register_blueprints
    register_blueprints(app)

    return app
