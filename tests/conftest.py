"""
Shared fixtures: an app on in-memory SQLite, its service handles, and
helpers for signing accounts in.
"""
import pytest

from launchpad import create_app
from launchpad.errors import IdentityError
from launchpad.extensions import db

ADMIN_EMAIL = "boss@launchpad.test"
PASSWORD = "secret123"


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "SECRET_KEY": "test-secret-key-for-testing-only",
        "ADMIN_EMAILS": ADMIN_EMAIL,
        "BCRYPT_ROUNDS": 4,
        "MAX_FAILED_LOGINS": 3,
        "RESEND_API_KEY": None,
        "LOGIN_ACTIVITY_PASSWORD_POLICY": "omit",
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def services(app):
    return app.extensions["launchpad"]


@pytest.fixture
def ctx(app):
    """A request context, so session and g work outside the test client."""
    with app.test_request_context("/", headers={"User-Agent": "pytest-agent"}):
        yield


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sign_in(services, ctx):
    """sign_in(email) creates the account if needed and makes it current."""
    def _sign_in(email, password=PASSWORD):
        try:
            return services.identity.verify_credential(email, password)
        except IdentityError:
            return services.identity.create_account(email, password)
    return _sign_in


@pytest.fixture
def admin_email():
    return ADMIN_EMAIL
