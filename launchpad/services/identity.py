"""
Identity store: account creation, password checks and the signed-in account.

Accounts live in the ``account`` table. The signed-in account is the
``account_id`` kept in the Flask session, so every request sees the
account its own cookie points at.
"""
import logging
import re
from datetime import datetime, timedelta
from typing import NamedTuple, Optional

import bcrypt
from flask import g, session
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from launchpad.errors import IdentityError
from launchpad.helpers.email import normalize_email
from launchpad.models import Account

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


class AccountHandle(NamedTuple):
    uid: str
    email: str
    created_at: Optional[datetime]


def _handle_for(acct: Account) -> AccountHandle:
    return AccountHandle(uid=acct.id, email=acct.email, created_at=acct.created_at)


class IdentityStore:
    """Base class for identity backends."""

    def verify_credential(self, email: str, password: str) -> AccountHandle:
        raise NotImplementedError

    def create_account(self, email: str, password: str) -> AccountHandle:
        raise NotImplementedError

    def current_account(self) -> Optional[AccountHandle]:
        raise NotImplementedError

    def sign_out(self) -> None:
        raise NotImplementedError

    def is_active(self) -> bool:
        raise NotImplementedError

    def on_account_changed(self, callback):
        """
        Call ``callback(account_or_none)`` now and on every sign-in/out
        during this request. Returns a function that unsubscribes.
        """
        listeners = g.setdefault("account_listeners", [])
        listeners.append(callback)
        callback(self.current_account())

        def unsubscribe():
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    def _notify(self, account: Optional[AccountHandle]) -> None:
        for callback in list(g.get("account_listeners", [])):
            callback(account)


class SqlIdentityStore(IdentityStore):
    def __init__(
        self,
        db,
        registration_enabled: bool = True,
        sign_in_enabled: bool = True,
        max_failed_logins: int = 5,
        lockout_minutes: int = 15,
        bcrypt_rounds: int = 12,
    ):
        self.db = db
        self.registration_enabled = registration_enabled
        self.sign_in_enabled = sign_in_enabled
        self.max_failed_logins = max_failed_logins
        self.lockout_minutes = lockout_minutes
        self.bcrypt_rounds = bcrypt_rounds

    @classmethod
    def from_config(cls, db, config) -> "SqlIdentityStore":
        return cls(
            db,
            registration_enabled=config.get("REGISTRATION_ENABLED", True),
            sign_in_enabled=config.get("PASSWORD_SIGN_IN_ENABLED", True),
            max_failed_logins=config.get("MAX_FAILED_LOGINS", 5),
            lockout_minutes=config.get("LOCKOUT_MINUTES", 15),
            bcrypt_rounds=config.get("BCRYPT_ROUNDS", 12),
        )

    # --- passwords ---

    def _hash_password(self, password: str) -> str:
        # bcrypt only looks at the first 72 bytes
        password_bytes = password.encode("utf-8")[:72]
        return bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=self.bcrypt_rounds)).decode("utf-8")

    @staticmethod
    def _check_password(password: str, password_hash: str) -> bool:
        password_bytes = (password or "").encode("utf-8")[:72]
        return bcrypt.checkpw(password_bytes, password_hash.encode("utf-8"))

    # --- contract ---

    def verify_credential(self, email: str, password: str) -> AccountHandle:
        email = normalize_email(email)
        if not self.sign_in_enabled:
            raise IdentityError("operation-not-allowed", "password sign-in is disabled")
        if not EMAIL_RE.match(email):
            raise IdentityError("invalid-email")

        try:
            acct = Account.query.filter_by(email=email).first()
            if acct is None:
                raise IdentityError("user-not-found")

            now = datetime.utcnow()
            if acct.locked_until and acct.locked_until > now:
                raise IdentityError("too-many-requests")

            if not self._check_password(password, acct.password_hash):
                acct.failed_logins = (acct.failed_logins or 0) + 1
                if acct.failed_logins >= self.max_failed_logins:
                    acct.locked_until = now + timedelta(minutes=self.lockout_minutes)
                    acct.failed_logins = 0
                    logger.warning("[LOGIN] Locked %s for %s minutes", email, self.lockout_minutes)
                self.db.session.commit()
                raise IdentityError("wrong-password")

            acct.failed_logins = 0
            acct.locked_until = None
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise IdentityError("network-request-failed", str(e)) from e

        return self._sign_in(acct)

    def create_account(self, email: str, password: str) -> AccountHandle:
        email = normalize_email(email)
        if not self.registration_enabled:
            raise IdentityError("operation-not-allowed", "registration is disabled")
        if not EMAIL_RE.match(email):
            raise IdentityError("invalid-email")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise IdentityError("weak-password")

        try:
            if Account.query.filter_by(email=email).first():
                raise IdentityError("email-already-in-use")
            acct = Account(email=email, password_hash=self._hash_password(password))
            self.db.session.add(acct)
            self.db.session.commit()
        except IntegrityError as e:
            self.db.session.rollback()
            raise IdentityError("email-already-in-use") from e
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise IdentityError("network-request-failed", str(e)) from e

        logger.info("[LOGIN] Created account %s", acct.id)
        return self._sign_in(acct)

    def current_account(self) -> Optional[AccountHandle]:
        account_id = session.get("account_id")
        if not account_id:
            return None

        acct = self.db.session.get(Account, account_id)
        if acct is None:
            # stale cookie
            session.pop("account_id", None)
            return None
        return _handle_for(acct)

    def sign_out(self) -> None:
        session.pop("account_id", None)
        self._notify(None)

    def is_active(self) -> bool:
        try:
            self.db.session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            self.db.session.rollback()
            logger.exception("[LOGIN] Identity database is unreachable")
            return False

    def _sign_in(self, acct: Account) -> AccountHandle:
        session["account_id"] = acct.id
        handle = _handle_for(acct)
        self._notify(handle)
        return handle
