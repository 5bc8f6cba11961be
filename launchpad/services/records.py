"""
Record store: named collections of documents over SQLAlchemy tables.

Documents are plain dicts keyed by the wire field names the admin views
read (``userId``, ``submittedAt``, ...). Reads add the document ``id``.
"""
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError, TimeoutError as PoolTimeoutError

from launchpad.errors import StoreError
from launchpad.models import LoginActivity, Submission

logger = logging.getLogger(__name__)


class _ServerTimestamp:
    def __repr__(self):
        return "SERVER_TIMESTAMP"


# Put this in a document field to have the store stamp the write time
SERVER_TIMESTAMP = _ServerTimestamp()

COLLECTIONS = {
    "submissions": Submission,
    "userLogins": LoginActivity,
}


class RecordStore:
    """Base class for record backends."""

    def insert(self, collection: str, document: dict) -> str:
        raise NotImplementedError

    def insert_if_absent(self, collection: str, document: dict, key: str) -> Optional[str]:
        raise NotImplementedError

    def query(self, collection: str, filters: Iterable = (), order_by=None, limit: Optional[int] = None) -> list:
        raise NotImplementedError

    def delete(self, collection: str, doc_id: str) -> None:
        raise NotImplementedError

    def is_active(self) -> bool:
        raise NotImplementedError


class SqlRecordStore(RecordStore):
    def __init__(self, db, policy=None):
        self.db = db
        self.policy = policy

    # --- mapping helpers ---

    @staticmethod
    def _model(collection: str):
        model = COLLECTIONS.get(collection)
        if model is None:
            raise StoreError("invalid-argument", f"unknown collection {collection!r}")
        return model

    @staticmethod
    def _column(model, field: str):
        attr = model.FIELDS.get(field)
        if attr is None:
            raise StoreError("invalid-argument", f"unknown field {field!r} on {model.__tablename__}")
        return getattr(model, attr)

    @staticmethod
    def _row_values(model, document: dict) -> dict:
        values = {}
        for field, value in document.items():
            attr = model.FIELDS.get(field)
            if attr is None:
                raise StoreError("invalid-argument", f"unknown field {field!r} on {model.__tablename__}")
            allowed = getattr(model, "CHOICES", {}).get(field)
            if allowed is not None and value not in allowed:
                raise StoreError("invalid-argument", f"{field} must be one of {', '.join(allowed)}")
            if value is SERVER_TIMESTAMP:
                value = datetime.now(timezone.utc)
            values[attr] = value
        return values

    @staticmethod
    def _document(model, row) -> dict:
        doc = {"id": row.id}
        for field, attr in model.FIELDS.items():
            doc[field] = getattr(row, attr)
        return doc

    def _check(self, action: str, collection: str, filters=(), document=None) -> None:
        if self.policy is not None:
            self.policy.check(action, collection, filters=filters, document=document)

    def _commit_row(self, row) -> None:
        self.db.session.add(row)
        self.db.session.commit()

    def _failed(self, e: SQLAlchemyError) -> StoreError:
        self.db.session.rollback()
        if isinstance(e, PoolTimeoutError):
            return StoreError("deadline-exceeded", str(e))
        return StoreError("unavailable", str(e))

    # --- contract ---

    def insert(self, collection: str, document: dict) -> str:
        self._check("insert", collection, document=document)
        model = self._model(collection)
        row = model(**self._row_values(model, document))
        try:
            self._commit_row(row)
        except IntegrityError as e:
            self.db.session.rollback()
            raise StoreError("already-exists", str(e.orig)) from e
        except SQLAlchemyError as e:
            raise self._failed(e) from e
        return row.id

    def insert_if_absent(self, collection: str, document: dict, key: str) -> Optional[str]:
        """
        Insert unless a document with the same ``key`` value exists.
        Returns the new id, or None when one was already there.
        """
        self._check("insert", collection, document=document)
        model = self._model(collection)
        column = self._column(model, key)
        try:
            if model.query.filter(column == document.get(key)).first() is not None:
                return None
            row = model(**self._row_values(model, document))
            self._commit_row(row)
        except IntegrityError as e:
            self.db.session.rollback()
            try:
                winner = model.query.filter(column == document.get(key)).first()
            except SQLAlchemyError as err:
                raise self._failed(err) from err
            if winner is None:
                # some other constraint rejected the row; nothing was written
                logger.error("[RECORDS] %s row for %s=%s rejected: %s", collection, key, document.get(key), e.orig)
                raise StoreError("invalid-argument", str(e.orig)) from e
            logger.info("[RECORDS] %s row for %s=%s already written concurrently", collection, key, document.get(key))
            return None
        except SQLAlchemyError as e:
            raise self._failed(e) from e
        return row.id

    def query(self, collection: str, filters: Iterable = (), order_by=None, limit: Optional[int] = None) -> list:
        filters = [tuple(f) for f in filters]
        self._check("read", collection, filters=filters)
        model = self._model(collection)

        q = model.query
        for field, op, value in filters:
            if op != "==":
                raise StoreError("invalid-argument", f"unsupported operator {op!r}")
            q = q.filter(self._column(model, field) == value)

        if order_by:
            field, direction = order_by
            column = self._column(model, field)
            q = q.order_by(column.desc() if direction == "desc" else column.asc())

        if limit is not None:
            q = q.limit(limit)

        try:
            rows = q.all()
        except SQLAlchemyError as e:
            raise self._failed(e) from e
        return [self._document(model, row) for row in rows]

    def delete(self, collection: str, doc_id: str) -> None:
        self._check("delete", collection)
        model = self._model(collection)
        try:
            row = self.db.session.get(model, doc_id)
            if row is None:
                raise StoreError("not-found", f"{collection}/{doc_id} does not exist")
            self.db.session.delete(row)
            self.db.session.commit()
        except SQLAlchemyError as e:
            raise self._failed(e) from e

    def is_active(self) -> bool:
        try:
            self.db.session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            self.db.session.rollback()
            logger.exception("[RECORDS] Record database is unreachable")
            return False
