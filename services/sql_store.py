from contextlib import contextmanager
import logging

from flask import g
from sqlalchemy.exc import SQLAlchemyError

from api.exception import NotFoundError
from models import COLLECTIONS, db, to_dict
from services.store import EntityStore

logger = logging.getLogger(__name__)


def _columns(model):
    return {attr.key for attr in model.__mapper__.column_attrs}


class SqlEntityStore(EntityStore):
    """Real backend: one table per collection through the Flask-SQLAlchemy session."""

    def _model(self, collection):
        self._check_collection(collection)
        return COLLECTIONS[collection]

    @staticmethod
    def _depth():
        return g.get('_taskboard_tx_depth', 0)

    def _commit(self):
        # inside transaction() the outermost block commits
        if self._depth():
            db.session.flush()
            return
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise

    def insert(self, collection, record):
        model, pk = self._model(collection)
        allowed = _columns(model)
        row = model(**{k: v for k, v in record.items() if k in allowed})
        db.session.add(row)
        self._commit()
        return to_dict(row)

    def get(self, collection, record_id):
        model, _ = self._model(collection)
        row = db.session.get(model, record_id)
        return to_dict(row) if row is not None else None

    def find(self, collection, **equals):
        model, _ = self._model(collection)
        rows = model.query.filter_by(**equals).all()
        return [to_dict(row) for row in rows]

    def update(self, collection, record_id, changes):
        model, pk = self._model(collection)
        row = db.session.get(model, record_id)
        if row is None:
            raise NotFoundError(f"{collection} record '{record_id}' not found.")
        allowed = _columns(model) - {pk}
        for key, value in changes.items():
            if key in allowed:
                setattr(row, key, value)
        self._commit()
        return to_dict(row)

    def put(self, collection, record_id, record):
        model, pk = self._model(collection)
        row = db.session.get(model, record_id)
        allowed = _columns(model) - {pk}
        if row is None:
            row = model(**{pk: record_id})
            db.session.add(row)
        for key, value in record.items():
            if key in allowed:
                setattr(row, key, value)
        self._commit()
        return to_dict(row)

    def delete(self, collection, record_id):
        model, _ = self._model(collection)
        row = db.session.get(model, record_id)
        if row is None:
            return
        db.session.delete(row)
        self._commit()

    @contextmanager
    def transaction(self):
        g._taskboard_tx_depth = self._depth() + 1
        try:
            yield self
        except Exception:
            g._taskboard_tx_depth -= 1
            if not g._taskboard_tx_depth:
                db.session.rollback()
                logger.warning("Transaction rolled back")
            raise
        g._taskboard_tx_depth -= 1
        if not g._taskboard_tx_depth:
            self._commit()
