"""Record store consumed by the ledger services.

Wraps a SQLAlchemy session behind a small collection/index interface so
the services never touch query construction directly, and so a single
``atomic()`` block can cover every write of a multi-step operation.
"""
from contextlib import contextmanager

from models import Account, Bet, Transaction, Setting

COLLECTIONS = {
    'accounts': Account,
    'bets': Bet,
    'transactions': Transaction,
    'settings': Setting,
}

INDEXES = {
    'accounts': ('name',),
    'bets': ('account_id', 'status', 'event_date'),
    'transactions': ('account_id', 'type', 'timestamp'),
    'settings': (),
}


class RecordStore:
    """CRUD plus secondary-index lookups over the ledger collections."""

    def __init__(self, session):
        self.session = session
        self._depth = 0

    def _model(self, collection):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise KeyError(f'Unknown collection: {collection}') from None

    def create(self, collection, record):
        """Persist a new record and return its generated id."""
        model = self._model(collection)
        if not isinstance(record, model):
            record = model(**record)
        self.session.add(record)
        self.session.flush()
        self._commit()
        return record.id

    def update(self, collection, record):
        model = self._model(collection)
        if not isinstance(record, model):
            raise TypeError(f'Expected a {model.__name__} record')
        if record.id is None:
            raise ValueError(f'{model.__name__} record must carry its id to be updated')
        self.session.add(record)
        self.session.flush()
        self._commit()

    def delete(self, collection, record_id):
        record = self.get_by_id(collection, record_id)
        if record is not None:
            self.session.delete(record)
            self.session.flush()
            self._commit()

    def get_by_id(self, collection, record_id):
        model = self._model(collection)
        if record_id is None:
            return None
        return self.session.get(model, record_id)

    def get_all(self, collection):
        model = self._model(collection)
        return self.session.query(model).order_by(*model.__mapper__.primary_key).all()

    def get_by_index(self, collection, index_name, value):
        model = self._model(collection)
        if index_name not in INDEXES[collection]:
            raise KeyError(f'Unknown index {index_name!r} on {collection}')
        column = getattr(model, index_name)
        return self.session.query(model).filter(column == value).order_by(model.id).all()

    @contextmanager
    def atomic(self):
        """Group every write inside the block into one commit.

        Nested blocks join the outermost one. Any exception rolls back
        all writes made since the outermost block was entered.
        """
        self._depth += 1
        try:
            yield self
        except Exception:
            self._depth -= 1
            if self._depth == 0:
                self.session.rollback()
            raise
        self._depth -= 1
        self._commit()

    def _commit(self):
        # Writes outside a unit of work commit one by one.
        if self._depth == 0:
            try:
                self.session.commit()
            except Exception:
                self.session.rollback()
                raise
