"""
Generic relational read/write interface used by the order core.

Rows go in and come out as plain dicts keyed by column name, so callers never
touch SQLAlchemy models directly and tests can swap in a fake.
"""
import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from errors import StoreError
from models import (
    Discount, MenuItem, MenuOrder, OrderStub, PartyOrder, Profile,
    Reservation, TakeawayOrder,
)

logger = logging.getLogger(__name__)

TABLES = {
    "orders": OrderStub,
    "reservations": Reservation,
    "party_orders": PartyOrder,
    "takeaway_orders": TakeawayOrder,
    "menuorder": MenuOrder,
    "profiles": Profile,
    "discounts": Discount,
    "menu_items": MenuItem,
}

# never leaves the store
HIDDEN_COLUMNS = {"profiles": {"password"}}


def row_to_dict(table, row, columns=None):
    hidden = HIDDEN_COLUMNS.get(table, set())
    names = columns or [c.name for c in row.__table__.columns]
    return {name: getattr(row, name) for name in names if name not in hidden}


class Store:

    def __init__(self, session):
        self.session = session

    def fresh(self):
        """Store bound to the session of the current app context."""
        from extensions import db
        return Store(db.session)

    def _model(self, table):
        model = TABLES.get(table)
        if model is None:
            raise StoreError(f"Unknown table: {table}")
        return model

    def _check_columns(self, table, names):
        model = self._model(table)
        known = set(model.__table__.columns.keys())
        unknown = [n for n in names if n not in known]
        if unknown:
            raise StoreError(f"Unknown column(s) on {table}: {', '.join(unknown)}")
        return model

    def _query(self, table, filters):
        model = self._check_columns(table, list(filters or {}))
        return self.session.query(model).filter_by(**(filters or {}))

    def select(self, table, filters=None, columns=None, order_by=None):
        if columns:
            self._check_columns(table, columns)
        try:
            query = self._query(table, filters)
            if order_by:
                self._check_columns(table, [order_by.lstrip("-")])
                column = getattr(self._model(table), order_by.lstrip("-"))
                query = query.order_by(
                    column.desc() if order_by.startswith("-") else column.asc()
                )
            return [row_to_dict(table, row, columns) for row in query.all()]
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("select on %s failed: %s", table, e)
            raise StoreError(f"Failed to read {table}") from e

    def select_one(self, table, filters, columns=None):
        rows = self.select(table, filters, columns)
        return rows[0] if rows else None

    def count(self, table, filters=None):
        try:
            return self._query(table, filters).count()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(f"Failed to count {table}") from e

    def count_by(self, table, column):
        """Return {value: count} grouped by one column."""
        model = self._check_columns(table, [column])
        attr = getattr(model, column)
        try:
            rows = self.session.query(attr, func.count()).group_by(attr).all()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(f"Failed to count {table}") from e
        return {value: total for value, total in rows}

    def insert(self, table, rows):
        if isinstance(rows, dict):
            rows = [rows]
        model = self._model(table)
        for row in rows:
            self._check_columns(table, list(row))
        try:
            objects = [model(**row) for row in rows]
            self.session.add_all(objects)
            self.session.commit()
            return [row_to_dict(table, obj) for obj in objects]
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("insert into %s failed: %s", table, e)
            raise StoreError(f"Failed to insert into {table}") from e

    def update(self, table, patch, filters):
        self._check_columns(table, list(patch))
        try:
            affected = self._query(table, filters).update(
                patch, synchronize_session=False
            )
            self.session.commit()
            return affected
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("update on %s failed: %s", table, e)
            raise StoreError(f"Failed to update {table}") from e

    def delete(self, table, filters):
        try:
            affected = self._query(table, filters).delete(
                synchronize_session=False
            )
            self.session.commit()
            return affected
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("delete from %s failed: %s", table, e)
            raise StoreError(f"Failed to delete from {table}") from e
