"""
Content store backed by the application database.

Implements the ``ContentStore`` contract on top of Flask-SQLAlchemy. Rows
cross this boundary as plain dicts keyed by column name, with dates and
timestamps as ISO strings, the same shape the hosted store returns. Every
committed write is published on the store's ``ChangeFeed`` so that any
subscribed repository sees it, including ones that did not issue the write.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Optional, Sequence

import structlog
from flask import has_request_context
from flask_login import current_user
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from virtualmark.extensions import db
from virtualmark.models.content import CaseRow, PostRow
from virtualmark.store.base import (
    ChangeEvent,
    ChangeHandler,
    StoreError,
    StoreSession,
    WireRecord,
)
from virtualmark.store.feed import ChangeFeed, FeedSubscription

logger = structlog.get_logger(__name__)

SessionProvider = Callable[[], Optional[StoreSession]]

DEFAULT_TABLES: dict[str, type[db.Model]] = {
    "posts": PostRow,
    "cases": CaseRow,
}


def flask_login_session() -> Optional[StoreSession]:
    """Resolve the store session from the Flask-Login user of the current request."""
    if not has_request_context():
        return None
    if not current_user.is_authenticated:
        return None
    return StoreSession(
        user_id=current_user.public_id,
        username=current_user.username,
        is_admin=bool(current_user.is_admin),
    )


def _to_wire_value(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _python_type(column: Any) -> Any:
    try:
        return column.type.python_type
    except NotImplementedError:
        return None


def _integrity_code(exc: IntegrityError) -> str:
    detail = str(getattr(exc, "orig", exc)).lower()
    if "unique" in detail or "duplicate" in detail:
        return "23505"
    if "not null" in detail:
        return "23502"
    return "23000"


class SQLContentStore:
    def __init__(
        self,
        session_provider: SessionProvider = flask_login_session,
        tables: Optional[dict[str, type[db.Model]]] = None,
        feed: Optional[ChangeFeed] = None,
    ) -> None:
        self._session_provider = session_provider
        self._tables = dict(tables or DEFAULT_TABLES)
        self.feed = feed or ChangeFeed()

    # Table helpers

    def _model(self, table: str) -> type[db.Model]:
        model = self._tables.get(table)
        if model is None:
            raise StoreError("42P01", f'relation "{table}" does not exist')
        return model

    def _columns(self, model: type[db.Model]) -> dict[str, Any]:
        return {attr.key: attr.columns[0] for attr in sa_inspect(model).column_attrs}

    def _row_to_wire(self, row: db.Model) -> WireRecord:
        return {key: _to_wire_value(getattr(row, key)) for key in self._columns(type(row))}

    def _coerce(self, table: str, model: type[db.Model], record: WireRecord) -> dict[str, Any]:
        columns = self._columns(model)
        values: dict[str, Any] = {}
        for key, value in record.items():
            column = columns.get(key)
            if column is None:
                raise StoreError("PGRST204", f"Could not find the '{key}' column of '{table}'")
            python_type = _python_type(column)
            if isinstance(value, str) and python_type in (date, datetime):
                try:
                    value = python_type.fromisoformat(value)
                except ValueError:
                    raise StoreError("22007", f'invalid input syntax for type {python_type.__name__}: "{value}"')
            values[key] = value
        return values

    def _require_writer(self, table: str) -> StoreSession:
        session = self.get_session()
        if session is None:
            raise StoreError("401", "JWT required for writes")
        if not session.is_admin:
            raise StoreError("403", f'new row violates row-level security policy for table "{table}"')
        return session

    def _commit(self, table: str, action: str) -> None:
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            logger.warning("store_integrity_error", table=table, action=action, error=str(e.orig))
            raise StoreError(_integrity_code(e), str(e.orig))
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("store_write_failed", table=table, action=action, error=str(e))
            raise StoreError("500", "database error")

    def _get_row(self, model: type[db.Model], record_id: Any) -> Optional[db.Model]:
        if not record_id:
            return None
        return db.session.get(model, str(record_id))

    # Contract

    def select(
        self,
        table: str,
        filters: Optional[dict[str, Any]] = None,
        order: Optional[tuple[str, bool]] = None,
    ) -> list[WireRecord]:
        model = self._model(table)
        stmt = db.select(model)
        if filters:
            stmt = stmt.filter_by(**self._coerce(table, model, filters))
        if order:
            column, descending = order
            if column not in self._columns(model):
                raise StoreError("42703", f'column "{column}" does not exist')
            attr = getattr(model, column)
            stmt = stmt.order_by(attr.desc() if descending else attr.asc())
        try:
            rows = db.session.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            logger.error("store_select_failed", table=table, error=str(e))
            raise StoreError("500", "database error")
        return [self._row_to_wire(row) for row in rows]

    def insert(self, table: str, record: WireRecord) -> WireRecord:
        model = self._model(table)
        self._require_writer(table)
        values = self._coerce(table, model, record)
        if not values.get("id"):
            values.pop("id", None)
        row = model(**values)
        db.session.add(row)
        self._commit(table, "insert")
        stored = self._row_to_wire(row)
        logger.info("store_insert", table=table, record_id=stored["id"])
        self.feed.publish(ChangeEvent("insert", table, stored))
        return stored

    def update(self, table: str, record_id: str, changes: WireRecord) -> WireRecord:
        model = self._model(table)
        self._require_writer(table)
        row = self._get_row(model, record_id)
        if row is None:
            raise StoreError("PGRST116", "The result contains 0 rows")
        values = self._coerce(table, model, changes)
        values.pop("id", None)
        for key, value in values.items():
            setattr(row, key, value)
        self._commit(table, "update")
        stored = self._row_to_wire(row)
        logger.info("store_update", table=table, record_id=record_id, fields=sorted(values))
        self.feed.publish(ChangeEvent("update", table, stored))
        return stored

    def upsert(self, table: str, records: Sequence[WireRecord]) -> list[WireRecord]:
        model = self._model(table)
        self._require_writer(table)
        touched: list[tuple[str, db.Model]] = []
        with db.session.no_autoflush:
            for record in records:
                try:
                    values = self._coerce(table, model, record)
                except StoreError:
                    db.session.rollback()
                    raise
                row = self._get_row(model, values.get("id"))
                if row is None:
                    if not values.get("id"):
                        values.pop("id", None)
                    row = model(**values)
                    db.session.add(row)
                    touched.append(("insert", row))
                else:
                    values.pop("id", None)
                    for key, value in values.items():
                        setattr(row, key, value)
                    touched.append(("update", row))
        self._commit(table, "upsert")
        stored = [self._row_to_wire(row) for _, row in touched]
        logger.info("store_upsert", table=table, count=len(stored))
        for (change, _), data in zip(touched, stored):
            self.feed.publish(ChangeEvent(change, table, data))
        return stored

    def delete(self, table: str, record_id: str) -> None:
        model = self._model(table)
        self._require_writer(table)
        row = self._get_row(model, record_id)
        if row is None:
            # Deleting a missing row matches zero rows; not an error
            return
        old = self._row_to_wire(row)
        db.session.delete(row)
        self._commit(table, "delete")
        logger.info("store_delete", table=table, record_id=record_id)
        self.feed.publish(ChangeEvent("delete", table, old))

    def get_session(self) -> Optional[StoreSession]:
        return self._session_provider()

    def subscribe(self, table: str, handler: ChangeHandler) -> FeedSubscription:
        self._model(table)
        return self.feed.subscribe(table, handler)
