"""Record store clients.

The store offers point reads, single-record writes and single queries only.
There is no batching and no multi-record transaction: every write below
commits on its own.
"""

import logging
from typing import Any, Protocol

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from src.config import get_settings
from src.models.article import Article
from src.models.category import Category
from src.services.errors import StoreError

logger = logging.getLogger(__name__)

Record = dict[str, Any]
Records = list[Record]


class RecordStore(Protocol):
    """Single-record operations against a hosted collection store."""

    def list(self, collection: str, order_by: str | None = None) -> Records: ...

    def get(self, collection: str, record_id: str) -> Record | None: ...

    def insert(self, collection: str, fields: Record) -> Record: ...

    def update(self, collection: str, record_id: str, fields: Record) -> None: ...

    def delete(self, collection: str, record_id: str) -> None: ...

    def query(
        self, collection: str, filters: Record, limit: int | None = None
    ) -> Records: ...

    def close(self) -> None: ...


def default_tables() -> dict[str, type]:
    """Map configured collection names to their SQLAlchemy models."""
    settings = get_settings()
    return {
        settings.categories_collection: Category,
        settings.articles_collection: Article,
    }


def _describe(error: SQLAlchemyError) -> str:
    """The driver's message without the statement and parameters SQLAlchemy appends."""
    original = getattr(error, "orig", None)
    return str(original) if original is not None else type(error).__name__


def _row_to_record(row: Any) -> Record:
    return {attr.key: getattr(row, attr.key) for attr in inspect(row).mapper.column_attrs}


class SqlRecordStore:
    """Record store backed by SQLAlchemy tables.

    Every call opens its own short-lived session, so a write is durable as
    soon as the call returns.
    """

    def __init__(self, session_factory: sessionmaker, tables: dict[str, type] | None = None):
        self.session_factory = session_factory
        self.tables = tables or default_tables()

    def close(self) -> None:
        # Sessions are closed per call; nothing is held between calls.
        pass

    def _model(self, collection: str) -> type:
        try:
            return self.tables[collection]
        except KeyError:
            raise StoreError(f"Unknown collection '{collection}'") from None

    def list(self, collection: str, order_by: str | None = None) -> Records:
        model = self._model(collection)
        try:
            with self.session_factory() as db:
                query = db.query(model)
                if order_by:
                    query = query.order_by(getattr(model, order_by).asc())
                return [_row_to_record(row) for row in query.all()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to list {collection}: {e}")
            raise StoreError(_describe(e)) from e

    def get(self, collection: str, record_id: str) -> Record | None:
        model = self._model(collection)
        try:
            with self.session_factory() as db:
                row = db.get(model, record_id)
                return _row_to_record(row) if row is not None else None
        except SQLAlchemyError as e:
            raise StoreError(_describe(e)) from e

    def insert(self, collection: str, fields: Record) -> Record:
        model = self._model(collection)
        try:
            with self.session_factory() as db:
                row = model(**fields)
                db.add(row)
                db.commit()
                db.refresh(row)
                return _row_to_record(row)
        except SQLAlchemyError as e:
            logger.error(f"Failed to insert into {collection}: {e}")
            raise StoreError(_describe(e)) from e

    def update(self, collection: str, record_id: str, fields: Record) -> None:
        model = self._model(collection)
        try:
            with self.session_factory() as db:
                updated = (
                    db.query(model)
                    .filter(model.id == record_id)
                    .update(fields, synchronize_session=False)
                )
                if not updated:
                    raise StoreError(f"{collection} record {record_id} not found")
                db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to update {collection} record {record_id}: {e}")
            raise StoreError(_describe(e)) from e

    def delete(self, collection: str, record_id: str) -> None:
        model = self._model(collection)
        try:
            with self.session_factory() as db:
                deleted = (
                    db.query(model)
                    .filter(model.id == record_id)
                    .delete(synchronize_session=False)
                )
                if not deleted:
                    raise StoreError(f"{collection} record {record_id} not found")
                db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete {collection} record {record_id}: {e}")
            raise StoreError(_describe(e)) from e

    def query(self, collection: str, filters: Record, limit: int | None = None) -> Records:
        model = self._model(collection)
        try:
            with self.session_factory() as db:
                query = db.query(model).filter_by(**filters)
                if limit is not None:
                    query = query.limit(limit)
                return [_row_to_record(row) for row in query.all()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to query {collection}: {e}")
            raise StoreError(_describe(e)) from e
