"""
services/alert_store.py

Record store for alert documents.

A narrow capability over the alerts table:
- insert(document) -> generated id
- find_many(filter, sort) / find_one(filter) -> plain dict documents
- update_fields(filter, fields, touch) -> matched / modified counts
- delete_one(filter) -> deleted count

Documents are dicts keyed by the JSON field names ("from", "roundTrip", ...).
The store does not interpret field semantics; validation lives in
services/validators.py. One engine is built at startup and shared by every
request until shutdown.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple
from uuid import uuid4

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db import Base, build_engine, build_session_factory
from models import DOCUMENT_ATTRS, FlightAlert, alert_to_document

logger = logging.getLogger("alert_store")

ASCENDING = 1
DESCENDING = -1


class StoreError(Exception):
    """Any failure of the underlying database."""


class UpdateResult(NamedTuple):
    matched_count: int
    modified_count: int


class DeleteResult(NamedTuple):
    deleted_count: int


def generate_alert_id() -> str:
    return uuid4().hex[:24]


def _column_for(field: str):
    attr = DOCUMENT_ATTRS.get(field)
    if attr is None:
        raise StoreError(f"Unknown alert field: {field}")
    return getattr(FlightAlert, attr)


class AlertStore:
    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = build_session_factory(engine)

    @classmethod
    def from_url(cls, url: str) -> "AlertStore":
        return cls(build_engine(url))

    # =====================================================================
    # SECTION: LIFECYCLE
    # =====================================================================

    def create_schema(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def close(self) -> None:
        self.engine.dispose()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("[alert_store] database error")
            raise StoreError(str(e)) from e
        finally:
            db.close()

    def _query(self, db: Session, filter: Dict[str, Any]):
        query = db.query(FlightAlert)
        for field, value in filter.items():
            query = query.filter(_column_for(field) == value)
        return query

    # =====================================================================
    # SECTION: OPERATIONS
    # =====================================================================

    def insert(self, document: Dict[str, Any]) -> str:
        alert_id = generate_alert_id()
        values = {DOCUMENT_ATTRS[k]: v for k, v in document.items() if k in DOCUMENT_ATTRS and k != "id"}

        with self._session() as db:
            db.add(FlightAlert(id=alert_id, **values))
            db.commit()

        return alert_id

    def find_many(
        self,
        filter: Dict[str, Any],
        sort: Optional[Sequence[Tuple[str, int]]] = None,
    ) -> List[Dict[str, Any]]:
        with self._session() as db:
            query = self._query(db, filter)
            for field, direction in sort or ():
                column = _column_for(field)
                query = query.order_by(column.desc() if direction == DESCENDING else column.asc())
            return [alert_to_document(a) for a in query.all()]

    def find_one(self, filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._session() as db:
            alert = self._query(db, filter).first()
            return alert_to_document(alert) if alert else None

    def update_fields(
        self,
        filter: Dict[str, Any],
        fields: Dict[str, Any],
        touch: Optional[Dict[str, Any]] = None,
    ) -> UpdateResult:
        """
        Set fields on the first matching document.

        modified_count is 1 only when a value in `fields` differs from what
        is stored. `touch` values (timestamps) are always written but never
        count as a modification.
        """
        with self._session() as db:
            alert = self._query(db, filter).first()
            if alert is None:
                return UpdateResult(0, 0)

            changed = False
            for field, value in fields.items():
                attr = DOCUMENT_ATTRS[field]
                if getattr(alert, attr) != value:
                    setattr(alert, attr, value)
                    changed = True

            for field, value in (touch or {}).items():
                setattr(alert, DOCUMENT_ATTRS[field], value)

            db.commit()
            return UpdateResult(1, 1 if changed else 0)

    def delete_one(self, filter: Dict[str, Any]) -> DeleteResult:
        with self._session() as db:
            alert = self._query(db, filter).first()
            if alert is None:
                return DeleteResult(0)
            db.delete(alert)
            db.commit()
            return DeleteResult(1)
