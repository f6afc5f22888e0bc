"""Remote tier: the relational store reached through SQLAlchemy."""

from __future__ import annotations

import enum
import logging
from typing import Any

from sqlalchemy import DateTime, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..db.utils import parse_dt
from ..exceptions import NotFoundError, RemoteUnavailableError
from .base import EntitySpec, FetchResult, Record, Repository

logger = logging.getLogger(__name__)


class SqlRepository(Repository):
    """Repository over one ORM model.

    Every call runs in its own short transaction. Any database error
    (unreachable server, missing table, constraint or policy rejection) is
    reported as :class:`RemoteUnavailableError`, and so is a write whose values
    the remote cannot accept (e.g. an unparsable timestamp). A missing id is
    reported as :class:`NotFoundError`.
    """

    def __init__(self, session_factory: sessionmaker, spec: EntitySpec) -> None:
        self._session_factory = session_factory
        self.spec = spec
        self._model = spec.model
        self._columns = {column.key: column for column in self._model.__table__.columns}

    @property
    def table(self) -> str:
        return self.spec.name

    def create(self, data: Record) -> Record:
        try:
            with self._session_factory.begin() as session:
                obj = self._model(**self._coerce(data))
                session.add(obj)
                session.flush()
                record = obj.to_json()
        except (SQLAlchemyError, TypeError, ValueError) as exc:
            raise RemoteUnavailableError("insert", self.table, details={"error": str(exc)}) from exc
        logger.debug("Inserted %s %s", self.table, record["id"])
        return record

    def fetch_all(self) -> FetchResult:
        order_column = getattr(self._model, self.spec.order_field)
        stmt = select(self._model).order_by(order_column.desc(), self._model.id.desc())
        try:
            with self._session_factory() as session:
                records = [obj.to_json() for obj in session.scalars(stmt).all()]
        except SQLAlchemyError as exc:
            raise RemoteUnavailableError("select", self.table, details={"error": str(exc)}) from exc
        return FetchResult.of(records)

    def get(self, record_id: Any) -> Record:
        try:
            with self._session_factory() as session:
                obj = session.get(self._model, record_id)
                if obj is None:
                    raise NotFoundError(self.table, record_id)
                return obj.to_json()
        except SQLAlchemyError as exc:
            raise RemoteUnavailableError("select", self.table, details={"error": str(exc)}) from exc

    def update(self, record_id: Any, fields: Record) -> Record:
        try:
            with self._session_factory.begin() as session:
                obj = session.get(self._model, record_id)
                if obj is None:
                    raise NotFoundError(self.table, record_id)
                for key, value in self._coerce(fields).items():
                    setattr(obj, key, value)
                session.flush()
                record = obj.to_json()
        except (SQLAlchemyError, TypeError, ValueError) as exc:
            raise RemoteUnavailableError("update", self.table, details={"error": str(exc)}) from exc
        return record

    def delete(self, record_id: Any) -> None:
        try:
            with self._session_factory.begin() as session:
                obj = session.get(self._model, record_id)
                if obj is None:
                    raise NotFoundError(self.table, record_id)
                session.delete(obj)
        except SQLAlchemyError as exc:
            raise RemoteUnavailableError("delete", self.table, details={"error": str(exc)}) from exc
        logger.debug("Deleted %s %s", self.table, record_id)

    def _coerce(self, data: Record) -> dict[str, Any]:
        """Keep known columns (never ``id``) and turn ISO strings into datetimes."""
        values: dict[str, Any] = {}
        for key, value in data.items():
            column = self._columns.get(key)
            if column is None or key == "id":
                continue
            if isinstance(column.type, DateTime) and value is not None:
                value = parse_dt(value)
            elif isinstance(value, enum.Enum):
                value = value.value
            values[key] = value
        return values


__all__ = ["SqlRepository"]
