from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import UTC, date, datetime
from typing import Any, Protocol
from uuid import uuid4

from sqlalchemy import Date, select

from sedation_chart.infrastructure.db import models_sqlalchemy as models
from sedation_chart.infrastructure.db.session import SessionFactory, session_scope

PATIENTS_TABLE = "patients"
IV_SEDATION_TABLE = "iv_sedation_forms"

_MODELS: dict[str, type[models.Base]] = {
    PATIENTS_TABLE: models.Patient,
    IV_SEDATION_TABLE: models.IvSedationForm,
}
_SERVER_COLUMNS = frozenset({"id", "created_at", "updated_at"})


class RemoteStore(Protocol):
    def create(self, table: str, record: Mapping[str, Any]) -> dict[str, Any]: ...

    def update(self, table: str, record_id: str, partial: Mapping[str, Any]) -> dict[str, Any]: ...

    def query(self, table: str, filters: Mapping[str, Any] | None = None) -> list[dict[str, Any]]: ...

    def delete(self, table: str, record_id: str) -> bool: ...


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _to_json(value: object, *, default: str) -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, default=str)


def _from_json(value: object, *, default: object) -> object:
    if value is None:
        return default
    if isinstance(value, (list, dict)):
        return value
    try:
        return json.loads(str(value))
    except ValueError:
        return default


def _parse_date(value: object) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def _model_for(table: str) -> type[models.Base]:
    model = _MODELS.get(table)
    if model is None:
        raise ValueError(f"Unknown table: {table}")
    return model


class SqlRemoteStore:
    """Record store over SQLAlchemy sessions.

    Ids and timestamps are assigned here, list values are kept as JSON text,
    keys that are not columns of the table are dropped.
    """

    def __init__(self, session_factory: SessionFactory = session_scope) -> None:
        self.session_factory = session_factory

    def create(self, table: str, record: Mapping[str, Any]) -> dict[str, Any]:
        model = _model_for(table)
        now = _utc_now()
        with self.session_factory() as session:
            row = model(id=str(uuid4()), created_at=now, updated_at=now)
            self._apply(row, record)
            session.add(row)
            session.flush()
            return self._to_record(row)

    def update(self, table: str, record_id: str, partial: Mapping[str, Any]) -> dict[str, Any]:
        model = _model_for(table)
        with self.session_factory() as session:
            row = session.get(model, record_id)
            if row is None:
                raise ValueError(f"Record {record_id} not found in {table}")
            self._apply(row, partial)
            row.updated_at = _utc_now()  # type: ignore[assignment]
            session.flush()
            return self._to_record(row)

    def query(self, table: str, filters: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        model = _model_for(table)
        columns = model.__table__.columns
        stmt = select(model)
        for key, value in (filters or {}).items():
            if key not in columns:
                raise ValueError(f"Unknown filter column for {table}: {key}")
            stmt = stmt.where(columns[key] == value)
        stmt = stmt.order_by(columns["updated_at"].desc())
        with self.session_factory() as session:
            return [self._to_record(row) for row in session.execute(stmt).scalars()]

    def delete(self, table: str, record_id: str) -> bool:
        model = _model_for(table)
        with self.session_factory() as session:
            row = session.get(model, record_id)
            if row is None:
                return False
            session.delete(row)
            return True

    def _apply(self, row: models.Base, values: Mapping[str, Any]) -> None:
        columns = type(row).__table__.columns
        for key, value in values.items():
            if key in _SERVER_COLUMNS or key not in columns:
                continue
            column = columns[key]
            if column.info.get("json"):
                value = _to_json(value, default="[]")
            elif isinstance(column.type, Date):
                value = _parse_date(value)
            setattr(row, key, value)

    def _to_record(self, row: models.Base) -> dict[str, Any]:
        record: dict[str, Any] = {}
        for column in type(row).__table__.columns:
            value = getattr(row, column.key)
            if column.info.get("json"):
                value = _from_json(value, default=[])
            record[column.key] = value
        return record
