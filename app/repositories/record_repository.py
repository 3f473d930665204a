"""
app/repositories/record_repository.py

Bulk persistence of imported traffic and player records.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from app.mappers.field_mapper import FIELD_COLUMNS
from db.base import Base
from db.models.import_job import RecordType
from db.models.player_record import PLAYER_RECORD_NATURAL_KEY, PlayerRecord
from db.models.traffic_report import TRAFFIC_REPORT_NATURAL_KEY, TrafficReport


@dataclass(frozen=True)
class RecordTarget:
    model: type[Base]
    constraint: str
    natural_key: tuple[str, ...]


RECORD_TARGETS: dict[RecordType, RecordTarget] = {
    RecordType.TRAFFIC_REPORT: RecordTarget(
        model=TrafficReport,
        constraint="uq_traffic_reports_natural_key",
        natural_key=TRAFFIC_REPORT_NATURAL_KEY,
    ),
    RecordType.PLAYERS_DATA: RecordTarget(
        model=PlayerRecord,
        constraint="uq_player_records_natural_key",
        natural_key=PLAYER_RECORD_NATURAL_KEY,
    ),
}


class RecordRepository:
    """
    Repository for idempotent multi-row inserts keyed on each record's natural key.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def insert_ignore_duplicates(
        self,
        record_type: RecordType,
        payloads: Sequence[Mapping[str, Any]],
        *,
        import_job_id: uuid.UUID | None = None,
    ) -> int:
        """
        Insert canonical payloads in one statement and return how many rows were new.

        Rows colliding with an existing natural key are skipped by the
        database; they are not counted and raise nothing.
        """

        if not payloads:
            return 0

        target = RECORD_TARGETS[record_type]
        rows = self._deduplicate_rows(
            [self._to_row(record_type, target, payload, import_job_id) for payload in payloads],
            natural_key=target.natural_key,
        )

        stmt = self._insert_ignoring_conflicts(target, rows).returning(target.model.id)
        return len(self._session.scalars(stmt).all())

    def count(self, record_type: RecordType) -> int:
        model = RECORD_TARGETS[record_type].model
        return int(self._session.scalar(select(func.count()).select_from(model)) or 0)

    def _insert_ignoring_conflicts(self, target: RecordTarget, rows: list[dict[str, Any]]) -> Any:
        dialect_name = self._session.get_bind().dialect.name
        if dialect_name == "postgresql":
            return (
                postgresql.insert(target.model)
                .values(rows)
                .on_conflict_do_nothing(constraint=target.constraint)
            )
        if dialect_name == "sqlite":
            return (
                sqlite.insert(target.model)
                .values(rows)
                .on_conflict_do_nothing(index_elements=list(target.natural_key))
            )
        raise RuntimeError(f"Unsupported database dialect for record import: {dialect_name}")

    def _to_row(
        self,
        record_type: RecordType,
        target: RecordTarget,
        payload: Mapping[str, Any],
        import_job_id: uuid.UUID | None,
    ) -> dict[str, Any]:
        # Multi-row VALUES needs identical keys on every row.
        table = target.model.__table__
        row: dict[str, Any] = {}
        for field_name, column_name in FIELD_COLUMNS[record_type].items():
            if field_name in payload:
                row[column_name] = payload[field_name]
            else:
                row[column_name] = _column_default(table.c[column_name])
        row["import_job_id"] = import_job_id
        return row

    def _deduplicate_rows(
        self,
        rows: Sequence[dict[str, Any]],
        *,
        natural_key: tuple[str, ...],
    ) -> list[dict[str, Any]]:
        seen: set[tuple[Any, ...]] = set()
        deduped: list[dict[str, Any]] = []
        for row in rows:
            key = tuple(row[column] for column in natural_key)
            if key in seen:
                continue
            seen.add(key)
            deduped.append(row)
        return deduped


def _column_default(column: Any) -> Any:
    default = column.default
    if default is not None and default.is_scalar:
        return default.arg
    return None
