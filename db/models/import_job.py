"""
db/models/import_job.py

Import job model tracking one upload-to-completion attempt of the CSV pipeline.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import CheckConstraint, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, PortableJSON, TimestampMixin, UTCDateTime


class RecordType(str, enum.Enum):
    """
    Record families accepted by the import pipeline.
    """

    TRAFFIC_REPORT = "traffic_report"
    PLAYERS_DATA = "players_data"


class ImportJobStatus:
    PENDING = "pending"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({ImportJobStatus.COMPLETED, ImportJobStatus.FAILED})
ACTIVE_STATUSES = frozenset({ImportJobStatus.UPLOADING, ImportJobStatus.PROCESSING})

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    ImportJobStatus.PENDING: frozenset({ImportJobStatus.UPLOADING, ImportJobStatus.FAILED}),
    ImportJobStatus.UPLOADING: frozenset({ImportJobStatus.PROCESSING, ImportJobStatus.FAILED}),
    ImportJobStatus.PROCESSING: frozenset({ImportJobStatus.COMPLETED, ImportJobStatus.FAILED}),
    ImportJobStatus.COMPLETED: frozenset(),
    ImportJobStatus.FAILED: frozenset(),
}


class ImportJob(Base, TimestampMixin):
    __tablename__ = "import_jobs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    record_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="traffic_report, players_data",
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=ImportJobStatus.PENDING,
    )
    total_rows: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Data rows in the source file; unknown until the file is read",
    )
    processed_rows: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
    )
    error_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        comment="Total findings recorded, including those trimmed from errors",
    )
    error_severity_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        comment="Findings with error severity; warnings are not counted",
    )
    errors: Mapped[list[dict[str, Any]] | None] = mapped_column(
        PortableJSON,
        nullable=True,
        comment="Ordered validation findings, capped for display",
    )
    owner_id: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        comment="Opaque reference to the uploading user",
    )
    storage_path: Mapped[str | None] = mapped_column(
        String(512),
        nullable=True,
        comment="Temporary source artifact, removed once processing finishes",
    )
    started_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(),
        nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(),
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint("processed_rows >= 0", name="ck_import_jobs_processed_rows_non_negative"),
        CheckConstraint(
            "total_rows IS NULL OR processed_rows <= total_rows",
            name="ck_import_jobs_processed_within_total",
        ),
        Index("ix_import_jobs_status", "status"),
        Index("ix_import_jobs_record_type", "record_type"),
        Index("ix_import_jobs_created_at", "created_at"),
        Index("ix_import_jobs_record_type_status", "record_type", "status"),
    )
