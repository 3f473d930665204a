"""
Repository for import job lifecycle persistence and status lookup.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import Select, select, update
from sqlalchemy.orm import Session

from db.base import utc_now
from db.models.import_job import ALLOWED_TRANSITIONS, ImportJob, ImportJobStatus
from db.repositories.errors import ImportJobNotFoundError, InvalidJobTransitionError, JobProgressError


class ImportJobRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_job(
        self,
        *,
        record_type: str,
        filename: str,
        owner_id: str | None = None,
    ) -> ImportJob:
        job = ImportJob(
            record_type=record_type,
            filename=filename,
            owner_id=owner_id,
            status=ImportJobStatus.PENDING,
            processed_rows=0,
            error_count=0,
        )
        self._session.add(job)
        self._session.flush()
        self._session.refresh(job)
        return job

    def get_job(self, job_id: uuid.UUID) -> ImportJob | None:
        return self._session.get(ImportJob, job_id)

    def require_job(self, job_id: uuid.UUID) -> ImportJob:
        job = self.get_job(job_id)
        if job is None:
            raise ImportJobNotFoundError(job_id)
        return job

    def list_jobs(
        self,
        *,
        limit: int = 100,
        record_type: str | None = None,
        status: str | None = None,
    ) -> list[ImportJob]:
        stmt: Select[tuple[ImportJob]] = select(ImportJob)

        if record_type:
            stmt = stmt.where(ImportJob.record_type == record_type)
        if status:
            stmt = stmt.where(ImportJob.status == status)

        stmt = stmt.order_by(ImportJob.created_at.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())

    def list_stale_processing(self, *, updated_before: datetime) -> list[ImportJob]:
        stmt = (
            select(ImportJob)
            .where(ImportJob.status == ImportJobStatus.PROCESSING)
            .where(ImportJob.updated_at < updated_before)
            .order_by(ImportJob.updated_at)
        )
        return list(self._session.scalars(stmt).all())

    def mark_uploaded(
        self,
        *,
        job_id: uuid.UUID,
        total_rows: int | None,
        storage_path: str | None,
    ) -> ImportJob:
        job = self.require_job(job_id)
        self._transition(job, ImportJobStatus.UPLOADING)
        job.total_rows = total_rows
        job.storage_path = storage_path
        return job

    def claim_for_processing(self, *, job_id: uuid.UUID) -> ImportJob:
        """
        Move a job from uploading to processing with a conditional UPDATE.

        The status predicate is evaluated by the database, so two callers
        racing to process the same job cannot both succeed.
        """

        now = utc_now()
        result = self._session.execute(
            update(ImportJob)
            .where(ImportJob.id == job_id)
            .where(ImportJob.status == ImportJobStatus.UPLOADING)
            .values(status=ImportJobStatus.PROCESSING, started_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        job = self._session.get(ImportJob, job_id, populate_existing=True)
        if job is None:
            raise ImportJobNotFoundError(job_id)
        if result.rowcount != 1:
            raise InvalidJobTransitionError(
                job_id=job_id,
                current=job.status,
                requested=ImportJobStatus.PROCESSING,
            )
        return job

    def set_total_rows(self, *, job_id: uuid.UUID, total_rows: int) -> ImportJob:
        job = self.require_job(job_id)
        if total_rows < job.processed_rows:
            raise JobProgressError(
                f"total_rows={total_rows} is below processed_rows={job.processed_rows} for job {job_id}."
            )
        job.total_rows = total_rows
        return job

    def set_processed_rows(self, *, job_id: uuid.UUID, processed_rows: int) -> ImportJob:
        job = self.require_job(job_id)
        if processed_rows < job.processed_rows:
            raise JobProgressError(
                f"processed_rows cannot decrease ({job.processed_rows} -> {processed_rows}) for job {job_id}."
            )
        if job.total_rows is not None and processed_rows > job.total_rows:
            raise JobProgressError(
                f"processed_rows={processed_rows} exceeds total_rows={job.total_rows} for job {job_id}."
            )
        job.processed_rows = processed_rows
        return job

    def append_errors(
        self,
        *,
        job_id: uuid.UUID,
        errors: Sequence[dict[str, Any]],
        max_stored: int,
    ) -> ImportJob:
        job = self.require_job(job_id)
        if not errors:
            return job
        stored = list(job.errors or [])
        room = max(0, max_stored - len(stored))
        # Reassign so the JSON column is flagged dirty.
        job.errors = stored + list(errors[:room])
        job.error_count = (job.error_count or 0) + len(errors)
        job.error_severity_count = (job.error_severity_count or 0) + sum(
            1 for error in errors if error.get("severity", "error") == "error"
        )
        return job

    def mark_completed(self, *, job_id: uuid.UUID) -> ImportJob:
        job = self.require_job(job_id)
        self._transition(job, ImportJobStatus.COMPLETED)
        job.completed_at = utc_now()
        return job

    def mark_failed(
        self,
        *,
        job_id: uuid.UUID,
        error_message: str | None = None,
    ) -> ImportJob:
        job = self.require_job(job_id)
        self._transition(job, ImportJobStatus.FAILED)
        job.completed_at = utc_now()
        if error_message is not None:
            job.errors = [
                {
                    "row_number": None,
                    "column": None,
                    "value": None,
                    "message": error_message,
                    "severity": "error",
                }
            ]
            job.error_count = 1
            job.error_severity_count = 1
        return job

    def clear_storage_path(self, *, job_id: uuid.UUID) -> ImportJob:
        job = self.require_job(job_id)
        job.storage_path = None
        return job

    def _transition(self, job: ImportJob, requested: str) -> None:
        allowed = ALLOWED_TRANSITIONS.get(job.status, frozenset())
        if requested not in allowed:
            raise InvalidJobTransitionError(
                job_id=job.id,
                current=job.status,
                requested=requested,
            )
        job.status = requested
