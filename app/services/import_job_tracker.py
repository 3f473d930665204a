"""
app/services/import_job_tracker.py

Import job lifecycle bookkeeping for the CSV import pipeline.

Every mutation is committed immediately so that pollers observe progress
while a job is still running.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from app.domain.imports import ValidationFinding
from app.logging_utils import log_event
from app.services.errors import JobNotReadyError
from db.models.import_job import ImportJob, ImportJobStatus, RecordType
from db.repositories.errors import InvalidJobTransitionError
from db.repositories.import_job_repository import ImportJobRepository

logger = logging.getLogger(__name__)

DEFAULT_MAX_STORED_FINDINGS = 1000


class ImportJobTracker:
    """
    Owns status transitions, progress counters and accumulated findings.
    """

    def __init__(
        self,
        session: Session,
        *,
        max_stored_findings: int = DEFAULT_MAX_STORED_FINDINGS,
        repository: ImportJobRepository | None = None,
    ) -> None:
        self._session = session
        self._max_stored_findings = max(1, max_stored_findings)
        self._repository = repository or ImportJobRepository(session)

    def register_job(
        self,
        *,
        record_type: RecordType,
        filename: str,
        owner_id: str | None = None,
    ) -> ImportJob:
        job = self._repository.create_job(
            record_type=record_type.value,
            filename=filename,
            owner_id=owner_id,
        )
        self._session.commit()
        self._log_status(job)
        return job

    def mark_uploaded(
        self,
        job_id: uuid.UUID,
        *,
        total_rows: int | None,
        storage_path: str | None,
    ) -> ImportJob:
        job = self._repository.mark_uploaded(
            job_id=job_id,
            total_rows=total_rows,
            storage_path=storage_path,
        )
        self._session.commit()
        self._log_status(job)
        return job

    def start_processing(self, job_id: uuid.UUID) -> ImportJob:
        """
        Claim a job for processing.

        Raises:
            ImportJobNotFoundError: when the job does not exist.
            JobNotReadyError: when the job is not in the uploading state.
        """

        try:
            job = self._repository.claim_for_processing(job_id=job_id)
        except InvalidJobTransitionError as exc:
            self._session.rollback()
            raise JobNotReadyError(job_id=job_id, current_status=exc.current) from exc
        self._session.commit()
        self._log_status(job)
        return job

    def set_total_rows(self, job_id: uuid.UUID, total_rows: int) -> ImportJob:
        job = self._repository.set_total_rows(job_id=job_id, total_rows=total_rows)
        self._session.commit()
        return job

    def advance(self, job_id: uuid.UUID, rows: int) -> ImportJob:
        job = self._repository.require_job(job_id)
        job = self._repository.set_processed_rows(
            job_id=job_id,
            processed_rows=job.processed_rows + max(0, rows),
        )
        self._session.commit()
        return job

    def record_findings(self, job_id: uuid.UUID, findings: Sequence[ValidationFinding]) -> ImportJob:
        job = self._repository.append_errors(
            job_id=job_id,
            errors=[finding.to_dict() for finding in findings],
            max_stored=self._max_stored_findings,
        )
        self._session.commit()
        return job

    def finish(self, job_id: uuid.UUID, *, successful_inserts: int) -> ImportJob:
        """
        Close a processing job.

        The job fails only when it produced error findings and inserted
        nothing; any successful insert makes the run ``completed``.
        """

        job = self._repository.require_job(job_id)
        if job.error_severity_count > 0 and successful_inserts == 0:
            job = self._repository.mark_failed(job_id=job_id)
        else:
            job = self._repository.mark_completed(job_id=job_id)
        self._session.commit()
        self._log_status(job, successful_inserts=successful_inserts)
        return job

    def fail(self, job_id: uuid.UUID, message: str) -> ImportJob:
        # Drop any half-applied work before recording the failure.
        self._session.rollback()
        job = self._repository.mark_failed(job_id=job_id, error_message=message)
        self._session.commit()
        self._log_status(job, message=message)
        return job

    def fail_stale_jobs(self, *, older_than: timedelta) -> list[ImportJob]:
        """
        Fail jobs stuck in processing with no progress for ``older_than``.
        """

        cutoff = datetime.now(timezone.utc) - older_than
        stale_jobs = self._repository.list_stale_processing(updated_before=cutoff)
        failed: list[ImportJob] = []
        for job in stale_jobs:
            message = f"Import job made no progress since {job.updated_at.isoformat()} and was abandoned."
            failed.append(self._repository.mark_failed(job_id=job.id, error_message=message))
        if failed:
            self._session.commit()
        for job in failed:
            self._log_status(job, reason="stale")
        return failed

    def get_job(self, job_id: uuid.UUID) -> ImportJob:
        return self._repository.require_job(job_id)

    def list_jobs(
        self,
        *,
        limit: int = 100,
        record_type: str | None = None,
        status: str | None = None,
    ) -> list[ImportJob]:
        return self._repository.list_jobs(limit=limit, record_type=record_type, status=status)

    def clear_storage_path(self, job_id: uuid.UUID) -> ImportJob:
        job = self._repository.clear_storage_path(job_id=job_id)
        self._session.commit()
        return job

    def _log_status(self, job: ImportJob, **fields: object) -> None:
        level = logging.WARNING if job.status == ImportJobStatus.FAILED else logging.INFO
        log_event(
            logger,
            level,
            "import_job_status",
            job_id=job.id,
            record_type=job.record_type,
            status=job.status,
            processed_rows=job.processed_rows,
            total_rows=job.total_rows,
            error_count=job.error_count,
            **fields,
        )
