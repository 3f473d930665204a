"""
app/api/routers/imports.py

CSV import HTTP endpoints.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_csv_upload
from app.schemas.imports import (
    ImportJobListResponse,
    ImportJobStatusResponse,
    ImportResultResponse,
    ImportUploadResponse,
    finding_response,
)
from app.services.csv_import_service import CSVImportService, get_csv_import_service
from app.services.errors import ImportFileError, JobNotReadyError
from db.models.import_job import ACTIVE_STATUSES, ImportJob, ImportJobStatus, RecordType
from db.repositories.errors import ImportJobNotFoundError, InvalidJobTransitionError
from db.session import get_db

router = APIRouter(prefix="/imports", tags=["imports"])


@router.post("/upload", response_model=ImportUploadResponse, status_code=status.HTTP_201_CREATED)
def upload_import_file(
    file: UploadFile = Depends(get_csv_upload),
    record_type: RecordType | None = Query(
        default=None,
        description="Record type of the file; detected from the headers when omitted",
    ),
    owner_id: str | None = Query(default=None, description="Optional uploader reference"),
    db: Session = Depends(get_db),
    import_service: CSVImportService = Depends(get_csv_import_service),
) -> ImportUploadResponse:
    """
    Store one CSV file and register an import job for it.
    """

    filename = file.filename or "upload.csv"
    try:
        content = file.file.read()
        registration = import_service.register_upload(
            db,
            filename=filename,
            content=content,
            record_type=record_type,
            owner_id=owner_id,
        )
    except ImportFileError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
    finally:
        file.file.close()

    return ImportUploadResponse(
        job_id=registration.job_id,
        record_type=registration.record_type,
        status=registration.status,
        filename=filename,
        total_rows=registration.total_rows,
        column_count=registration.column_count,
        preview=registration.preview,
        notes=registration.notes,
    )


@router.post("/{job_id}/process", response_model=ImportResultResponse)
def process_import_job(
    job_id: UUID,
    db: Session = Depends(get_db),
    import_service: CSVImportService = Depends(get_csv_import_service),
) -> ImportResultResponse:
    """
    Run the import pipeline for an uploaded job.
    """

    try:
        result = import_service.process_stored_upload(db, job_id)
    except ImportJobNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (JobNotReadyError, InvalidJobTransitionError) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ImportFileError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc

    return ImportResultResponse(
        job_id=job_id,
        success=result.success,
        status=result.status,
        processed_rows=result.processed_rows,
        successful_inserts=result.successful_inserts,
        error_count=result.error_count,
        errors=[finding_response(finding.to_dict()) for finding in result.errors],
    )


@router.get("/{job_id}", response_model=ImportJobStatusResponse)
def get_import_job(
    job_id: UUID,
    db: Session = Depends(get_db),
    import_service: CSVImportService = Depends(get_csv_import_service),
) -> ImportJobStatusResponse:
    try:
        job = import_service.get_job(db, job_id)
    except ImportJobNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _to_status_response(job)


@router.get("", response_model=ImportJobListResponse)
def list_import_jobs(
    status_filter: str | None = Query(default=None, alias="status", description="Optional job status"),
    record_type: RecordType | None = Query(default=None, description="Optional record type"),
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
    import_service: CSVImportService = Depends(get_csv_import_service),
) -> ImportJobListResponse:
    jobs = import_service.list_jobs(
        db,
        limit=limit,
        record_type=record_type.value if record_type else None,
        status=status_filter,
    )
    return ImportJobListResponse(jobs=[_to_status_response(job) for job in jobs])


def _progress_percent(job: ImportJob) -> float:
    if job.total_rows:
        return round(min(100.0, job.processed_rows * 100.0 / job.total_rows), 2)
    return 100.0 if job.status == ImportJobStatus.COMPLETED else 0.0


def _processing_seconds(job: ImportJob) -> float | None:
    started_at = job.started_at
    if started_at is None:
        return None
    finished_at = job.completed_at or datetime.now(timezone.utc)
    return max(0.0, (finished_at - started_at).total_seconds())


def _to_status_response(job: ImportJob) -> ImportJobStatusResponse:
    return ImportJobStatusResponse(
        job_id=job.id,
        record_type=job.record_type,
        filename=job.filename,
        status=job.status,
        total_rows=job.total_rows,
        processed_rows=job.processed_rows,
        progress_percent=_progress_percent(job),
        is_active=job.status in ACTIVE_STATUSES,
        error_count=job.error_count,
        errors=[finding_response(payload) for payload in job.errors or []],
        created_at=job.created_at,
        updated_at=job.updated_at,
        started_at=job.started_at,
        completed_at=job.completed_at,
        processing_seconds=_processing_seconds(job),
    )
