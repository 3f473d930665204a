"""
app/services/csv_import_service.py

Service layer for the bulk CSV import pipeline.

An import runs in two steps. ``register_upload`` checks the file, detects
its record type, keeps a temporary copy and leaves the job in
``uploading``. ``process_job`` (or ``process_stored_upload``) then claims
the job and walks the rows in fixed-size chunks:

    raw bytes -> decode -> CSV parse -> per row validate -> transform
    -> one idempotent bulk insert per chunk -> progress commit

Row findings and rejected chunks are recorded on the job and never stop
the run. File-level problems fail the job and are re-raised.
"""

from __future__ import annotations

import logging
import uuid
from datetime import timedelta
from functools import lru_cache

from sqlalchemy.orm import Session

from app.config import ImportPipelineSettings, get_import_pipeline_settings
from app.domain.imports import ImportResult, UploadRegistration, ValidationFinding
from app.loaders.batch_loader import BatchLoader, iter_chunks
from app.mappers.field_mapper import missing_required_fields
from app.parsers.csv_reader import ParsedCSV, parse_csv_bytes
from app.services.errors import (
    EmptyImportFileError,
    ImportFileError,
    ImportFileReadError,
    JobNotReadyError,
    MissingHeaderError,
    RecordTypeDetectionError,
    UploadStorageError,
    UploadTooLargeError,
)
from app.services.import_job_tracker import ImportJobTracker
from app.services.record_type_detector import detect_record_type
from app.transformers.field_transformer import FieldTransformer
from app.validators.record_validator import RecordValidator
from db.models.import_job import ImportJob, ImportJobStatus, RecordType
from db.repositories.errors import FileStorageError
from db.repositories.storage import FileStorageBackend, LocalFileStorage

logger = logging.getLogger(__name__)


class CSVImportService:
    """
    Coordinates upload registration, row validation, transformation and chunked loading.
    """

    def __init__(
        self,
        *,
        settings: ImportPipelineSettings,
        storage: FileStorageBackend,
        validator: RecordValidator | None = None,
        transformer: FieldTransformer | None = None,
    ) -> None:
        self._settings = settings
        self._storage = storage
        self._validator = validator or RecordValidator()
        self._transformer = transformer or FieldTransformer()

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def register_upload(
        self,
        db: Session,
        *,
        filename: str,
        content: bytes,
        record_type: RecordType | None = None,
        owner_id: str | None = None,
    ) -> UploadRegistration:
        """
        Accept an uploaded file and leave its job ready for processing.

        Raises:
            UploadTooLargeError, EmptyImportFileError, CSVParseError,
            RecordTypeDetectionError: the file is rejected and no job is kept.
            UploadStorageError: the job is created but failed.
        """

        if len(content) > self._settings.max_upload_bytes:
            raise UploadTooLargeError(self._settings.max_upload_bytes)
        if not content.strip():
            raise EmptyImportFileError("Uploaded file is empty.")

        parsed = parse_csv_bytes(content)
        notes: list[str] = []
        if record_type is None:
            detection = detect_record_type(parsed.headers)
            if detection.record_type is None:
                raise RecordTypeDetectionError(detection.errors)
            record_type = detection.record_type
            notes.extend(detection.notes)

        tracker = self._tracker(db)
        job = tracker.register_job(record_type=record_type, filename=filename, owner_id=owner_id)

        try:
            stored = self._storage.save(job_id=job.id, file_name=filename, content=content)
        except FileStorageError as exc:
            message = "Uploaded file could not be stored."
            tracker.fail(job.id, message)
            raise UploadStorageError(message) from exc

        job = tracker.mark_uploaded(
            job.id,
            total_rows=parsed.total_rows,
            storage_path=stored.storage_path,
        )
        return UploadRegistration(
            job_id=job.id,
            record_type=record_type.value,
            status=job.status,
            total_rows=parsed.total_rows,
            column_count=len(parsed.headers),
            preview=parsed.preview(3),
            notes=notes,
        )

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def process_job(self, db: Session, job_id: uuid.UUID, content: bytes) -> ImportResult:
        """
        Import ``content`` into the record table of the job's type.

        Raises:
            ImportJobNotFoundError: unknown job.
            JobNotReadyError: job is not in ``uploading``.
            ImportFileError: file-level failure; the job is marked failed first.
        """

        tracker = self._tracker(db)
        job = tracker.start_processing(job_id)
        record_type = RecordType(job.record_type)

        try:
            parsed = self._parse_for_import(content, record_type)
        except ImportFileError as exc:
            logger.warning("Import job %s rejected: %s", job_id, exc.message)
            tracker.fail(job_id, exc.message)
            raise

        try:
            tracker.set_total_rows(job_id, parsed.total_rows)
            successful_inserts, displayed = self._load_rows(
                db,
                tracker=tracker,
                job_id=job_id,
                record_type=record_type,
                parsed=parsed,
            )
            job = tracker.finish(job_id, successful_inserts=successful_inserts)
        except Exception:
            logger.exception("Import job %s aborted by an unexpected error", job_id)
            tracker.fail(job_id, "Unexpected error while importing the file.")
            raise

        return ImportResult(
            success=job.status == ImportJobStatus.COMPLETED,
            status=job.status,
            processed_rows=job.processed_rows,
            successful_inserts=successful_inserts,
            error_count=job.error_count,
            errors=displayed,
        )

    def process_stored_upload(self, db: Session, job_id: uuid.UUID) -> ImportResult:
        """
        Process a job from its stored upload, then delete the temporary copy.
        """

        tracker = self._tracker(db)
        job = tracker.get_job(job_id)
        if job.status != ImportJobStatus.UPLOADING:
            raise JobNotReadyError(job_id=job_id, current_status=job.status)

        storage_path = job.storage_path
        if not storage_path:
            message = "Uploaded file is no longer available."
            tracker.fail(job_id, message)
            raise ImportFileReadError(message)

        try:
            content = self._storage.read(storage_path=storage_path)
        except FileStorageError as exc:
            message = "Uploaded file could not be read."
            tracker.fail(job_id, message)
            raise ImportFileReadError(message) from exc

        keep_artifact = False
        try:
            return self.process_job(db, job_id, content)
        except JobNotReadyError:
            # Another worker claimed the job and still needs the file.
            keep_artifact = True
            raise
        finally:
            if not keep_artifact:
                self._discard_artifact(tracker, job_id, storage_path)

    # ------------------------------------------------------------------
    # Status and maintenance
    # ------------------------------------------------------------------

    def get_job(self, db: Session, job_id: uuid.UUID) -> ImportJob:
        return self._tracker(db).get_job(job_id)

    def list_jobs(
        self,
        db: Session,
        *,
        limit: int = 100,
        record_type: str | None = None,
        status: str | None = None,
    ) -> list[ImportJob]:
        return self._tracker(db).list_jobs(limit=limit, record_type=record_type, status=status)

    def fail_stale_jobs(self, db: Session, *, older_than: timedelta) -> list[ImportJob]:
        return self._tracker(db).fail_stale_jobs(older_than=older_than)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _tracker(self, db: Session) -> ImportJobTracker:
        return ImportJobTracker(db, max_stored_findings=self._settings.max_stored_findings)

    def _parse_for_import(self, content: bytes, record_type: RecordType) -> ParsedCSV:
        parsed = parse_csv_bytes(content)
        missing = missing_required_fields(parsed.headers, record_type)
        if missing:
            raise MissingHeaderError(missing)
        return parsed

    def _load_rows(
        self,
        db: Session,
        *,
        tracker: ImportJobTracker,
        job_id: uuid.UUID,
        record_type: RecordType,
        parsed: ParsedCSV,
    ) -> tuple[int, list[ValidationFinding]]:
        loader = BatchLoader(db)
        headers = parsed.headers
        display_limit = self._settings.display_error_limit
        displayed: list[ValidationFinding] = []
        successful_inserts = 0

        for offset, chunk in iter_chunks(parsed.rows, self._settings.chunk_size):
            start_row = offset + 2
            payloads = []
            chunk_findings: list[ValidationFinding] = []

            for index, raw_row in enumerate(chunk):
                row_number = start_row + index
                row_findings = self._validator.validate_row(raw_row, headers, record_type, row_number)
                chunk_findings.extend(row_findings)
                if any(finding.is_error for finding in row_findings):
                    continue
                payloads.append(self._transformer.transform_row(raw_row, headers, record_type))

            outcome = loader.load_chunk(
                payloads,
                record_type,
                start_row=start_row,
                import_job_id=job_id,
            )
            successful_inserts += outcome.inserted_count
            if outcome.finding is not None:
                chunk_findings.append(outcome.finding)

            if chunk_findings:
                self._log_findings(job_id, chunk_findings)
                tracker.record_findings(job_id, chunk_findings)
                room = display_limit - len(displayed)
                if room > 0:
                    displayed.extend(chunk_findings[:room])

            tracker.advance(job_id, len(chunk))

        return successful_inserts, displayed

    def _log_findings(self, job_id: uuid.UUID, findings: list[ValidationFinding]) -> None:
        if not self._settings.log_validation_errors:
            return
        for finding in findings:
            logger.warning(
                "Import job %s row %s column=%s severity=%s: %s",
                job_id,
                finding.row_number,
                finding.column,
                finding.severity,
                finding.message,
            )

    def _discard_artifact(self, tracker: ImportJobTracker, job_id: uuid.UUID, storage_path: str) -> None:
        try:
            self._storage.delete(storage_path=storage_path)
        except FileStorageError:
            logger.warning("Could not delete stored upload %s for job %s", storage_path, job_id, exc_info=True)
            return
        tracker.clear_storage_path(job_id)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_csv_import_service() -> CSVImportService:
    """
    Build and cache the import service with env-driven settings.
    """

    settings = get_import_pipeline_settings()
    return CSVImportService(
        settings=settings,
        storage=LocalFileStorage(settings.upload_dir),
    )
