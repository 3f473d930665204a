"""
app/services/errors.py

Exceptions raised by the CSV import pipeline.
"""

from __future__ import annotations

import uuid

from fastapi import status


class ImportFileError(ValueError):
    """
    Raised when a whole file cannot be imported.

    The job is failed with ``message`` as its single error before the
    exception reaches the caller.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ImportFileReadError(ImportFileError):
    """
    Raised when the stored upload cannot be read back.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class CSVParseError(ImportFileError):
    """
    Raised when bytes cannot be decoded or split into CSV records.
    """


class EmptyImportFileError(ImportFileError):
    """
    Raised when a file has no header line or no data rows.
    """

    def __init__(self, message: str = "CSV must contain headers and at least one data row") -> None:
        super().__init__(message)


class MissingHeaderError(ImportFileError):
    """
    Raised when headers do not cover every natural-key field.
    """

    def __init__(self, missing_fields: list[str]) -> None:
        super().__init__(f"CSV is missing required columns: {', '.join(missing_fields)}")
        self.missing_fields = tuple(missing_fields)


class RecordTypeDetectionError(ImportFileError):
    """
    Raised when headers match no known record type.
    """

    def __init__(self, reasons: list[str]) -> None:
        super().__init__("Could not detect record type. " + " ".join(reasons))
        self.reasons = tuple(reasons)


class UploadTooLargeError(ImportFileError):
    """
    Raised when an upload exceeds the configured byte cap.
    """

    def __init__(self, max_bytes: int) -> None:
        super().__init__(f"CSV file exceeds the {max_bytes} byte upload limit.")
        self.max_bytes = max_bytes


class JobNotReadyError(RuntimeError):
    """
    Raised when a job is asked to process while not in the uploading state.
    """

    def __init__(self, *, job_id: uuid.UUID, current_status: str) -> None:
        super().__init__(f"Import job {job_id} is '{current_status}' and cannot be processed.")
        self.job_id = job_id
        self.current_status = current_status


class UploadStorageError(ImportFileError):
    """
    Raised when an accepted upload cannot be written to temporary storage.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
