"""
Repository-layer exceptions for import job and upload storage flows.
"""

from __future__ import annotations


class ImportRepositoryError(Exception):
    """Base exception for import repository failures."""


class ImportJobNotFoundError(ImportRepositoryError):
    """Raised when a referenced import job does not exist."""

    def __init__(self, job_id: object) -> None:
        super().__init__(f"Import job not found: {job_id}")
        self.job_id = job_id


class InvalidJobTransitionError(ImportRepositoryError):
    """Raised when a status change is not allowed by the job lifecycle."""

    def __init__(self, *, job_id: object, current: str, requested: str) -> None:
        super().__init__(
            f"Import job {job_id} cannot move from '{current}' to '{requested}'."
        )
        self.job_id = job_id
        self.current = current
        self.requested = requested


class JobProgressError(ImportRepositoryError):
    """Raised when a progress update would break the processed-rows invariant."""


class FileStorageError(ImportRepositoryError):
    """Raised when storing, reading or deleting an uploaded file fails."""
