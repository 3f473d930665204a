"""
Repository layer exports.
"""

from db.repositories.errors import (
    FileStorageError,
    ImportJobNotFoundError,
    ImportRepositoryError,
    InvalidJobTransitionError,
    JobProgressError,
)
from db.repositories.import_job_repository import ImportJobRepository
from db.repositories.storage import FileStorageBackend, LocalFileStorage
from db.repositories.types import StoredFileMetadata

__all__ = [
    "ImportJobRepository",
    "FileStorageBackend",
    "LocalFileStorage",
    "StoredFileMetadata",
    "ImportRepositoryError",
    "ImportJobNotFoundError",
    "InvalidJobTransitionError",
    "JobProgressError",
    "FileStorageError",
]
