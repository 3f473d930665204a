"""
app/domain package marker.
"""

from app.domain.imports import (
    ChunkLoadResult,
    FindingSeverity,
    ImportResult,
    UploadRegistration,
    ValidationFinding,
)

__all__ = [
    "ChunkLoadResult",
    "FindingSeverity",
    "ImportResult",
    "UploadRegistration",
    "ValidationFinding",
]
