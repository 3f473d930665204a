"""
app/schemas package marker.
"""

from app.schemas.imports import (
    ImportFindingResponse,
    ImportJobListResponse,
    ImportJobStatusResponse,
    ImportResultResponse,
    ImportUploadResponse,
)

__all__ = [
    "ImportFindingResponse",
    "ImportJobListResponse",
    "ImportJobStatusResponse",
    "ImportResultResponse",
    "ImportUploadResponse",
]
