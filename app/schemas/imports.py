"""
app/schemas/imports.py

Response schemas for CSV import endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class ImportFindingResponse(BaseModel):
    """
    API response model for one validation finding.

    File-level failures carry no row, column or value.
    """

    row_number: int | None = Field(default=None, ge=1)
    column: str | None = None
    value: str | None = None
    message: str
    severity: str = "error"


class ImportUploadResponse(BaseModel):
    job_id: UUID
    record_type: str
    status: str
    filename: str
    total_rows: int = Field(..., ge=0)
    column_count: int = Field(..., ge=0)
    preview: list[dict[str, str]] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)


class ImportResultResponse(BaseModel):
    job_id: UUID
    success: bool
    status: str
    processed_rows: int = Field(..., ge=0)
    successful_inserts: int = Field(..., ge=0)
    error_count: int = Field(..., ge=0)
    errors: list[ImportFindingResponse] = Field(default_factory=list)


class ImportJobStatusResponse(BaseModel):
    job_id: UUID
    record_type: str
    filename: str
    status: str
    total_rows: int | None = None
    processed_rows: int = Field(..., ge=0)
    progress_percent: float = Field(..., ge=0, le=100)
    is_active: bool
    error_count: int = Field(..., ge=0)
    errors: list[ImportFindingResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    processing_seconds: float | None = None


class ImportJobListResponse(BaseModel):
    jobs: list[ImportJobStatusResponse] = Field(default_factory=list)


def finding_response(payload: dict[str, Any]) -> ImportFindingResponse:
    return ImportFindingResponse(
        row_number=payload.get("row_number"),
        column=payload.get("column"),
        value=payload.get("value"),
        message=str(payload.get("message") or ""),
        severity=str(payload.get("severity") or "error"),
    )
