"""
app/domain/imports.py

Domain models used by the CSV import pipeline.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any


class FindingSeverity:
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ValidationFinding:
    """
    One validation outcome tied to one cell of one row.

    ``row_number`` follows the source file's line numbering: the header is
    line 1, so the first data row is 2.
    """

    row_number: int
    column: str
    value: str
    message: str
    severity: str = FindingSeverity.ERROR

    @property
    def is_error(self) -> bool:
        return self.severity == FindingSeverity.ERROR

    def to_dict(self) -> dict[str, Any]:
        return {
            "row_number": self.row_number,
            "column": self.column,
            "value": self.value,
            "message": self.message,
            "severity": self.severity,
        }


@dataclass(frozen=True)
class ChunkLoadResult:
    """
    Outcome of one bulk insert.

    ``finding`` is set when the whole chunk was rejected by storage.
    """

    inserted_count: int
    finding: ValidationFinding | None = None


@dataclass(frozen=True)
class ImportResult:
    """
    End-of-run import summary returned to the caller.
    """

    success: bool
    status: str
    processed_rows: int
    successful_inserts: int
    error_count: int
    errors: list[ValidationFinding] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "status": self.status,
            "processed_rows": self.processed_rows,
            "successful_inserts": self.successful_inserts,
            "error_count": self.error_count,
            "errors": [finding.to_dict() for finding in self.errors],
        }


@dataclass(frozen=True)
class UploadRegistration:
    """
    Outcome of accepting an upload: the registered job and what was learned about the file.
    """

    job_id: uuid.UUID
    record_type: str
    status: str
    total_rows: int
    column_count: int
    preview: list[dict[str, str]] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
