"""
app/loaders/batch_loader.py

Chunked, idempotent insertion of transformed records.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.imports import ChunkLoadResult, ValidationFinding
from app.repositories.record_repository import RecordRepository
from db.models.import_job import RecordType

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 500


class BatchLoader:
    """
    Inserts one chunk at a time inside its own SAVEPOINT.

    A chunk that the database rejects is rolled back on its own and
    reported as a single finding; earlier and later chunks are unaffected.
    """

    def __init__(self, session: Session, repository: RecordRepository | None = None) -> None:
        self._session = session
        self._repository = repository or RecordRepository(session)

    def load_chunk(
        self,
        rows: Sequence[Mapping[str, Any]],
        record_type: RecordType,
        *,
        start_row: int,
        import_job_id: uuid.UUID | None = None,
    ) -> ChunkLoadResult:
        if not rows:
            return ChunkLoadResult(inserted_count=0)

        try:
            with self._session.begin_nested():
                inserted = self._repository.insert_ignore_duplicates(
                    record_type,
                    rows,
                    import_job_id=import_job_id,
                )
        except SQLAlchemyError:
            logger.exception(
                "Chunk insert failed record_type=%s start_row=%s size=%s",
                record_type.value,
                start_row,
                len(rows),
            )
            return ChunkLoadResult(
                inserted_count=0,
                finding=ValidationFinding(
                    row_number=start_row,
                    column="database",
                    value="chunk",
                    message=f"Database insertion failed for chunk starting at row {start_row}",
                ),
            )

        logger.info(
            "Chunk loaded record_type=%s start_row=%s size=%s inserted=%s duplicates=%s",
            record_type.value,
            start_row,
            len(rows),
            inserted,
            len(rows) - inserted,
        )
        return ChunkLoadResult(inserted_count=inserted)


def iter_chunks(items: Sequence[Any], chunk_size: int = DEFAULT_CHUNK_SIZE):
    """
    Yield ``(offset, chunk)`` pairs in source order.
    """

    size = max(1, chunk_size)
    for offset in range(0, len(items), size):
        yield offset, items[offset : offset + size]
