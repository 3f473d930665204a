"""
Typed DTOs used by repository upload/storage flows.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class StoredFileMetadata:
    """
    Metadata produced by the storage backend after saving a file.
    """

    file_name: str
    storage_path: str
    file_size_bytes: int
    checksum: str
    stored_at: datetime
