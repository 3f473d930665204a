"""
Storage backend abstractions for temporary import source files.
"""

from __future__ import annotations

import hashlib
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from db.repositories.errors import FileStorageError
from db.repositories.types import StoredFileMetadata


class FileStorageBackend(Protocol):
    """
    Abstract storage backend holding an upload until its job is processed.
    """

    def save(self, *, job_id: uuid.UUID, file_name: str, content: bytes) -> StoredFileMetadata:
        ...

    def read(self, *, storage_path: str) -> bytes:
        ...

    def delete(self, *, storage_path: str) -> None:
        ...


def _sanitize_file_name(file_name: str) -> str:
    safe_name = Path(file_name).name.strip()
    if not safe_name:
        raise FileStorageError("Invalid file name.")
    return safe_name


class LocalFileStorage:
    """
    Local filesystem storage backend.

    Files are stored as ``<job_id>.csv`` under the root directory.
    """

    def __init__(self, root_dir: str | Path = "data/uploads") -> None:
        self._root_dir = Path(root_dir)

    def save(self, *, job_id: uuid.UUID, file_name: str, content: bytes) -> StoredFileMetadata:
        safe_file_name = _sanitize_file_name(file_name)
        stored_at = datetime.now(timezone.utc)

        relative_path = Path(f"{job_id}.csv")
        absolute_path = self._root_dir / relative_path
        absolute_path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = absolute_path.with_suffix(f"{absolute_path.suffix}.tmp")
        try:
            with tmp_path.open("wb") as handle:
                handle.write(content)
            tmp_path.replace(absolute_path)
        except OSError as exc:
            raise FileStorageError("Failed to write uploaded file to storage.") from exc
        finally:
            if tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    pass

        return StoredFileMetadata(
            file_name=safe_file_name,
            storage_path=relative_path.as_posix(),
            file_size_bytes=len(content),
            checksum=hashlib.sha256(content).hexdigest(),
            stored_at=stored_at,
        )

    def read(self, *, storage_path: str) -> bytes:
        target = self._root_dir / Path(storage_path)
        try:
            return target.read_bytes()
        except OSError as exc:
            raise FileStorageError("Failed to read uploaded file from storage.") from exc

    def delete(self, *, storage_path: str) -> None:
        target = self._root_dir / Path(storage_path)
        if not target.exists():
            return
        try:
            target.unlink()
        except OSError as exc:
            raise FileStorageError("Failed to delete uploaded file from storage.") from exc
