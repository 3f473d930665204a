"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class ImportPipelineSettings:
    """
    Runtime settings for the bulk CSV import pipeline.
    """

    chunk_size: int = 500
    display_error_limit: int = 50
    max_stored_findings: int = 1000
    log_validation_errors: bool = True
    upload_dir: str = "data/uploads"
    max_upload_bytes: int = 50 * 1024 * 1024


@lru_cache(maxsize=1)
def get_import_pipeline_settings() -> ImportPipelineSettings:
    """
    Return cached import pipeline settings from environment variables.
    """

    return ImportPipelineSettings(
        chunk_size=max(1, _get_int_env("IMPORT_CHUNK_SIZE", 500)),
        display_error_limit=max(1, _get_int_env("IMPORT_DISPLAY_ERROR_LIMIT", 50)),
        max_stored_findings=max(1, _get_int_env("IMPORT_MAX_STORED_FINDINGS", 1000)),
        log_validation_errors=_get_bool_env("IMPORT_LOG_VALIDATION_ERRORS", True),
        upload_dir=_get_str_env("IMPORT_UPLOAD_DIR", "data/uploads"),
        max_upload_bytes=max(1, _get_int_env("IMPORT_MAX_UPLOAD_BYTES", 50 * 1024 * 1024)),
    )
