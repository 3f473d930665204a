"""
Environment-driven database configuration for the import pipeline.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

SUPPORTED_URL_PREFIXES: tuple[str, ...] = ("postgresql", "sqlite")
DATABASE_URL_VARIABLES: tuple[str, ...] = ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL")
CLOUD_ENVIRONMENTS = frozenset({"prod", "production", "staging", "cloud"})


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.is_file():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            if key and key not in os.environ:
                os.environ[key] = value.strip().strip('"').strip("'")


def _get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def normalize_database_url(url: str) -> str:
    """
    Rewrite postgres URLs to SQLAlchemy's psycopg driver form.

    SQLite URLs (local runs and tests) are returned unchanged.
    """

    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def is_supported_database_url(url: str) -> bool:
    return url.startswith(SUPPORTED_URL_PREFIXES)


def find_database_url() -> str | None:
    """
    Return the configured database URL, or None when nothing is set.

    Priority:
    1) DATABASE_URL
    2) CLOUD_DATABASE_URL when ENVIRONMENT is cloud-like
    3) LOCAL_DATABASE_URL
    """

    load_env_files()

    direct_url = os.getenv("DATABASE_URL", "").strip()
    if direct_url:
        return normalize_database_url(direct_url)

    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    cloud_url = os.getenv("CLOUD_DATABASE_URL", "").strip()
    if environment in CLOUD_ENVIRONMENTS and cloud_url:
        return normalize_database_url(cloud_url)

    local_url = os.getenv("LOCAL_DATABASE_URL", "").strip()
    if local_url:
        return normalize_database_url(local_url)
    return None


def resolve_database_url() -> str:
    url = find_database_url()
    if url is None:
        raise RuntimeError(
            "No database URL configured. Set " + ", ".join(DATABASE_URL_VARIABLES[:-1])
            + f" or {DATABASE_URL_VARIABLES[-1]}."
        )
    return url


@dataclass(frozen=True)
class EngineSettings:
    """
    Connection pool and logging options applied to server databases.
    """

    echo: bool = False
    pool_recycle: int = 1800
    pool_size: int = 5
    max_overflow: int = 10


def load_engine_settings() -> EngineSettings:
    load_env_files()
    return EngineSettings(
        echo=_get_bool_env("SQL_ECHO", default=False),
        pool_recycle=_get_int_env("DB_POOL_RECYCLE", 1800),
        pool_size=max(1, _get_int_env("DB_POOL_SIZE", 5)),
        max_overflow=max(0, _get_int_env("DB_MAX_OVERFLOW", 10)),
    )
