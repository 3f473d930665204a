"""
db/session.py

SQLAlchemy engine and session factory.
"""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import is_supported_database_url, load_engine_settings, resolve_database_url


def enable_sqlite_savepoints(engine: Engine) -> Engine:
    """
    Let SQLAlchemy emit BEGIN itself so SAVEPOINT works on pysqlite.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection: Any, _connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(connection: Any) -> None:
        connection.exec_driver_sql("BEGIN")

    return engine


def create_db_engine(database_url: str | None = None, **engine_options: Any) -> Engine:
    url = database_url or resolve_database_url()
    if not is_supported_database_url(url):
        raise RuntimeError("Only PostgreSQL and SQLite URLs are supported.")

    settings = load_engine_settings()
    if url.startswith("sqlite"):
        return enable_sqlite_savepoints(create_engine(url, echo=settings.echo, **engine_options))

    return create_engine(
        url,
        echo=settings.echo,
        pool_pre_ping=True,
        pool_recycle=settings.pool_recycle,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        **engine_options,
    )


_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def get_engine() -> Engine:
    """Return the shared engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        class_=Session,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


def _get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = build_session_factory(get_engine())
    return _session_factory


def SessionLocal() -> Session:
    """Lazy session factory. Drop-in replacement for a sessionmaker() call."""
    return _get_session_factory()()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
