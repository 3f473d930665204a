from __future__ import annotations

import os
from collections.abc import Iterator

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

os.environ.setdefault("DATABASE_URL", "sqlite://")

from db.session import build_session_factory  # noqa: E402
from factories import make_engine  # noqa: E402


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = make_engine()
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session(engine: Engine) -> Iterator[Session]:
    db = build_session_factory(engine)()
    try:
        yield db
    finally:
        db.close()
