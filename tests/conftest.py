"""
tests/conftest.py

Shared fixtures: an in-memory SQLite database built from the ORM metadata
and a staged-file area rooted in pytest's tmp_path.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from db.base import Base
from db.models import Campaign, Invoice, InvoiceItem  # noqa: F401
from db.repositories.storage import LocalFileStorage
from db.session import create_db_engine, create_session_factory


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine: Engine) -> Iterator[Session]:
    session = create_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def upload_root(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture()
def storage(upload_root: Path) -> LocalFileStorage:
    return LocalFileStorage(upload_root)


@pytest.fixture()
def owner_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture()
def staged_files(upload_root: Path) -> Callable[[], list[Path]]:
    """Return a callable listing every file currently in the staged-file area."""

    def _list() -> list[Path]:
        if not upload_root.exists():
            return []
        return [path for path in upload_root.rglob("*") if path.is_file()]

    return _list
