from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from src.api.db import Database, SQLiteTaskRepository
from src.api.main import create_app
from src.api.settings import Settings


class FakeDatabase:
    """
    Stand-in for Database that hands out one MagicMock connection.

    Lets tests script cursor behaviour (row counts, raised sqlite errors)
    and count how often storage was touched.
    """

    def __init__(self, conn: Optional[MagicMock] = None) -> None:
        self.conn = conn or MagicMock()
        self.calls = 0
        self.query_timeouts: List[Optional[float]] = []

    @contextmanager
    def connect(self, query_timeout: Optional[float] = None) -> Iterator[MagicMock]:
        self.calls += 1
        self.query_timeouts.append(query_timeout)
        yield self.conn


@pytest.fixture()
def logger() -> logging.Logger:
    return logging.getLogger("tests.task_backend")


@pytest.fixture()
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "tasks.db")


@pytest.fixture()
def database(db_path: str) -> Database:
    db = Database(db_path)
    db.init_schema()
    return db


@pytest.fixture()
def repository(database: Database, logger: logging.Logger) -> SQLiteTaskRepository:
    return SQLiteTaskRepository(database, logger)


@pytest.fixture()
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture()
def fake_repository(fake_db: FakeDatabase, logger: logging.Logger) -> SQLiteTaskRepository:
    return SQLiteTaskRepository(fake_db, logger)  # type: ignore[arg-type]


@pytest.fixture()
def client(db_path: str) -> Iterator[TestClient]:
    app = create_app(Settings(sqlite_db_path=db_path))
    with TestClient(app) as c:
        yield c


def insert_raw(database: Database, raw_id: object, title: object = "t", description: object = "d",
               created_at: object = None, updated_at: object = None) -> None:
    """Insert a row bypassing the repository, for seeding odd data."""
    ts = datetime.now().isoformat(timespec="microseconds")
    with database.connect() as conn:
        conn.execute(
            "INSERT INTO task (id, title, description, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
            (raw_id, title, description, created_at or ts, updated_at or ts),
        )


@pytest.fixture(name="insert_raw")
def insert_raw_fixture():
    return insert_raw
