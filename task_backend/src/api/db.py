from __future__ import annotations

import logging
import os
import sqlite3
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, List, Optional, Sequence, Tuple

from .errors import ErrorKind, TaskRepositoryError
from .models import Filter, Task, TaskCollection
from .repositories import TaskId, TaskRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "task"
    id: str = "id"
    title: str = "title"
    description: str = "description"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_COLS = _Cols()

_SELECT = (
    f"SELECT {_COLS.id}, {_COLS.title}, {_COLS.description}, {_COLS.created_at}, {_COLS.updated_at} "
    f"FROM {_COLS.table}"
)


class Database:
    """
    Connection factory for the SQLite task store.

    Every call to connect() opens its own connection, so one Database can be
    shared by all request threads. Leaving the connect() block normally
    commits; leaving it with an exception discards the pending changes.
    """

    def __init__(self, db_path: str, timeout: float = 5.0, query_timeout: Optional[float] = None) -> None:
        self._db_path = db_path
        self._timeout = timeout
        self._query_timeout = query_timeout

    @property
    def path(self) -> str:
        return self._db_path

    def _configure_conn(self, conn: sqlite3.Connection, query_timeout: Optional[float] = None) -> None:
        limit = query_timeout if query_timeout is not None else self._query_timeout
        if limit:
            deadline = time.monotonic() + limit
            # A non-zero return aborts the running statement with OperationalError("interrupted").
            conn.set_progress_handler(lambda: int(time.monotonic() > deadline), 1000)

    @contextmanager
    def connect(self, query_timeout: Optional[float] = None) -> Generator[sqlite3.Connection, None, None]:
        """
        Open a connection for one unit of work.

        query_timeout overrides the configured per-connection deadline, in
        seconds, for this connection only.
        """
        conn = sqlite3.connect(self._db_path, timeout=self._timeout)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn, query_timeout)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def init_schema(self) -> None:
        """Create the task table if it does not exist yet."""
        os.makedirs(os.path.dirname(self._db_path) or ".", exist_ok=True)
        with self.connect() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} BLOB PRIMARY KEY,
                    {_COLS.title} TEXT NOT NULL,
                    {_COLS.description} TEXT NOT NULL,
                    {_COLS.created_at} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_created_at ON {_COLS.table}({_COLS.created_at})"
            )
        logger.info("Task store ready db=%s", self._db_path)


def _encode_ts(value: datetime) -> str:
    return value.isoformat(timespec="microseconds")


def _decode_ts(value: object) -> datetime:
    if not isinstance(value, str):
        raise TypeError(f"timestamp column holds {type(value).__name__}, expected text")
    return datetime.fromisoformat(value)


def _decode_text(value: object) -> str:
    if not isinstance(value, str):
        raise TypeError(f"text column holds {type(value).__name__}")
    return value


class SQLiteTaskRepository(TaskRepository):
    """
    SQLite implementation of TaskRepository.

    Identifiers are stored as their 16-byte binary form and converted back
    to uuid.UUID when rows are read; no other layer sees the binary form.
    """

    def __init__(self, database: Database, logger: Optional[logging.Logger] = None) -> None:
        self._db = database
        self._log = logger or logging.getLogger(__name__)

    def _now(self) -> datetime:
        return datetime.now()

    def _fail(self, kind: ErrorKind, cause: BaseException) -> TaskRepositoryError:
        self._log.error("%s: %s", kind.value, cause)
        return TaskRepositoryError(kind, cause)

    def _parse(self, task_id: TaskId) -> Tuple[uuid.UUID, bytes]:
        try:
            parsed = task_id if isinstance(task_id, uuid.UUID) else uuid.UUID(task_id)
        except (TypeError, ValueError, AttributeError) as exc:
            raise self._fail(ErrorKind.UUID_FORMAT, exc) from exc
        return parsed, parsed.bytes

    @contextmanager
    def _session(self, kind: ErrorKind, timeout: Optional[float]) -> Generator[sqlite3.Connection, None, None]:
        # Failures opening or committing the connection are reported as `kind`.
        try:
            with self._db.connect(query_timeout=timeout) as conn:
                yield conn
        except sqlite3.Error as exc:
            raise self._fail(kind, exc) from exc

    def _row_to_task(self, row: Sequence[object]) -> Task:
        raw_id = row[0]
        if not isinstance(raw_id, bytes):
            raise TypeError(f"id column holds {type(raw_id).__name__}, expected blob")
        return Task(
            id=uuid.UUID(bytes=raw_id),
            title=_decode_text(row[1]),
            description=_decode_text(row[2]),
            created_at=_decode_ts(row[3]),
            updated_at=_decode_ts(row[4]),
        )

    def _select(self, conn: sqlite3.Connection, clause: str, params: Sequence[object]) -> List[Task]:
        try:
            cursor = conn.execute(f"{_SELECT} {clause}", params)
        except (sqlite3.Error, OverflowError) as exc:
            raise self._fail(ErrorKind.QUERY_CONTEXT, exc) from exc

        tasks: List[Task] = []
        while True:
            try:
                row = cursor.fetchone()
            except sqlite3.Error as exc:
                raise self._fail(ErrorKind.ROW_CORRUPT, exc) from exc
            if row is None:
                break
            try:
                tasks.append(self._row_to_task(row))
            except (TypeError, ValueError, IndexError) as exc:
                raise self._fail(ErrorKind.ROW_DATA_TYPES, exc) from exc
        return tasks

    def _count(self, conn: sqlite3.Connection) -> int:
        try:
            cursor = conn.execute(f"SELECT count(*) FROM {_COLS.table}")
        except (sqlite3.Error, OverflowError) as exc:
            raise self._fail(ErrorKind.QUERY_CONTEXT, exc) from exc
        try:
            row = cursor.fetchone()
        except sqlite3.Error as exc:
            raise self._fail(ErrorKind.ROW_CORRUPT, exc) from exc
        if row is None:
            return 0
        try:
            return int(row[0])
        except (TypeError, ValueError, IndexError) as exc:
            raise self._fail(ErrorKind.ROW_DATA_TYPES, exc) from exc

    def _execute(self, conn: sqlite3.Connection, statement: str, params: Sequence[object]) -> int:
        """Run a mutating statement and return the affected row count."""
        try:
            cursor = conn.cursor()
        except sqlite3.Error as exc:
            raise self._fail(ErrorKind.QUERY_PREPARE_CTX, exc) from exc
        try:
            cursor.execute(statement, params)
        except (sqlite3.Error, OverflowError) as exc:
            raise self._fail(ErrorKind.QUERY_EXEC, exc) from exc
        return cursor.rowcount

    def fetch(self, task_filter: Filter, timeout: Optional[float] = None) -> TaskCollection:
        with self._session(ErrorKind.QUERY_CONTEXT, timeout) as conn:
            tasks = self._select(
                conn,
                f"ORDER BY {_COLS.created_at} ASC, rowid ASC LIMIT ? OFFSET ?",
                (task_filter.limit, task_filter.offset),
            )
            total = self._count(conn)
        return TaskCollection(data=tasks, total=total)

    def get_by_id(self, task_id: TaskId, timeout: Optional[float] = None) -> Task:
        _, binary_id = self._parse(task_id)
        with self._session(ErrorKind.QUERY_CONTEXT, timeout) as conn:
            tasks = self._select(conn, f"WHERE {_COLS.id} = ?", (binary_id,))
        if not tasks:
            self._log.error("Task %s not found", task_id)
            raise TaskRepositoryError(ErrorKind.NOT_FOUND)
        return tasks[0]

    def insert(self, task: Task, timeout: Optional[float] = None) -> Task:
        now = self._now()
        task.id = uuid.uuid4()
        task.created_at = now
        task.updated_at = now

        with self._session(ErrorKind.QUERY_PREPARE_CTX, timeout) as conn:
            affected = self._execute(
                conn,
                f"""
                INSERT INTO {_COLS.table} ({_COLS.id}, {_COLS.title}, {_COLS.description},
                    {_COLS.created_at}, {_COLS.updated_at})
                VALUES (?, ?, ?, ?, ?)
                """,
                (task.id.bytes, task.title, task.description, _encode_ts(now), _encode_ts(now)),
            )
            if affected != 1:
                self._log.error("Unexpected behavior on insert. Total affected: %d", affected)
                raise TaskRepositoryError(ErrorKind.CONFLICT_INSERT)
        return task

    def update(self, task_id: TaskId, task: Task, timeout: Optional[float] = None) -> Task:
        parsed, binary_id = self._parse(task_id)
        task.id = parsed
        task.updated_at = self._now()

        with self._session(ErrorKind.QUERY_PREPARE_CTX, timeout) as conn:
            affected = self._execute(
                conn,
                f"""
                UPDATE {_COLS.table}
                SET {_COLS.title} = ?, {_COLS.description} = ?, {_COLS.updated_at} = ?
                WHERE {_COLS.id} = ?
                """,
                (task.title, task.description, _encode_ts(task.updated_at), binary_id),
            )
            if affected == 0:
                self._log.error("Task %s not found on update", parsed)
                raise TaskRepositoryError(ErrorKind.NOT_FOUND)
            if affected != 1:
                self._log.error("Unexpected behavior on update. Total affected: %d", affected)
                raise TaskRepositoryError(ErrorKind.CONFLICT_UPDATE)
        return task

    def delete(self, task_id: TaskId, timeout: Optional[float] = None) -> None:
        parsed, binary_id = self._parse(task_id)
        with self._session(ErrorKind.QUERY_PREPARE_CTX, timeout) as conn:
            affected = self._execute(conn, f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (binary_id,))
            if affected == 0:
                self._log.error("Task %s not found on delete", parsed)
                raise TaskRepositoryError(ErrorKind.NOT_FOUND)
            if affected != 1:
                self._log.error("Unexpected behavior on delete. Total affected: %d", affected)
                raise TaskRepositoryError(ErrorKind.CONFLICT_DELETE)
