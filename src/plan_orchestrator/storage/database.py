"""SQLite store handle with schema migration and explicit transactions.

Beginner terms:
- Migration: creating tables and indexes before normal reads/writes.
- Cascade: a foreign key that deletes child rows along with their parent.
- Autocommit: every statement commits on its own unless a transaction is open.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from plan_orchestrator.config.settings import Settings

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS plans (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT,
        status TEXT NOT NULL DEFAULT 'pending',
        creation_date TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        completion_date TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS phases (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT,
        status TEXT NOT NULL DEFAULT 'pending',
        "order" INTEGER NOT NULL,
        plan_id TEXT NOT NULL REFERENCES plans(id) ON DELETE CASCADE,
        creation_date TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        completion_date TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT,
        status TEXT NOT NULL DEFAULT 'pending',
        is_validated INTEGER NOT NULL DEFAULT 0,
        "order" INTEGER NOT NULL,
        phase_id TEXT NOT NULL REFERENCES phases(id) ON DELETE CASCADE,
        validation_command TEXT,
        validation_output TEXT,
        notes TEXT,
        creation_date TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        completion_date TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS task_dependencies (
        task_id TEXT NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
        dependency_id TEXT NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
        PRIMARY KEY (task_id, dependency_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_phases_plan_id ON phases(plan_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_phase_id ON tasks(phase_id)",
    "CREATE INDEX IF NOT EXISTS idx_task_dependencies_dependency_id "
    "ON task_dependencies(dependency_id)",
)


class Database:
    """One SQLite connection shared by every repository built on it.

    The handle is constructed explicitly and passed to repositories; call
    ``close()`` (or use it as a context manager) to release the connection.
    """

    def __init__(self, path: str | Path = ":memory:", *, wal: bool = True) -> None:
        if not str(path).strip():
            raise ValueError("database path is required")
        self.path = str(path)
        self.wal = wal
        # Guards every statement issued through this handle.
        self._lock = threading.RLock()
        self._conn: sqlite3.Connection | None = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def is_memory(self) -> bool:
        return self.path == ":memory:"

    def connect(self) -> Database:
        with self._lock:
            if self._conn is not None:
                return self
            if not self.is_memory:
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.path, isolation_level=None, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            if self.wal and not self.is_memory:
                conn.execute("PRAGMA journal_mode = WAL")
            self._conn = conn
        logger.info("SQLite database connected at %s", self.path)
        return self

    def migrate(self) -> None:
        """Create required tables and indexes if they do not already exist."""
        with self.transaction() as conn:
            for statement in SCHEMA_STATEMENTS:
                conn.execute(statement)
        logger.debug("Schema ensured for %s", self.path)

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
        logger.info("SQLite database connection closed (%s)", self.path)

    def __enter__(self) -> Database:
        return self.connect()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        with self._lock:
            logger.debug("SQL: %s params=%s", " ".join(sql.split()), list(params))
            return self._connection().execute(sql, tuple(params))

    def fetchone(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Row | None:
        with self._lock:
            return self.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        with self._lock:
            return self.execute(sql, params).fetchall()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the enclosed statements as one atomic unit.

        Nested use joins the outermost transaction.
        """
        with self._lock:
            conn = self._connection()
            if conn.in_transaction:
                yield conn
                return
            conn.execute("BEGIN")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError(f"Database {self.path} is not connected")
        return self._conn


def open_database(settings: Settings) -> Database:
    """Connect to the configured database and ensure its schema exists."""
    database = Database(settings.resolved_database_path(), wal=settings.sqlite_wal)
    database.connect()
    database.migrate()
    return database
