from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from plan_orchestrator.config.settings import Settings
from plan_orchestrator.storage.database import Database, open_database


def test_migrate_is_idempotent_and_creates_all_relations(database: Database) -> None:
    database.migrate()

    rows = database.fetchall("SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name")
    names = {row["name"] for row in rows}
    assert {"plans", "phases", "tasks", "task_dependencies"} <= names


def test_foreign_keys_are_enforced(database: Database) -> None:
    assert database.fetchone("PRAGMA foreign_keys")[0] == 1
    with pytest.raises(sqlite3.IntegrityError):
        database.execute(
            'INSERT INTO phases (id, name, "order", plan_id, creation_date, updated_at) '
            "VALUES ('p1', 'Orphan', 1, 'missing-plan', 'x', 'x')"
        )


def test_transaction_rolls_back_on_error(database: Database) -> None:
    with pytest.raises(RuntimeError, match="boom"):
        with database.transaction():
            database.execute(
                "INSERT INTO plans (id, name, creation_date, updated_at) "
                "VALUES ('plan-1', 'Rolled back', 'x', 'x')"
            )
            raise RuntimeError("boom")

    assert database.fetchone("SELECT id FROM plans WHERE id = 'plan-1'") is None


def test_nested_transaction_joins_outer(database: Database) -> None:
    with pytest.raises(RuntimeError):
        with database.transaction():
            with database.transaction():
                database.execute(
                    "INSERT INTO plans (id, name, creation_date, updated_at) "
                    "VALUES ('plan-2', 'Inner', 'x', 'x')"
                )
            raise RuntimeError("outer failure")

    assert database.fetchone("SELECT id FROM plans WHERE id = 'plan-2'") is None


def test_close_releases_connection() -> None:
    database = Database(":memory:").connect()
    assert database.is_open

    database.close()
    database.close()

    assert not database.is_open
    with pytest.raises(RuntimeError, match="not connected"):
        database.execute("SELECT 1")


def test_context_manager_connects_and_closes(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "plans.db"
    with Database(path) as database:
        database.migrate()
        assert database.is_open
    assert not database.is_open
    assert path.exists()


def test_rejects_empty_path() -> None:
    with pytest.raises(ValueError, match="database path is required"):
        Database("  ")


def test_open_database_from_settings_uses_wal(tmp_path: Path) -> None:
    settings = Settings(database_path=str(tmp_path / "planner.db"), sqlite_wal=True)

    database = open_database(settings)
    try:
        mode = database.fetchone("PRAGMA journal_mode")[0]
        assert mode.lower() == "wal"
        assert database.fetchone("SELECT COUNT(*) FROM plans")[0] == 0
    finally:
        database.close()
