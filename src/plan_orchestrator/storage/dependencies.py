"""Dependency edges between tasks (``task_dependencies``)."""

from __future__ import annotations

from collections.abc import Iterable

from plan_orchestrator.storage.database import Database


class DependencyRepository:
    """Edge table access; callers own the surrounding transaction."""

    def __init__(self, database: Database) -> None:
        self.database = database

    def list_dependency_ids(self, task_id: str) -> list[str]:
        rows = self.database.fetchall(
            "SELECT dependency_id FROM task_dependencies WHERE task_id = ? ORDER BY rowid ASC",
            (task_id,),
        )
        return [str(row["dependency_id"]) for row in rows]

    def list_dependent_ids(self, dependency_id: str) -> list[str]:
        rows = self.database.fetchall(
            "SELECT task_id FROM task_dependencies WHERE dependency_id = ? ORDER BY rowid ASC",
            (dependency_id,),
        )
        return [str(row["task_id"]) for row in rows]

    def replace(self, task_id: str, dependency_ids: Iterable[str]) -> list[str]:
        """Swap the whole edge set of ``task_id``; returns the ids written."""
        unique_ids = list(dict.fromkeys(dependency_ids))
        self.database.execute("DELETE FROM task_dependencies WHERE task_id = ?", (task_id,))
        for dependency_id in unique_ids:
            self.database.execute(
                "INSERT INTO task_dependencies (task_id, dependency_id) VALUES (?, ?)",
                (task_id, dependency_id),
            )
        return unique_ids

    def delete_edges_for(self, task_id: str) -> int:
        """Remove edges where the task is either the dependent or the dependency."""
        cursor = self.database.execute(
            "DELETE FROM task_dependencies WHERE task_id = ? OR dependency_id = ?",
            (task_id, task_id),
        )
        return cursor.rowcount
