"""Task rows."""

from __future__ import annotations

from collections.abc import Iterable

from plan_orchestrator.models import Task, TaskStatus
from plan_orchestrator.storage.database import Database
from plan_orchestrator.storage.repository import ORDERED, Repository, TableSpec, select_where

TASKS = TableSpec(name="tasks", model=Task, boolean_columns=frozenset({"is_validated"}))


class TaskRepository(Repository[Task]):
    def __init__(self, database: Database) -> None:
        super().__init__(database, TASKS)

    def find_by_phase_id(
        self,
        phase_id: str,
        status_filter: Iterable[TaskStatus] | None = None,
    ) -> list[Task]:
        """Tasks of one phase, ascending by order.

        A non-empty ``status_filter`` is applied in the query itself.
        """
        where = "phase_id = ?"
        params: list[str] = [phase_id]
        statuses = list(dict.fromkeys(status_filter or ()))
        if statuses:
            where += f" AND status IN ({', '.join('?' for _ in statuses)})"
            params.extend(statuses)
        return select_where(self.database, self.table, where, params, order_by=ORDERED)
