"""Phase rows."""

from __future__ import annotations

from plan_orchestrator.models import Phase
from plan_orchestrator.storage.database import Database
from plan_orchestrator.storage.repository import ORDERED, Repository, TableSpec, select_where

PHASES = TableSpec(name="phases", model=Phase)


class PhaseRepository(Repository[Phase]):
    def __init__(self, database: Database) -> None:
        super().__init__(database, PHASES)

    def find_by_plan_id(self, plan_id: str) -> list[Phase]:
        """Phases of one plan, ascending by order; ties keep insertion order."""
        return select_where(self.database, self.table, "plan_id = ?", (plan_id,), order_by=ORDERED)
