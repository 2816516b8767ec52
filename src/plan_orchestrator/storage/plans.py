"""Plan rows."""

from __future__ import annotations

from plan_orchestrator.models import Plan
from plan_orchestrator.storage.database import Database
from plan_orchestrator.storage.repository import Repository, TableSpec

PLANS = TableSpec(name="plans", model=Plan)


class PlanRepository(Repository[Plan]):
    def __init__(self, database: Database) -> None:
        super().__init__(database, PLANS)
