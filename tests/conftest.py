from __future__ import annotations

from collections.abc import Iterator

import pytest

from plan_orchestrator.models import Phase, Plan, Task, TaskPatch
from plan_orchestrator.services import PlanningServices, build_services
from plan_orchestrator.storage.database import Database


@pytest.fixture
def database() -> Iterator[Database]:
    db = Database(":memory:")
    db.connect()
    db.migrate()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def services(database: Database) -> PlanningServices:
    return build_services(database)


class PlanBuilder:
    """Small helper to lay out plans, phases, and tasks through the services."""

    def __init__(self, services: PlanningServices) -> None:
        self.services = services

    def plan(self, name: str = "Launch plan") -> Plan:
        return self.services.plans.initialize_plan(name, description="Plan under test")

    def phase(self, plan: Plan, *, order: int, status: str = "pending", name: str = "") -> Phase:
        phase = self.services.phases.add_phase_to_plan(
            plan.id,
            {"name": name or f"Phase {order}", "order": order, "status": status},
        )
        assert phase is not None
        return phase

    def task(
        self,
        phase: Phase,
        *,
        order: int,
        name: str = "",
        status: str = "pending",
        is_validated: bool | None = None,
        dependencies: list[str] | None = None,
        validation_command: str | None = None,
    ) -> Task:
        details: dict[str, object] = {"name": name or f"Task {order}", "order": order}
        if dependencies:
            details["dependencies"] = dependencies
        if validation_command is not None:
            details["validation_command"] = validation_command
        task = self.services.tasks.add_task_to_phase(phase.id, details)
        assert task is not None
        if status != "pending" or is_validated is not None:
            # Write directly so the coupling rules of update_task do not apply.
            patch: dict[str, object] = {"status": status}
            if is_validated is not None:
                patch["is_validated"] = is_validated
            task = self.services.persistence.update_task(task.id, TaskPatch.model_validate(patch))
            assert task is not None
        return task


@pytest.fixture
def builder(services: PlanningServices) -> PlanBuilder:
    return PlanBuilder(services)
