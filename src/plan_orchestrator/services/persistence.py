"""Aggregation over the repositories: nested reads, edges, and deletes.

Every nested read issues one query per level; nested lists are always lists.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from plan_orchestrator.models import (
    Phase,
    PhaseCreate,
    PhasePatch,
    Plan,
    PlanCreate,
    PlanPatch,
    Task,
    TaskCreate,
    TaskPatch,
    TaskStatus,
)
from plan_orchestrator.storage.database import Database
from plan_orchestrator.storage.dependencies import DependencyRepository
from plan_orchestrator.storage.phases import PhaseRepository
from plan_orchestrator.storage.plans import PlanRepository
from plan_orchestrator.storage.tasks import TaskRepository

logger = logging.getLogger(__name__)


class PersistenceService:
    def __init__(
        self,
        database: Database,
        *,
        plans: PlanRepository | None = None,
        phases: PhaseRepository | None = None,
        tasks: TaskRepository | None = None,
        dependencies: DependencyRepository | None = None,
    ) -> None:
        self.database = database
        self.plans = plans or PlanRepository(database)
        self.phases = phases or PhaseRepository(database)
        self.tasks = tasks or TaskRepository(database)
        self.dependencies = dependencies or DependencyRepository(database)

    # Plans

    def create_plan(self, data: PlanCreate) -> Plan:
        return self.plans.create(data)

    def get_plan_by_id(self, plan_id: str) -> Plan | None:
        plan = self.plans.find_by_id(plan_id)
        if plan is None:
            return None
        plan.phases = self.get_phases_by_plan_id(plan_id)
        return plan

    def get_all_plans(self) -> list[Plan]:
        """All plans, newest first, each with phases and tasks attached."""
        plans = self.plans.find_all()
        for plan in plans:
            plan.phases = self.get_phases_by_plan_id(plan.id)
        # ties on creation_date fall back to most recently inserted first
        return sorted(reversed(plans), key=lambda plan: plan.creation_date, reverse=True)

    def update_plan(self, plan_id: str, patch: PlanPatch | None = None) -> Plan | None:
        plan = self.plans.update(plan_id, patch)
        if plan is None:
            return None
        plan.phases = self.get_phases_by_plan_id(plan_id)
        return plan

    def delete_plan(self, plan_id: str) -> bool:
        # phases, tasks, and edges go with it via ON DELETE CASCADE
        with self.database.transaction():
            return self.plans.delete(plan_id)

    # Phases

    def create_phase(self, data: PhaseCreate) -> Phase:
        return self.phases.create(data)

    def get_phase_by_id(self, phase_id: str) -> Phase | None:
        phase = self.phases.find_by_id(phase_id)
        if phase is None:
            return None
        phase.tasks = self.get_tasks_by_phase_id(phase_id)
        return phase

    def get_phases_by_plan_id(self, plan_id: str) -> list[Phase]:
        phases = self.phases.find_by_plan_id(plan_id)
        for phase in phases:
            phase.tasks = self.get_tasks_by_phase_id(phase.id)
        return phases

    def update_phase(self, phase_id: str, patch: PhasePatch | None = None) -> Phase | None:
        phase = self.phases.update(phase_id, patch)
        if phase is None:
            return None
        phase.tasks = self.get_tasks_by_phase_id(phase_id)
        return phase

    def delete_phase(self, phase_id: str) -> bool:
        with self.database.transaction():
            return self.phases.delete(phase_id)

    # Tasks

    def create_task(self, data: TaskCreate) -> Task:
        return self.tasks.create(data)

    def get_task_by_id(self, task_id: str) -> Task | None:
        task = self.tasks.find_by_id(task_id)
        if task is None:
            return None
        task.dependencies = self.dependencies.list_dependency_ids(task_id)
        return task

    def get_tasks_by_phase_id(
        self,
        phase_id: str,
        status_filter: Iterable[TaskStatus] | None = None,
    ) -> list[Task]:
        tasks = self.tasks.find_by_phase_id(phase_id, status_filter)
        for task in tasks:
            task.dependencies = self.dependencies.list_dependency_ids(task.id)
        return tasks

    def update_task(self, task_id: str, patch: TaskPatch | None = None) -> Task | None:
        task = self.tasks.update(task_id, patch)
        if task is None:
            return None
        task.dependencies = self.dependencies.list_dependency_ids(task_id)
        return task

    def update_task_dependencies(self, task_id: str, dependency_ids: Iterable[str]) -> None:
        """Replace the full dependency set of a task in one transaction."""
        with self.database.transaction():
            written = self.dependencies.replace(task_id, dependency_ids)
        logger.debug("Task %s now depends on %s", task_id, written)

    def delete_task(self, task_id: str) -> bool:
        with self.database.transaction():
            self.dependencies.delete_edges_for(task_id)
            return self.tasks.delete(task_id)
