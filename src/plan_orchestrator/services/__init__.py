"""Planning services and their composition over one database handle."""

from __future__ import annotations

from dataclasses import dataclass

from plan_orchestrator.services.persistence import PersistenceService
from plan_orchestrator.services.phase_control import PhaseControlService
from plan_orchestrator.services.plan_lifecycle import PlanLifecycleService
from plan_orchestrator.services.task_orchestration import TaskOrchestrationService
from plan_orchestrator.storage.database import Database


@dataclass(frozen=True)
class PlanningServices:
    database: Database
    persistence: PersistenceService
    plans: PlanLifecycleService
    phases: PhaseControlService
    tasks: TaskOrchestrationService

    def close(self) -> None:
        self.database.close()


def build_services(database: Database) -> PlanningServices:
    """Wire every service onto ``database`` (which must already be migrated)."""
    persistence = PersistenceService(database)
    phases = PhaseControlService(persistence)
    return PlanningServices(
        database=database,
        persistence=persistence,
        plans=PlanLifecycleService(persistence),
        phases=phases,
        tasks=TaskOrchestrationService(persistence, phases),
    )


__all__ = [
    "PersistenceService",
    "PhaseControlService",
    "PlanLifecycleService",
    "PlanningServices",
    "TaskOrchestrationService",
    "build_services",
]
