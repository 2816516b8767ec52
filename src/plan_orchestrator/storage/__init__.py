"""Storage handle and repositories."""

from plan_orchestrator.storage.base import EntityRepository
from plan_orchestrator.storage.database import Database, open_database
from plan_orchestrator.storage.dependencies import DependencyRepository
from plan_orchestrator.storage.phases import PhaseRepository
from plan_orchestrator.storage.plans import PlanRepository
from plan_orchestrator.storage.repository import Repository, TableSpec
from plan_orchestrator.storage.tasks import TaskRepository

__all__ = [
    "Database",
    "DependencyRepository",
    "EntityRepository",
    "PhaseRepository",
    "PlanRepository",
    "Repository",
    "TableSpec",
    "TaskRepository",
    "open_database",
]
