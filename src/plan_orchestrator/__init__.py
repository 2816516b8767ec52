"""Plan, phase, and task persistence with next-task orchestration."""

from plan_orchestrator.errors import EntityValidationError, IntegrityFault, PlanningError
from plan_orchestrator.models import (
    AddPhaseDetails,
    AddTaskDetails,
    Phase,
    PhaseStatus,
    Plan,
    Task,
    TaskStatus,
    UpdatePhaseDetails,
    UpdateTaskDetails,
)
from plan_orchestrator.services import PlanningServices, build_services
from plan_orchestrator.storage import Database, open_database

__all__ = [
    "AddPhaseDetails",
    "AddTaskDetails",
    "Database",
    "EntityValidationError",
    "IntegrityFault",
    "Phase",
    "PhaseStatus",
    "Plan",
    "PlanningError",
    "PlanningServices",
    "Task",
    "TaskStatus",
    "UpdatePhaseDetails",
    "UpdateTaskDetails",
    "build_services",
    "open_database",
]
