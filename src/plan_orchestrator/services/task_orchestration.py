"""Task orchestration: creation, status/validation updates, next-task selection.

Beginner terms:
- Actionable: a phase or task whose status is ``pending`` or ``in_progress``.
- Dependency met: the dependency task is ``completed`` or has been validated.
- Next task: the first actionable task, by phase order then task order, whose
  dependencies are all met.

Dependency cycles are not detected; tasks in a cycle are never selected.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from plan_orchestrator.errors import EntityValidationError
from plan_orchestrator.models import (
    AddTaskDetails,
    Task,
    TaskCreate,
    TaskPatch,
    TaskStatus,
    UpdateTaskDetails,
    ValidationOutcome,
    parse_model,
)
from plan_orchestrator.services.persistence import PersistenceService
from plan_orchestrator.services.phase_control import PhaseControlService
from plan_orchestrator.storage.repository import next_timestamp
from plan_orchestrator.validation import interpret_validation_result

logger = logging.getLogger(__name__)

ACTIONABLE_PHASE_STATUSES = frozenset({"pending", "in_progress"})
ACTIONABLE_TASK_STATUSES = frozenset({"pending", "in_progress"})

# Fields of UpdateTaskDetails that are not task columns.
_CONTROL_FIELDS = {"dependencies", "validation_outcome", "exit_code"}


def apply_validation_rules(
    current: Task,
    fields: Mapping[str, Any],
    outcome: ValidationOutcome | None,
) -> dict[str, Any]:
    """Couple ``status`` and ``is_validated`` for one update.

    Precedence, first match wins:
    1. outcome ``success`` forces status ``validated`` and is_validated True;
    2. outcome ``failure`` forces status ``needs_review`` and is_validated False;
    3. status set to ``validated`` forces is_validated True;
    4. status moved away from a prior ``validated`` without an explicit
       is_validated resets it to False;
    5. otherwise an explicit is_validated is kept as given.
    """
    processed = dict(fields)
    if outcome == "success":
        processed.update(status="validated", is_validated=True)
    elif outcome == "failure":
        processed.update(status="needs_review", is_validated=False)
    elif processed.get("status") == "validated":
        processed["is_validated"] = True
    elif (
        "status" in processed
        and "is_validated" not in processed
        and current.status == "validated"
    ):
        processed["is_validated"] = False
    return processed


class TaskOrchestrationService:
    def __init__(
        self,
        persistence: PersistenceService,
        phase_control: PhaseControlService,
    ) -> None:
        self.persistence = persistence
        self.phase_control = phase_control

    def add_task_to_phase(
        self,
        phase_id: str,
        details: AddTaskDetails | Mapping[str, Any],
    ) -> Task | None:
        """Create a pending, unvalidated task; returns None when the phase is missing.

        Dependency edges are written after the task row in the same
        transaction, so an unknown dependency id leaves no task behind. The
        task is then re-read so the result carries its final dependency list.
        """
        details = parse_model(AddTaskDetails, details)
        if self.persistence.phases.find_by_id(phase_id) is None:
            logger.warning("Cannot add task %r: phase id=%s not found", details.name, phase_id)
            return None

        payload = details.model_dump(
            exclude_unset=True, exclude_none=True, exclude={"dependencies"}
        )
        payload.update(phase_id=phase_id, status="pending", is_validated=False)
        with self.persistence.database.transaction():
            task = self.persistence.create_task(parse_model(TaskCreate, payload))
            if details.dependencies:
                self.persistence.update_task_dependencies(task.id, details.dependencies)
        logger.info("Added task id=%s order=%s to phase id=%s", task.id, task.order, phase_id)

        if not details.dependencies:
            return task
        with_dependencies = self.get_task(task.id)
        if with_dependencies is None:
            raise RuntimeError(f"Failed to retrieve task {task.id} after updating dependencies")
        return with_dependencies

    def get_task(self, task_id: str) -> Task | None:
        return self.persistence.get_task_by_id(task_id)

    def get_tasks_for_phase(
        self,
        phase_id: str,
        status_filter: Iterable[TaskStatus] | None = None,
    ) -> list[Task]:
        tasks = self.persistence.get_tasks_by_phase_id(phase_id, status_filter)
        return sorted(tasks, key=lambda task: task.order)

    def update_task(
        self,
        task_id: str,
        updates: UpdateTaskDetails | Mapping[str, Any],
    ) -> Task | None:
        """Apply a partial update with status/validation coupling.

        Returns None (and writes nothing) for a missing task. Raises
        EntityValidationError when the payload or the merged task is invalid.
        """
        updates = parse_model(UpdateTaskDetails, updates)
        task = self.get_task(task_id)
        if task is None:
            logger.warning("Cannot update missing task id=%s", task_id)
            return None

        fields = updates.model_dump(exclude_unset=True, exclude=_CONTROL_FIELDS)
        outcome = updates.validation_outcome
        if outcome is None and updates.exit_code is not None and task.validation_command:
            result = interpret_validation_result(updates.exit_code, updates.validation_output or "")
            outcome = "success" if result.success else "failure"
            fields["validation_output"] = result.processed_output
        fields = apply_validation_rules(task, fields, outcome)

        merged = {
            **task.model_dump(),
            **fields,
            "updated_at": next_timestamp(task.updated_at),
        }
        if updates.dependencies is not None:
            merged["dependencies"] = updates.dependencies
        try:
            Task.model_validate(merged)
        except ValidationError as exc:
            logger.error("Validation failed for update of task id=%s: %s", task_id, exc)
            raise EntityValidationError(f"Invalid task data for update: {exc}") from exc

        with self.persistence.database.transaction():
            updated = self.persistence.update_task(task_id, TaskPatch.model_validate(fields))
            if updates.dependencies is not None:
                self.persistence.update_task_dependencies(task_id, updates.dependencies)
        if updated is None:
            return None
        if updates.dependencies is not None:
            updated = self.get_task(task_id)
        if outcome is not None:
            logger.info("Task id=%s validation outcome=%s", task_id, outcome)
        return updated

    def delete_task(self, task_id: str) -> bool:
        return self.persistence.delete_task(task_id)

    def get_next_task_for_plan(self, plan_id: str) -> Task | None:
        """Return the next actionable task of a plan, or None."""
        phases = self.phase_control.get_phases_for_plan(plan_id)
        if not phases:
            return None

        for phase in sorted(phases, key=lambda phase: phase.order):
            if phase.status not in ACTIONABLE_PHASE_STATUSES:
                continue
            tasks = self.get_tasks_for_phase(phase.id)
            if not tasks:
                continue
            for task in tasks:
                if task.status not in ACTIONABLE_TASK_STATUSES:
                    continue
                if self._dependencies_met(task):
                    return task
        logger.debug("No actionable task for plan id=%s", plan_id)
        return None

    def _dependencies_met(self, task: Task) -> bool:
        for dependency_id in task.dependencies:
            dependency = self.get_task(dependency_id)
            if dependency is None:
                return False
            if dependency.status != "completed" and not dependency.is_validated:
                return False
        return True
