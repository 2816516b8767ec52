"""Pydantic models shared across storage, services, and callers.

Beginner terms used in this file:
- Entity: a full record as stored (Plan, Phase, Task).
- Create model: the insertable subset of an entity (no id, no timestamps).
- Patch model: a partial update; only explicitly set fields are written.
- Literal: restricts a field to a fixed set of allowed string values.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Literal, TypeVar

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, ValidationError, field_validator

from plan_orchestrator.errors import EntityValidationError

# Task lifecycle states. "validated" and "needs_review" are set by the
# orchestration service when validation outcomes are reported.
TaskStatus = Literal[
    "pending",
    "in_progress",
    "completed",
    "blocked",
    "cancelled",
    "validated",
    "failed",
    "needs_review",
]

# Phase lifecycle states; plans share the same vocabulary.
PhaseStatus = Literal["pending", "in_progress", "completed", "on_hold"]

ValidationOutcome = Literal["success", "failure"]

ModelT = TypeVar("ModelT", bound=BaseModel)


class Task(BaseModel):
    """Unit of work inside a phase."""

    id: str
    name: str = Field(min_length=1)
    description: str | None = None
    status: TaskStatus
    is_validated: bool = False
    # Positive position inside the owning phase.
    order: int = Field(gt=0)
    phase_id: str
    # Ids of tasks this one waits on. Populated by the persistence service.
    dependencies: list[str] = Field(default_factory=list)
    validation_command: str | None = None
    validation_output: str | None = None
    notes: str | None = None
    creation_date: datetime
    updated_at: datetime
    completion_date: datetime | None = None


class Phase(BaseModel):
    """Ordered stage of a plan."""

    id: str
    name: str = Field(min_length=1)
    description: str | None = None
    status: PhaseStatus
    order: int = Field(gt=0)
    plan_id: str
    # View built on read, never the source of truth.
    tasks: list[Task] = Field(default_factory=list)
    creation_date: datetime
    updated_at: datetime
    completion_date: datetime | None = None


class Plan(BaseModel):
    """Top-level container of phases."""

    id: str
    name: str = Field(min_length=1)
    description: str | None = None
    status: PhaseStatus = "pending"
    phases: list[Phase] = Field(default_factory=list)
    creation_date: datetime
    updated_at: datetime
    completion_date: datetime | None = None


class PlanCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    description: str | None = None
    status: PhaseStatus = "pending"


class PhaseCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    plan_id: str
    name: str = Field(min_length=1)
    description: str | None = None
    order: int = Field(gt=0)
    status: PhaseStatus = "pending"


class TaskCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    phase_id: str
    name: str = Field(min_length=1)
    description: str | None = None
    order: int = Field(gt=0)
    status: TaskStatus = "pending"
    is_validated: bool = False
    validation_command: str | None = None
    validation_output: str | None = None
    notes: str | None = None


class _Patch(BaseModel):
    """Partial update: fields may be omitted, but columns that are NOT NULL
    in the store cannot be explicitly set to None."""

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", "order", "status", "is_validated", check_fields=False)
    @classmethod
    def _reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("value cannot be null")
        return value


class PlanPatch(_Patch):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    status: PhaseStatus | None = None
    completion_date: AwareDatetime | None = None


class PhasePatch(_Patch):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    order: int | None = Field(default=None, gt=0)
    status: PhaseStatus | None = None
    completion_date: AwareDatetime | None = None


class TaskPatch(_Patch):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    order: int | None = Field(default=None, gt=0)
    status: TaskStatus | None = None
    is_validated: bool | None = None
    validation_command: str | None = None
    validation_output: str | None = None
    notes: str | None = None
    completion_date: AwareDatetime | None = None


class AddPhaseDetails(BaseModel):
    """Caller input for appending a phase to a plan."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    description: str | None = None
    order: int = Field(gt=0)
    status: PhaseStatus | None = None


class UpdatePhaseDetails(PhasePatch):
    """Caller input for a partial phase update."""


class AddTaskDetails(BaseModel):
    """Caller input for appending a task to a phase."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    description: str | None = None
    order: int = Field(gt=0)
    validation_command: str | None = None
    notes: str | None = None
    dependencies: list[str] = Field(default_factory=list)


class UpdateTaskDetails(TaskPatch):
    """Caller input for a task update, including reported validation results."""

    dependencies: list[str] | None = None
    validation_outcome: ValidationOutcome | None = None
    # Exit code of the task's validation command, interpreted when no
    # explicit outcome is given.
    exit_code: int | None = None


def parse_model(model: type[ModelT], data: BaseModel | Mapping[str, Any]) -> ModelT:
    """Validate caller input into ``model``, raising EntityValidationError on failure."""
    if isinstance(data, model):
        return data
    payload = data.model_dump(exclude_unset=True) if isinstance(data, BaseModel) else dict(data)
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise EntityValidationError(f"Invalid {model.__name__}: {exc}") from exc
