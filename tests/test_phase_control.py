from __future__ import annotations

import pytest

from plan_orchestrator.errors import EntityValidationError
from plan_orchestrator.models import AddPhaseDetails, UpdatePhaseDetails
from plan_orchestrator.services import PlanningServices


def test_add_phase_to_plan_defaults_to_pending(services: PlanningServices, builder) -> None:
    plan = builder.plan()

    phase = services.phases.add_phase_to_plan(
        plan.id, AddPhaseDetails(name="Discovery", description="Interviews", order=1)
    )

    assert phase is not None
    assert phase.plan_id == plan.id
    assert phase.status == "pending"
    assert phase.description == "Interviews"
    assert phase.tasks == []


def test_add_phase_to_missing_plan_returns_none(services: PlanningServices) -> None:
    assert services.phases.add_phase_to_plan("missing", {"name": "Lost", "order": 1}) is None


@pytest.mark.parametrize(
    "details",
    [
        {"name": "", "order": 1},
        {"name": "Zero", "order": 0},
        {"name": "Bad status", "order": 1, "status": "validated"},
    ],
)
def test_add_phase_rejects_invalid_details(
    services: PlanningServices, builder, details: dict[str, object]
) -> None:
    plan = builder.plan()

    with pytest.raises(EntityValidationError):
        services.phases.add_phase_to_plan(plan.id, details)
    assert services.phases.get_phases_for_plan(plan.id) == []


def test_get_phase_by_id_includes_tasks(services: PlanningServices, builder) -> None:
    plan = builder.plan()
    phase = builder.phase(plan, order=1)
    second = builder.task(phase, order=2)
    first = builder.task(phase, order=1)

    loaded = services.phases.get_phase_by_id(phase.id)

    assert loaded is not None
    assert [task.id for task in loaded.tasks] == [first.id, second.id]
    assert services.phases.get_phase_by_id("missing") is None


def test_get_phases_with_tasks_matches_get_phases_for_plan(
    services: PlanningServices, builder
) -> None:
    plan = builder.plan()
    phase = builder.phase(plan, order=1)
    builder.task(phase, order=1)

    assert services.phases.get_phases_with_tasks(plan.id) == services.phases.get_phases_for_plan(
        plan.id
    )


def test_update_phase_partial(services: PlanningServices, builder) -> None:
    plan = builder.plan()
    phase = builder.phase(plan, order=1, name="Draft")

    updated = services.phases.update_phase(phase.id, UpdatePhaseDetails(order=3))

    assert updated is not None
    assert updated.order == 3
    assert updated.name == "Draft"
    assert updated.updated_at > phase.updated_at


def test_update_phase_status_and_missing(services: PlanningServices, builder) -> None:
    plan = builder.plan()
    phase = builder.phase(plan, order=1)

    on_hold = services.phases.update_phase_status(phase.id, "on_hold")

    assert on_hold is not None
    assert on_hold.status == "on_hold"
    assert services.phases.update_phase_status("missing", "completed") is None


def test_update_phase_rejects_unknown_fields(services: PlanningServices, builder) -> None:
    plan = builder.plan()
    phase = builder.phase(plan, order=1)

    with pytest.raises(EntityValidationError):
        services.phases.update_phase(phase.id, {"plan_id": "elsewhere"})


def test_delete_phase(services: PlanningServices, builder) -> None:
    plan = builder.plan()
    phase = builder.phase(plan, order=1)

    assert services.phases.delete_phase(phase.id) is True
    assert services.phases.get_phase_by_id(phase.id) is None
    assert services.phases.delete_phase(phase.id) is False


@pytest.mark.parametrize("updates", [{"name": None}, {"order": None}, {"status": None}])
def test_update_phase_rejects_null_for_required_columns(
    services: PlanningServices, builder, updates: dict[str, object]
) -> None:
    plan = builder.plan()
    phase = builder.phase(plan, order=1)

    with pytest.raises(EntityValidationError):
        services.phases.update_phase(phase.id, updates)
    with pytest.raises(EntityValidationError):
        services.phases.update_phase_status(phase.id, None)  # type: ignore[arg-type]

    assert services.phases.get_phase_by_id(phase.id) == phase
