"""Phase control: append phases to plans, read them with tasks, update them."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from plan_orchestrator.models import (
    AddPhaseDetails,
    Phase,
    PhaseCreate,
    PhasePatch,
    PhaseStatus,
    UpdatePhaseDetails,
    parse_model,
)
from plan_orchestrator.services.persistence import PersistenceService

logger = logging.getLogger(__name__)


class PhaseControlService:
    def __init__(self, persistence: PersistenceService) -> None:
        self.persistence = persistence

    def add_phase_to_plan(
        self,
        plan_id: str,
        details: AddPhaseDetails | Mapping[str, Any],
    ) -> Phase | None:
        """Append a phase; returns None when the plan does not exist."""
        details = parse_model(AddPhaseDetails, details)
        if self.persistence.plans.find_by_id(plan_id) is None:
            logger.warning("Cannot add phase %r: plan id=%s not found", details.name, plan_id)
            return None
        payload = details.model_dump(exclude_unset=True, exclude_none=True)
        payload["plan_id"] = plan_id
        phase = self.persistence.create_phase(parse_model(PhaseCreate, payload))
        logger.info("Added phase id=%s order=%s to plan id=%s", phase.id, phase.order, plan_id)
        return phase

    def get_phase_by_id(self, phase_id: str) -> Phase | None:
        return self.persistence.get_phase_by_id(phase_id)

    def get_phases_for_plan(self, plan_id: str) -> list[Phase]:
        return self.persistence.get_phases_by_plan_id(plan_id)

    def get_phases_with_tasks(self, plan_id: str) -> list[Phase]:
        # Alias kept for callers that want to spell out the nested shape.
        return self.get_phases_for_plan(plan_id)

    def update_phase(
        self,
        phase_id: str,
        updates: UpdatePhaseDetails | Mapping[str, Any],
    ) -> Phase | None:
        patch = parse_model(PhasePatch, parse_model(UpdatePhaseDetails, updates))
        phase = self.persistence.update_phase(phase_id, patch)
        if phase is None:
            logger.warning("Cannot update missing phase id=%s", phase_id)
        return phase

    def update_phase_status(self, phase_id: str, status: PhaseStatus) -> Phase | None:
        return self.update_phase(phase_id, {"status": status})

    def delete_phase(self, phase_id: str) -> bool:
        deleted = self.persistence.delete_phase(phase_id)
        if deleted:
            logger.info("Deleted phase id=%s", phase_id)
        return deleted
