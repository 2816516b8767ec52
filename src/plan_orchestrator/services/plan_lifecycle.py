"""Plan lifecycle: create, list, update status/details, delete."""

from __future__ import annotations

import logging

from plan_orchestrator.errors import EntityValidationError
from plan_orchestrator.models import PhaseStatus, Plan, PlanCreate, PlanPatch, parse_model
from plan_orchestrator.services.persistence import PersistenceService

logger = logging.getLogger(__name__)


class PlanLifecycleService:
    def __init__(self, persistence: PersistenceService) -> None:
        self.persistence = persistence

    def initialize_plan(
        self,
        name: str,
        description: str | None = None,
        status: PhaseStatus | None = None,
    ) -> Plan:
        """Create an empty plan.

        New plans always start as ``pending``; a caller-supplied ``status`` is
        accepted for interface compatibility but not applied.
        """
        if status is not None and status != "pending":
            logger.warning(
                "Ignoring initial status %r for new plan %r; plans start as pending",
                status,
                name,
            )
        payload: dict[str, object] = {"name": name, "status": "pending"}
        if description is not None:
            payload["description"] = description
        data = parse_model(PlanCreate, payload)
        plan = self.persistence.create_plan(data)
        logger.info("Initialized plan id=%s name=%r", plan.id, plan.name)
        return plan

    def get_plan(self, plan_id: str) -> Plan | None:
        return self.persistence.get_plan_by_id(plan_id)

    def list_plans(self) -> list[Plan]:
        return self.persistence.get_all_plans()

    def update_plan_status(self, plan_id: str, status: PhaseStatus) -> Plan | None:
        patch = parse_model(PlanPatch, {"status": status})
        plan = self.persistence.update_plan(plan_id, patch)
        if plan is None:
            logger.warning("Cannot update status of missing plan id=%s", plan_id)
        return plan

    def update_plan_details(
        self,
        plan_id: str,
        name: str | None = None,
        description: str | None = None,
    ) -> Plan | None:
        if name is None and description is None:
            raise EntityValidationError(
                "At least one of name or description must be provided to update a plan"
            )
        payload: dict[str, str] = {}
        if name is not None:
            payload["name"] = name
        if description is not None:
            payload["description"] = description
        plan = self.persistence.update_plan(plan_id, parse_model(PlanPatch, payload))
        if plan is None:
            logger.warning("Cannot update details of missing plan id=%s", plan_id)
        return plan

    def delete_plan(self, plan_id: str) -> bool:
        deleted = self.persistence.delete_plan(plan_id)
        if deleted:
            logger.info("Deleted plan id=%s", plan_id)
        else:
            logger.warning("Plan id=%s not found; nothing deleted", plan_id)
        return deleted
