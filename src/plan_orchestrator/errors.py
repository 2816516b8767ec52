"""Error taxonomy for the planning core.

Absent entities are reported as ``None`` by the services, not raised.
Store failures surface as the underlying ``sqlite3.Error`` unchanged.
"""

from __future__ import annotations


class PlanningError(Exception):
    """Base class for errors raised by the planning core."""


class EntityValidationError(PlanningError, ValueError):
    """A payload or merged entity failed validation; nothing was written."""


class IntegrityFault(PlanningError, RuntimeError):
    """A stored row failed validation on its way out of the store."""

    def __init__(self, table: str, row_id: str | None, detail: str) -> None:
        self.table = table
        self.row_id = row_id
        super().__init__(f"Invalid row in '{table}' (id={row_id}): {detail}")
