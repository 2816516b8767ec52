"""Shared CRUD helpers and the generic table-backed repository.

Entity-specific behaviour is data, not overrides: each table is described by a
``TableSpec`` (table name, pydantic model, boolean and date columns) and every
helper here works from that description.

Beginner terms:
- Marshalling: converting between Python values and what SQLite stores
  (booleans as 0/1, datetimes as sortable ISO-8601 text).
- Row factory: ``sqlite3.Row`` lets rows be read like dicts.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, Generic

from pydantic import BaseModel, ValidationError

from plan_orchestrator.errors import IntegrityFault
from plan_orchestrator.storage.base import EntityT
from plan_orchestrator.storage.database import Database

logger = logging.getLogger(__name__)

DATE_COLUMNS = frozenset({"creation_date", "updated_at", "completion_date"})
ORDERED = '"order" ASC, rowid ASC'


@dataclass(frozen=True)
class TableSpec(Generic[EntityT]):
    name: str
    model: type[EntityT]
    boolean_columns: frozenset[str] = field(default_factory=frozenset)
    date_columns: frozenset[str] = DATE_COLUMNS


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def format_timestamp(value: datetime) -> str:
    """Render a datetime as fixed-width UTC text so string order is time order."""
    if value.tzinfo is None:
        raise ValueError(f"Timezone-aware datetime required, got {value!r}")
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def parse_timestamp(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str):
        return datetime.fromisoformat(raw)
    raise TypeError(f"Unsupported datetime value: {type(raw)!r}")


def next_timestamp(previous: datetime | None) -> datetime:
    """Return "now", bumped past ``previous`` so updated_at strictly increases."""
    now = utc_now()
    if previous is not None and now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def to_db_value(value: Any) -> Any:
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, datetime):
        return format_timestamp(value)
    return value


def quote(column: str) -> str:
    return f'"{column}"'


def row_to_entity(table: TableSpec[EntityT], row: sqlite3.Row | Mapping[str, Any]) -> EntityT:
    """Convert one stored row to a validated entity or raise IntegrityFault."""
    data = dict(row)
    row_id = data.get("id")
    for column in table.boolean_columns:
        if data.get(column) in (0, 1):
            data[column] = bool(data[column])
    for column in table.date_columns:
        raw = data.get(column)
        if raw is None:
            continue
        try:
            data[column] = parse_timestamp(raw)
        except (TypeError, ValueError) as exc:
            raise IntegrityFault(table.name, row_id, f"{column}: {exc}") from exc
    try:
        return table.model.model_validate(data)
    except ValidationError as exc:
        raise IntegrityFault(table.name, row_id, str(exc)) from exc


def insert_row(database: Database, table: TableSpec[Any], values: Mapping[str, Any]) -> str:
    """Insert the supplied columns plus id and timestamps; return the new id."""
    entity_id = str(uuid.uuid4())
    now = format_timestamp(utc_now())
    record = {key: to_db_value(value) for key, value in values.items()}
    record.update(id=entity_id, creation_date=now, updated_at=now)
    columns = ", ".join(quote(column) for column in record)
    placeholders = ", ".join("?" for _ in record)
    database.execute(
        f"INSERT INTO {table.name} ({columns}) VALUES ({placeholders})",
        list(record.values()),
    )
    return entity_id


def select_by_id(database: Database, table: TableSpec[EntityT], entity_id: str) -> EntityT | None:
    row = database.fetchone(f"SELECT * FROM {table.name} WHERE id = ?", (entity_id,))
    if row is None:
        return None
    return row_to_entity(table, row)


def select_where(
    database: Database,
    table: TableSpec[EntityT],
    where: str | None = None,
    params: Sequence[Any] = (),
    *,
    order_by: str = "rowid ASC",
) -> list[EntityT]:
    sql = f"SELECT * FROM {table.name}"
    if where:
        sql += f" WHERE {where}"
    sql += f" ORDER BY {order_by}"
    return [row_to_entity(table, row) for row in database.fetchall(sql, params)]


def update_row(
    database: Database,
    table: TableSpec[Any],
    entity_id: str,
    values: Mapping[str, Any],
    updated_at: datetime,
) -> bool:
    record = {key: to_db_value(value) for key, value in values.items() if key != "id"}
    record["updated_at"] = format_timestamp(updated_at)
    assignments = ", ".join(f"{quote(column)} = ?" for column in record)
    cursor = database.execute(
        f"UPDATE {table.name} SET {assignments} WHERE id = ?",
        [*record.values(), entity_id],
    )
    return cursor.rowcount > 0


def delete_row(database: Database, table: TableSpec[Any], entity_id: str) -> bool:
    cursor = database.execute(f"DELETE FROM {table.name} WHERE id = ?", (entity_id,))
    return cursor.rowcount > 0


class Repository(Generic[EntityT]):
    """CRUD for one table, driven entirely by its ``TableSpec``."""

    def __init__(self, database: Database, table: TableSpec[EntityT]) -> None:
        self.database = database
        self.table = table
        logger.debug("Repository for table '%s' initialized on %s", table.name, database.path)

    def create(self, data: BaseModel) -> EntityT:
        """Insert only the explicitly set fields and return the stored entity."""
        entity_id = insert_row(self.database, self.table, data.model_dump(exclude_unset=True))
        created = self.find_by_id(entity_id)
        if created is None:
            raise RuntimeError(f"Failed to load created row from '{self.table.name}'")
        return created

    def find_by_id(self, entity_id: str) -> EntityT | None:
        return select_by_id(self.database, self.table, entity_id)

    def find_all(self) -> list[EntityT]:
        return select_where(self.database, self.table)

    def update(self, entity_id: str, patch: BaseModel | None = None) -> EntityT | None:
        """Merge the explicitly set patch fields; an empty patch only touches updated_at."""
        current = self.find_by_id(entity_id)
        if current is None:
            return None
        values = patch.model_dump(exclude_unset=True) if patch is not None else {}
        stamp = next_timestamp(getattr(current, "updated_at", None))
        update_row(self.database, self.table, entity_id, values, stamp)
        return self.find_by_id(entity_id)

    def delete(self, entity_id: str) -> bool:
        return delete_row(self.database, self.table, entity_id)
