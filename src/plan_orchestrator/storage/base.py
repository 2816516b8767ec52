"""Storage interfaces shared by the entity repositories."""

from __future__ import annotations

from typing import Protocol, TypeVar

from pydantic import BaseModel

EntityT = TypeVar("EntityT", bound=BaseModel)


class EntityRepository(Protocol[EntityT]):
    def create(self, data: BaseModel) -> EntityT: ...

    def find_by_id(self, entity_id: str) -> EntityT | None: ...

    def find_all(self) -> list[EntityT]: ...

    def update(self, entity_id: str, patch: BaseModel | None = None) -> EntityT | None: ...

    def delete(self, entity_id: str) -> bool: ...
