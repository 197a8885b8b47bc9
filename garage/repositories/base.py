"""
Typed repository base.

A repository binds the generic entity manager to one table and converts
between pydantic schemas and the stored JSON documents.
"""
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from garage.exceptions import EntityValidationError
from garage.persistence.manager import EntityManager
from garage.persistence.query import QueryBuilder

EntityT = TypeVar("EntityT", bound=BaseModel)

Payload = Union[BaseModel, Dict[str, Any]]


def error_messages(exc: ValidationError) -> List[str]:
    """Flatten pydantic errors into ``field: message`` strings."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return messages


class BaseRepository(Generic[EntityT]):
    """CRUD and lookups for one table."""

    table: str
    entity_schema: Type[EntityT]
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]

    def __init__(self, manager: EntityManager):
        self.manager = manager

    # Conversion

    def _to_entity(self, doc: Optional[Dict[str, Any]]) -> Optional[EntityT]:
        return None if doc is None else self.entity_schema.model_validate(doc)

    def _to_entities(self, docs: List[Dict[str, Any]]) -> List[EntityT]:
        return [self.entity_schema.model_validate(doc) for doc in docs]

    @staticmethod
    def _parse(schema: Type[BaseModel], data: Payload) -> BaseModel:
        if isinstance(data, schema):
            return data
        if isinstance(data, BaseModel):
            data = data.model_dump(exclude_unset=True)
        try:
            return schema.model_validate(data)
        except ValidationError as exc:
            raise EntityValidationError(error_messages(exc)) from exc

    # Hooks for subclasses

    async def _prepare_create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return payload

    async def _prepare_update(self, entity_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return changes

    # CRUD

    async def save(self, data: Payload) -> EntityT:
        """Validate and store a new entity."""
        payload = self._parse(self.create_schema, data).model_dump(mode="json", exclude_none=True)
        payload = await self._prepare_create(payload)
        return self._to_entity(await self.manager.persist(self.table, payload))

    async def update(
        self,
        entity_id: str,
        data: Payload,
        *,
        expected_updated_at: Optional[Union[str, datetime]] = None,
    ) -> Optional[EntityT]:
        """Apply the fields set in ``data``. Returns None if the entity does not exist."""
        changes = self._parse(self.update_schema, data).model_dump(mode="json", exclude_unset=True)
        changes = await self._prepare_update(entity_id, changes)
        doc = await self.manager.update(self.table, entity_id, changes, expected_updated_at=expected_updated_at)
        return self._to_entity(doc)

    async def find_by_id(self, entity_id: str) -> Optional[EntityT]:
        return self._to_entity(await self.manager.find_by_id(self.table, entity_id))

    async def find_by(self, criteria: Dict[str, Any]) -> List[EntityT]:
        return self._to_entities(await self.manager.find_by(self.table, criteria))

    async def find_one_by(self, criteria: Dict[str, Any]) -> Optional[EntityT]:
        found = await self.manager.find_by(self.table, criteria)
        return self._to_entity(found[0]) if found else None

    async def find_all(self) -> List[EntityT]:
        return self._to_entities(await self.manager.find_all(self.table))

    async def delete(self, entity_id: str) -> bool:
        return await self.manager.remove(self.table, entity_id)

    async def count(self) -> int:
        return await self.manager.count(self.table)

    def create_query_builder(self) -> QueryBuilder:
        return self.manager.create_query_builder(self.table)

    async def find_list(self, skip: int = 0, limit: int = 100) -> List[EntityT]:
        """A page of entities, oldest first."""
        rows = await self.create_query_builder().offset(skip).limit(limit).execute()
        return self._to_entities(rows)

    async def execute(self, query: QueryBuilder) -> List[EntityT]:
        return self._to_entities(await query.execute())

    async def find_with_relations(self, entity_id: str, relations: List[str]) -> Optional[EntityT]:
        return self._to_entity(await self.manager.find_with_relations(self.table, entity_id, relations))
