"""
Generic entity manager.

Entities are plain JSON documents stored one per key under
``<prefix><table>:<id>``. Each stored value is an envelope carrying a
revision counter next to the entity, which lets ``update`` notice when a
row changed between its read and its write.
"""
import copy
import logging
import math
import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from pydantic_core import to_jsonable_python

from garage.exceptions import EntityValidationError, StaleEntityError, StorageUnavailableError
from garage.persistence.query import QueryBuilder
from garage.persistence.schema import SchemaRegistry
from garage.persistence.validator import EntityValidator, ValidationResult, parse_datetime
from garage.storage import KeyValueStore

logger = logging.getLogger(__name__)

MIGRATIONS_KEY = "database_migrations"
PROTECTED_FIELDS = ("id", "created_at", "updated_at")

_BASE36 = string.digits + string.ascii_lowercase

Document = Dict[str, Any]


def _base36(number: int) -> str:
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits)) or "0"


def generate_id() -> str:
    """Millisecond timestamp in base 36 followed by a random token."""
    return _base36(int(time.time() * 1000)) + secrets.token_hex(5)


def utc_now() -> str:
    return to_jsonable_python(datetime.now(timezone.utc))


def _instant(value: Union[str, datetime]) -> datetime:
    if isinstance(value, str):
        value = parse_datetime(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class Page:
    """One page of a paginated lookup."""
    data: List[Document]
    total: int
    current_page: int
    limit: int
    total_pages: int = field(init=False)

    def __post_init__(self):
        self.total_pages = math.ceil(self.total / self.limit) if self.limit else 0


class EntityManager:
    """
    Persists, loads and validates entities of every registered table.

    The manager is constructed explicitly and handed to repositories; there
    is no process-wide instance.
    """

    def __init__(
        self,
        store: KeyValueStore,
        registry: SchemaRegistry,
        *,
        key_prefix: str = "entities_",
        validate_on_update: bool = True,
    ):
        self.store = store
        self.registry = registry
        self.key_prefix = key_prefix
        self.validate_on_update = validate_on_update
        self.validator = EntityValidator(registry, self)

    # Keys

    def _table_prefix(self, table: str) -> str:
        return f"{self.key_prefix}{table}:"

    def _key(self, table: str, entity_id: str) -> str:
        return f"{self._table_prefix(table)}{entity_id}"

    async def _ensure_ready(self) -> None:
        if not await self.store.is_ready():
            raise StorageUnavailableError("Storage service not available")

    async def _new_id(self, table: str) -> str:
        while True:
            entity_id = generate_id()
            if await self.store.get(self._key(table, entity_id)) is None:
                return entity_id

    # Validation

    async def validate(self, table: str, candidate: Document) -> ValidationResult:
        return await self.validator.validate_entity(table, candidate)

    async def _validate_or_raise(self, table: str, candidate: Document) -> None:
        result = await self.validate(table, candidate)
        if not result.is_valid:
            logger.info("Rejected %s entity: %s", table, "; ".join(result.errors))
            raise EntityValidationError(result.errors)

    # Writes

    async def persist(self, table: str, data: Dict[str, Any]) -> Document:
        """Validate and store a new entity, returning it with id and timestamps."""
        await self._ensure_ready()

        doc = {k: v for k, v in to_jsonable_python(data).items() if k not in PROTECTED_FIELDS}
        schema = self.registry.get_table(table)
        if schema is not None:
            for name, default in schema.defaults().items():
                if doc.get(name) is None:
                    doc[name] = copy.deepcopy(default)

        now = utc_now()
        entity = {"id": await self._new_id(table), **doc, "created_at": now, "updated_at": now}
        await self._validate_or_raise(table, entity)

        await self.store.set(self._key(table, entity["id"]), {"revision": 1, "entity": entity})
        logger.debug("Persisted %s/%s", table, entity["id"])
        return entity

    async def update(
        self,
        table: str,
        entity_id: str,
        changes: Dict[str, Any],
        *,
        expected_updated_at: Optional[Union[str, datetime]] = None,
    ) -> Optional[Document]:
        """
        Merge ``changes`` into an existing entity.

        Returns None when the entity does not exist. Raises StaleEntityError
        when the stored row no longer matches ``expected_updated_at`` or was
        rewritten while this update was being validated.
        """
        await self._ensure_ready()
        key = self._key(table, entity_id)
        envelope = await self.store.get(key)
        if envelope is None:
            return None

        current = envelope["entity"]
        revision = envelope.get("revision", 0)
        if expected_updated_at is not None and _instant(expected_updated_at) != _instant(current["updated_at"]):
            raise StaleEntityError(table, entity_id)

        changes = {k: v for k, v in to_jsonable_python(changes).items() if k not in PROTECTED_FIELDS}
        updated = {**current, **changes, "updated_at": utc_now()}
        if self.validate_on_update:
            await self._validate_or_raise(table, updated)

        latest = await self.store.get(key)
        if latest is None:
            return None
        if latest.get("revision", 0) != revision:
            logger.warning("Concurrent write detected on %s/%s", table, entity_id)
            raise StaleEntityError(table, entity_id)

        await self.store.set(key, {"revision": revision + 1, "entity": updated})
        logger.debug("Updated %s/%s to revision %d", table, entity_id, revision + 1)
        return updated

    async def remove(self, table: str, entity_id: str) -> bool:
        """Delete an entity. Returns False when there was nothing to delete."""
        await self._ensure_ready()
        key = self._key(table, entity_id)
        if await self.store.get(key) is None:
            return False
        await self.store.delete(key)
        logger.debug("Removed %s/%s", table, entity_id)
        return True

    # Reads

    async def find_by_id(self, table: str, entity_id: str) -> Optional[Document]:
        await self._ensure_ready()
        envelope = await self.store.get(self._key(table, entity_id))
        return None if envelope is None else envelope["entity"]

    async def find_all(self, table: str) -> List[Document]:
        """Every entity of the table, oldest first."""
        await self._ensure_ready()
        keys = await self.store.keys(self._table_prefix(table))
        envelopes = await self.store.get_many(keys)
        rows = [envelope["entity"] for envelope in envelopes.values()]
        rows.sort(key=lambda row: (row.get("created_at") or "", row.get("id") or ""))
        return rows

    async def find_by(self, table: str, criteria: Dict[str, Any]) -> List[Document]:
        """Entities whose fields equal every value in ``criteria``."""
        criteria = to_jsonable_python(criteria)
        rows = await self.find_all(table)
        return [row for row in rows if all(row.get(k) == v for k, v in criteria.items())]

    async def count(self, table: str) -> int:
        await self._ensure_ready()
        return len(await self.store.keys(self._table_prefix(table)))

    async def find_with_pagination(
        self,
        table: str,
        page: int = 1,
        limit: int = 10,
        criteria: Optional[Dict[str, Any]] = None,
    ) -> Page:
        page = max(page, 1)
        rows = await self.find_by(table, criteria) if criteria else await self.find_all(table)
        start = (page - 1) * limit
        return Page(data=rows[start:start + limit], total=len(rows), current_page=page, limit=limit)

    def create_query_builder(self, table: str) -> QueryBuilder:
        return QueryBuilder(table, self.find_all)

    async def find_with_relations(self, table: str, entity_id: str, relations: List[str]) -> Optional[Document]:
        """
        Load an entity and attach related entities under each relation name.

        Unknown relation names are skipped. The stored entity is not modified.
        """
        entity = await self.find_by_id(table, entity_id)
        if entity is None:
            return None

        result = dict(entity)
        for name in relations:
            relation = self.registry.get_relation(table, name)
            if relation is None:
                logger.debug("No relation %s on %s", name, table)
                continue

            if relation.type == "one_to_many":
                result[name] = await self.find_by(relation.entity, {relation.mapped_by: entity["id"]})
            elif relation.type == "one_to_one" and relation.mapped_by:
                matches = await self.find_by(relation.entity, {relation.mapped_by: entity["id"]})
                result[name] = matches[0] if matches else None
            elif relation.type in ("many_to_one", "one_to_one"):
                foreign_key = entity.get(relation.join_column)
                result[name] = await self.find_by_id(relation.entity, foreign_key) if foreign_key else None
            else:
                logger.debug("Relation type %s is not hydrated", relation.type)
        return result

    # Maintenance

    async def clear(self, table: str) -> int:
        """Delete every entity of a table."""
        await self._ensure_ready()
        keys = await self.store.keys(self._table_prefix(table))
        for key in keys:
            await self.store.delete(key)
        logger.info("Cleared %d %s", len(keys), table)
        return len(keys)

    async def export_data(self) -> Dict[str, List[Document]]:
        return {table: await self.find_all(table) for table in self.registry.tables}

    async def import_data(self, data: Dict[str, List[Document]]) -> Dict[str, int]:
        """
        Replace the content of every registered table present in ``data``.

        Rows are written as given, without validation; missing ids and
        timestamps are filled in.
        """
        imported = {}
        for table, rows in data.items():
            if not self.registry.has_table(table):
                logger.warning("Skipping import of unknown table %s", table)
                continue
            await self.clear(table)
            for row in rows:
                row = dict(to_jsonable_python(row))
                row.setdefault("id", await self._new_id(table))
                row.setdefault("created_at", utc_now())
                row.setdefault("updated_at", row["created_at"])
                await self.store.set(self._key(table, row["id"]), {"revision": 1, "entity": row})
            imported[table] = len(rows)
        logger.info("Imported %s", imported)
        return imported

    async def run_migration(self, name: str, migration: Callable[[], Awaitable[None]]) -> bool:
        """Run a named migration once. Returns False if it already ran."""
        await self._ensure_ready()
        applied = await self.store.get(MIGRATIONS_KEY) or []
        if name in applied:
            logger.info("Migration %s already applied", name)
            return False

        try:
            await migration()
        except Exception:
            logger.error("Migration %s failed", name)
            raise

        await self.store.set(MIGRATIONS_KEY, [*applied, name])
        logger.info("Migration %s applied", name)
        return True
