"""
Schema-driven entity validation.
"""
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Protocol

from garage.persistence.schema import Constraint, FieldDefinition, SchemaRegistry


class EntityLookup(Protocol):
    """Read access the validator needs to check constraints."""

    async def find_by(self, table: str, criteria: Dict[str, Any]) -> List[Dict[str, Any]]:
        ...

    async def find_by_id(self, table: str, entity_id: str) -> Optional[Dict[str, Any]]:
        ...


@dataclass
class ValidationResult:
    """Outcome of validating one entity."""
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def is_empty(value: Any) -> bool:
    return value is None or value == ""


def parse_datetime(value: str) -> datetime:
    """Parse an ISO 8601 string, accepting a trailing ``Z``."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def matches_type(value: Any, expected: str) -> bool:
    if expected == "string":
        return isinstance(value, str)
    if expected == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)
    if expected == "boolean":
        return isinstance(value, bool)
    if expected == "date":
        if isinstance(value, (datetime, date)):
            return True
        if not isinstance(value, str):
            return False
        try:
            parse_datetime(value)
        except ValueError:
            return False
        return True
    if expected == "array":
        return isinstance(value, (list, tuple))
    if expected == "object":
        return isinstance(value, dict)
    return True


class EntityValidator:
    """Checks candidates against the registry: fields first, then constraints."""

    def __init__(self, registry: SchemaRegistry, lookup: EntityLookup):
        self.registry = registry
        self.lookup = lookup

    async def validate_entity(self, table: str, candidate: Dict[str, Any]) -> ValidationResult:
        result = ValidationResult()
        schema = self.registry.get_table(table)
        if schema is None:
            result.errors.append(f"No schema defined for table {table}")
            return result

        for name, definition in schema.fields.items():
            result.errors.extend(self._check_field(name, definition, candidate.get(name)))

        for constraint in schema.constraints:
            if not await self._check_constraint(table, candidate, constraint):
                result.errors.append(constraint.message)

        return result

    @staticmethod
    def _check_field(name: str, definition: FieldDefinition, value: Any) -> List[str]:
        if is_empty(value):
            return [f"The field {name} is required"] if definition.required else []

        if not matches_type(value, definition.type):
            return [f"The field {name} must be of type {definition.type}"]

        errors = []
        if definition.type == "string":
            if definition.min_length is not None and len(value) < definition.min_length:
                errors.append(f"The field {name} must contain at least {definition.min_length} characters")
            if definition.max_length is not None and len(value) > definition.max_length:
                errors.append(f"The field {name} cannot exceed {definition.max_length} characters")
        return errors

    async def _check_constraint(self, table: str, candidate: Dict[str, Any], constraint: Constraint) -> bool:
        value = candidate.get(constraint.field)
        # Empty values are the business of the required check
        if is_empty(value):
            return True

        if constraint.type == "unique":
            existing = await self.lookup.find_by(table, {constraint.field: value})
            entity_id = candidate.get("id")
            return all(entity_id and row.get("id") == entity_id for row in existing)

        if constraint.type == "foreign_key":
            reference = constraint.reference
            if reference.field == "id":
                return await self.lookup.find_by_id(reference.table, value) is not None
            return bool(await self.lookup.find_by(reference.table, {reference.field: value}))

        if constraint.type == "check":
            try:
                return bool(constraint.condition(value))
            except (TypeError, ValueError):
                return False

        return True
