"""
Persistence core: schemas, validation, queries and the entity manager.
"""
from garage.persistence.manager import EntityManager, Page, generate_id
from garage.persistence.query import QueryBuilder
from garage.persistence.schema import Constraint, FieldDefinition, Reference, Relation, SchemaRegistry, TableSchema
from garage.persistence.tables import build_default_registry
from garage.persistence.validator import EntityValidator, ValidationResult

__all__ = [
    "EntityManager", "Page", "generate_id",
    "QueryBuilder",
    "Constraint", "FieldDefinition", "Reference", "Relation", "SchemaRegistry", "TableSchema",
    "build_default_registry",
    "EntityValidator", "ValidationResult",
]
