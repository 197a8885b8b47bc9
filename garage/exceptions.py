"""
Error taxonomy of the persistence core.

Not-found is never an exception: lookups return ``None`` and deletes return
``False``, leaving it to the caller to decide whether that is expected.
"""
from typing import Iterable, List


class GarageError(Exception):
    """Base class for all persistence core errors."""


class EntityValidationError(GarageError):
    """An entity failed schema, type or constraint validation.

    Raised before anything is written. ``errors`` holds every
    human-readable message collected during validation.
    """

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__(f"Validation errors: {', '.join(self.errors)}")


class StorageError(GarageError):
    """The key-value backend rejected an operation."""


class StorageUnavailableError(StorageError):
    """The key-value backend is not ready to serve requests."""


class StaleEntityError(GarageError):
    """An entity changed between the read and the write of an update."""

    def __init__(self, table: str, entity_id: str):
        self.table = table
        self.entity_id = entity_id
        super().__init__(f"Entity {entity_id} in {table} was modified concurrently")


class SchemaError(GarageError):
    """The schema registry was misused or is inconsistent."""


class QueryError(GarageError):
    """A query builder was given an unsupported operator or direction."""
