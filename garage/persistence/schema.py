"""
Declarative table schemas and the registry that holds them.

A schema describes the stored shape of an entity table: its fields, the
constraints checked before every write and the relations used to hydrate
related entities. Schema objects validate themselves when built, so a
malformed definition fails at startup rather than on the first save.
"""
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from garage.exceptions import SchemaError

FieldType = Literal["string", "number", "boolean", "date", "array", "object"]
ConstraintType = Literal["unique", "foreign_key", "check"]
RelationType = Literal["one_to_one", "one_to_many", "many_to_one", "many_to_many"]


class FieldDefinition(BaseModel):
    """Type and bounds of one stored field."""
    model_config = ConfigDict(frozen=True)

    type: FieldType
    required: bool = False
    unique: bool = False
    default: Any = None
    min_length: Optional[int] = Field(None, ge=0)
    max_length: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_bounds(self):
        if (self.min_length is not None or self.max_length is not None) and self.type != "string":
            raise ValueError("min_length/max_length only apply to string fields")
        if self.min_length is not None and self.max_length is not None and self.min_length > self.max_length:
            raise ValueError("min_length cannot exceed max_length")
        return self


class Reference(BaseModel):
    """Target of a foreign key."""
    model_config = ConfigDict(frozen=True)

    table: str
    field: str = "id"


class Constraint(BaseModel):
    """Rule checked against existing data before an entity is written."""
    model_config = ConfigDict(frozen=True)

    type: ConstraintType
    field: str
    message: str
    reference: Optional[Reference] = None
    condition: Optional[Callable[[Any], bool]] = None

    @model_validator(mode="after")
    def check_shape(self):
        if self.type == "foreign_key" and self.reference is None:
            raise ValueError(f"foreign_key constraint on {self.field} needs a reference")
        if self.type == "check" and self.condition is None:
            raise ValueError(f"check constraint on {self.field} needs a condition")
        return self


class TableSchema(BaseModel):
    """Fields, constraints and advisory indexes of a table.

    Indexes are documentation only: every query is a linear scan.
    """

    name: str
    fields: Dict[str, FieldDefinition]
    constraints: List[Constraint] = Field(default_factory=list)
    indexes: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_fields(self):
        for constraint in self.constraints:
            if constraint.field not in self.fields:
                raise ValueError(f"constraint on unknown field {self.name}.{constraint.field}")
        for index in self.indexes:
            if index not in self.fields:
                raise ValueError(f"index on unknown field {self.name}.{index}")

        # Fields flagged unique get a constraint even when none was declared
        declared = {c.field for c in self.constraints if c.type == "unique"}
        for field_name, definition in self.fields.items():
            if definition.unique and field_name not in declared:
                self.constraints.append(Constraint(
                    type="unique",
                    field=field_name,
                    message=f"The value of {field_name} is already used",
                ))
        return self

    def defaults(self) -> Dict[str, Any]:
        """Fields carrying a default value."""
        return {name: f.default for name, f in self.fields.items() if f.default is not None}


class Relation(BaseModel):
    """Link from one table to another, resolved by foreign key at read time.

    ``field`` is the attribute the related data is attached under.
    One-to-many relations find rows of ``entity`` whose ``mapped_by`` column
    holds this entity's id. Many-to-one and one-to-one relations follow this
    entity's ``foreign_key`` column, ``<field>_id`` unless given.
    """
    model_config = ConfigDict(frozen=True)

    type: RelationType
    entity: str
    field: str
    mapped_by: Optional[str] = None
    inversed_by: Optional[str] = None
    foreign_key: Optional[str] = None
    join_table: Optional[str] = None

    @model_validator(mode="after")
    def check_mapping(self):
        if self.type == "one_to_many" and not self.mapped_by:
            raise ValueError(f"one_to_many relation {self.field} needs mapped_by")
        return self

    @property
    def join_column(self) -> str:
        return self.foreign_key or f"{self.field}_id"


class SchemaRegistry:
    """Table schemas and relations known to an entity manager."""

    def __init__(self):
        self._tables: Dict[str, TableSchema] = {}
        self._relations: Dict[str, List[Relation]] = {}

    def define_table(self, name: str, schema: TableSchema) -> None:
        if schema.name != name:
            raise SchemaError(f"Schema named {schema.name} registered as {name}")
        self._tables[name] = schema

    def add_relation(self, table: str, relation: Relation) -> None:
        self._relations.setdefault(table, []).append(relation)

    def has_table(self, name: str) -> bool:
        return name in self._tables

    def get_table(self, name: str) -> Optional[TableSchema]:
        return self._tables.get(name)

    def require_table(self, name: str) -> TableSchema:
        schema = self._tables.get(name)
        if schema is None:
            raise SchemaError(f"No schema defined for table {name}")
        return schema

    def relations_for(self, table: str) -> List[Relation]:
        return list(self._relations.get(table, []))

    def get_relation(self, table: str, field: str) -> Optional[Relation]:
        for relation in self._relations.get(table, []):
            if relation.field == field:
                return relation
        return None

    @property
    def tables(self) -> List[str]:
        return list(self._tables)

    def check_integrity(self) -> None:
        """Ensure every reference and relation points to a registered table."""
        problems = []
        for table, schema in self._tables.items():
            for constraint in schema.constraints:
                if constraint.reference and constraint.reference.table not in self._tables:
                    problems.append(f"{table}.{constraint.field} references unknown table {constraint.reference.table}")
        for table, relations in self._relations.items():
            if table not in self._tables:
                problems.append(f"relations declared on unknown table {table}")
            for relation in relations:
                if relation.entity not in self._tables:
                    problems.append(f"{table}.{relation.field} targets unknown table {relation.entity}")
        if problems:
            raise SchemaError("; ".join(problems))
