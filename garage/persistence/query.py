"""
In-memory query builder.

Queries load the whole table and evaluate filters, ordering and
pagination in Python. Declared indexes are not used.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from functools import cmp_to_key
from typing import Any, Awaitable, Callable, Dict, List, Optional

from garage.exceptions import QueryError
from garage.persistence.validator import parse_datetime

OPERATORS = ("=", "!=", ">", "<", ">=", "<=", "LIKE", "IN")
DIRECTIONS = ("ASC", "DESC")

RowLoader = Callable[[str], Awaitable[List[Dict[str, Any]]]]


@dataclass(frozen=True)
class Condition:
    field: str
    operator: str
    value: Any
    logic: str = "AND"


@dataclass(frozen=True)
class Join:
    table: str
    condition: str
    type: str = "INNER"


def _as_datetime(value: Any) -> Any:
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime.combine(value, time.min)
    else:
        return value
    if result.tzinfo is None:
        result = result.replace(tzinfo=timezone.utc)
    return result


def _align(field_value: Any, compare_value: Any):
    """Bring a stored ISO string and a date query value to the same type."""
    if isinstance(compare_value, (datetime, date)):
        if isinstance(field_value, str):
            try:
                field_value = parse_datetime(field_value)
            except ValueError:
                return field_value, compare_value
        return _as_datetime(field_value), _as_datetime(compare_value)
    return field_value, compare_value


def evaluate_condition(field_value: Any, operator: str, compare_value: Any) -> bool:
    if operator == "LIKE":
        return (isinstance(field_value, str) and isinstance(compare_value, str)
                and compare_value.casefold() in field_value.casefold())
    if operator == "IN":
        return (isinstance(compare_value, (list, tuple, set, frozenset))
                and any(field_value == candidate for candidate in compare_value))

    field_value, compare_value = _align(field_value, compare_value)
    try:
        if operator == "=":
            return field_value == compare_value
        if operator == "!=":
            return field_value != compare_value
        if operator == ">":
            return field_value > compare_value
        if operator == "<":
            return field_value < compare_value
        if operator == ">=":
            return field_value >= compare_value
        if operator == "<=":
            return field_value <= compare_value
    except TypeError:
        return False
    return False


def matches(row: Dict[str, Any], conditions: List[Condition]) -> bool:
    """
    Fold the conditions left to right.

    Each condition is combined with the accumulated result using the logic
    of the condition before it, so ``where(a).or_where(b).where(c)`` is
    ``(a AND b) OR c``. Callers wanting ``a OR b`` write
    ``or_where(a).where(b)``.
    """
    result = True
    pending = "AND"
    for condition in conditions:
        outcome = evaluate_condition(row.get(condition.field), condition.operator, condition.value)
        if pending == "AND":
            result = result and outcome
        else:
            result = result or outcome
        pending = condition.logic
    return result


def _compare(a: Any, b: Any) -> int:
    # Incomparable values (None, mixed types) keep their relative order
    try:
        if a < b:
            return -1
        if a > b:
            return 1
    except TypeError:
        pass
    return 0


class QueryBuilder:
    """Chainable query over one table."""

    def __init__(self, table: str, loader: RowLoader):
        self.table = table
        self._loader = loader
        self.select_fields: List[str] = []
        self.conditions: List[Condition] = []
        self.order_field: Optional[str] = None
        self.order_direction = "ASC"
        self.limit_count: Optional[int] = None
        self.offset_count: Optional[int] = None
        # Recorded only; results are never joined
        self.joins: List[Join] = []

    def select(self, fields: Optional[List[str]] = None) -> "QueryBuilder":
        self.select_fields = list(fields or [])
        return self

    def where(self, field: str, operator: str, value: Any) -> "QueryBuilder":
        return self._add(field, operator, value, "AND")

    def or_where(self, field: str, operator: str, value: Any) -> "QueryBuilder":
        return self._add(field, operator, value, "OR")

    def _add(self, field: str, operator: str, value: Any, logic: str) -> "QueryBuilder":
        operator = operator.upper()
        if operator not in OPERATORS:
            raise QueryError(f"Unsupported operator {operator!r}")
        self.conditions.append(Condition(field, operator, value, logic))
        return self

    def order_by(self, field: str, direction: str = "ASC") -> "QueryBuilder":
        direction = direction.upper()
        if direction not in DIRECTIONS:
            raise QueryError(f"Unsupported direction {direction!r}")
        self.order_field = field
        self.order_direction = direction
        return self

    def limit(self, count: int) -> "QueryBuilder":
        self.limit_count = count
        return self

    def offset(self, count: int) -> "QueryBuilder":
        self.offset_count = count
        return self

    def join(self, table: str, condition: str) -> "QueryBuilder":
        self.joins.append(Join(table, condition, "INNER"))
        return self

    def left_join(self, table: str, condition: str) -> "QueryBuilder":
        self.joins.append(Join(table, condition, "LEFT"))
        return self

    def apply(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Run the query pipeline over already loaded rows."""
        if self.conditions:
            rows = [row for row in rows if matches(row, self.conditions)]

        if self.order_field:
            sign = -1 if self.order_direction == "DESC" else 1
            order_field = self.order_field
            rows = sorted(rows, key=cmp_to_key(
                lambda a, b: sign * _compare(a.get(order_field), b.get(order_field))
            ))

        start = self.offset_count or 0
        if self.limit_count is not None:
            rows = rows[start:start + self.limit_count]
        elif start:
            rows = rows[start:]

        if self.select_fields:
            rows = [{name: row.get(name) for name in self.select_fields} for row in rows]
        return rows

    async def execute(self) -> List[Dict[str, Any]]:
        return self.apply(await self._loader(self.table))

    async def first(self) -> Optional[Dict[str, Any]]:
        self.limit_count = 1
        results = await self.execute()
        return results[0] if results else None

    async def count(self) -> int:
        return len(await self.execute())
