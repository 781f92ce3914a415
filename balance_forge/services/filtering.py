from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from ..models.cell_value import format_cell, parse_float
from ..models.row import Row

"""Row filters.

Filters are stateless: ``apply(rows)`` returns a new list and never mutates the rows or
the table they came from. All comparisons work on the display form of the cell value
(see ``format_cell``); a row whose filtered cell is absent never matches.
"""

__all__ = [
    "ColumnFilter",
    "CompositeFilter",
    "Filter",
    "FilterCondition",
    "FilterOperator",
    "LogicalOperator",
]


class Filter(Protocol):
    def apply(self, rows: Sequence[Row]) -> list[Row]: ...


class FilterOperator(Enum):
    EQUALS = "Equals"
    NOT_EQUALS = "NotEquals"
    GREATER_THAN = "GreaterThan"
    LESS_THAN = "LessThan"
    CONTAINS = "Contains"
    STARTS_WITH = "StartsWith"
    ENDS_WITH = "EndsWith"


class LogicalOperator(Enum):
    AND = "And"
    OR = "Or"


@dataclass(frozen=True)
class FilterCondition:
    column_id: str
    operator: FilterOperator
    value: Any = None

    def matches(self, row: Row) -> bool:
        cell = row.get_value(self.column_id)
        if cell is None:
            return False

        cell_str = format_cell(cell)
        value_str = format_cell(self.value)
        op = self.operator

        if op is FilterOperator.EQUALS:
            return cell_str.casefold() == value_str.casefold()
        if op is FilterOperator.NOT_EQUALS:
            return cell_str.casefold() != value_str.casefold()
        if op is FilterOperator.CONTAINS:
            return value_str.casefold() in cell_str.casefold()
        if op is FilterOperator.STARTS_WITH:
            return cell_str.casefold().startswith(value_str.casefold())
        if op is FilterOperator.ENDS_WITH:
            return cell_str.casefold().endswith(value_str.casefold())

        # Ordering: numeric when both sides parse, plain string order otherwise
        cell_num = parse_float(cell_str)
        value_num = parse_float(value_str)
        if cell_num is not None and value_num is not None:
            left: Any = cell_num
            right: Any = value_num
        else:
            left, right = cell_str, value_str
        if op is FilterOperator.GREATER_THAN:
            return left > right
        if op is FilterOperator.LESS_THAN:
            return left < right
        return False


class ColumnFilter:
    def __init__(self, condition: FilterCondition) -> None:
        self.condition = condition

    def apply(self, rows: Sequence[Row]) -> list[Row]:
        return [row for row in rows if self.condition.matches(row)]


class CompositeFilter:
    """Combines child filters.

    AND narrows sequentially (each child sees the previous child's output, input order
    preserved). OR takes the union of each child applied to the original input,
    de-duplicated by row identity. The order of an OR result is not guaranteed; callers
    that need a stable order should sort the result.
    """

    def __init__(self, logical_op: LogicalOperator = LogicalOperator.AND, filters: Iterable[Filter] = ()) -> None:
        self.logical_op = logical_op
        self.filters: list[Filter] = list(filters)

    def add_filter(self, filter_: Filter) -> None:
        self.filters.append(filter_)

    def apply(self, rows: Sequence[Row]) -> list[Row]:
        if not self.filters:
            return list(rows)

        if self.logical_op is LogicalOperator.AND:
            result = list(rows)
            for child in self.filters:
                result = child.apply(result)
            return result

        union: dict[int, Row] = {}
        for child in self.filters:
            for row in child.apply(rows):
                union.setdefault(id(row), row)
        return list(union.values())
