from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key
from typing import Any

from ..models.cell_value import CellType, format_cell, parse_bool, parse_float, parse_int
from ..models.row import Row
from ..models.table import Table
from .filtering import Filter

"""Row sorting and the derived display view.

sort_rows() returns a new list; the source rows and their table are never reordered.
Absent values compare lower than any value, then the direction is applied, so they lead
an ascending sort and trail a descending one. Equal keys keep their input order.
"""

__all__ = [
    "SortDirection",
    "SortingState",
    "apply_view",
    "sort_rows",
]


class SortDirection(Enum):
    NONE = "None"
    ASCENDING = "Ascending"
    DESCENDING = "Descending"


@dataclass
class SortingState:
    """Header-click sort state: same column cycles Asc -> Desc -> None -> Asc."""
    sort_column_id: str | None = None
    direction: SortDirection = SortDirection.NONE

    def toggle(self, column_id: str) -> None:
        if self.sort_column_id != column_id:
            self.sort_column_id = column_id
            self.direction = SortDirection.ASCENDING
            return
        self.direction = {
            SortDirection.NONE: SortDirection.ASCENDING,
            SortDirection.ASCENDING: SortDirection.DESCENDING,
            SortDirection.DESCENDING: SortDirection.NONE,
        }[self.direction]

    @property
    def active(self) -> bool:
        return self.sort_column_id is not None and self.direction is not SortDirection.NONE


def _numeric_key(value: Any, column_type: CellType) -> float | None:
    if column_type is CellType.BOOLEAN:
        if isinstance(value, bool):
            return float(value)
        parsed_b = parse_bool(format_cell(value))
        return None if parsed_b is None else float(parsed_b)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    text = format_cell(value)
    parsed = parse_int(text) if column_type is CellType.INTEGER else parse_float(text)
    return None if parsed is None else float(parsed)


def _compare_values(x: Any, y: Any, column_type: CellType) -> int:
    if column_type.is_numeric:
        nx = _numeric_key(x, column_type)
        ny = _numeric_key(y, column_type)
        if nx is not None and ny is not None:
            return (nx > ny) - (nx < ny)
    sx = format_cell(x).casefold()
    sy = format_cell(y).casefold()
    return (sx > sy) - (sx < sy)


def sort_rows(
    rows: Sequence[Row],
    column_id: str,
    direction: SortDirection,
    column_type: CellType,
) -> list[Row]:
    if direction is SortDirection.NONE or len(rows) < 2:
        return list(rows)

    # Decode up front so the comparison loop never hits lazy deserialization
    for row in rows:
        row.ensure_deserialized()

    multiplier = 1 if direction is SortDirection.ASCENDING else -1

    def compare(a: Row, b: Row) -> int:
        va = a.get_value(column_id)
        vb = b.get_value(column_id)
        if va is None and vb is None:
            return 0
        if va is None:
            return -multiplier
        if vb is None:
            return multiplier
        return _compare_values(va, vb, column_type) * multiplier

    return sorted(rows, key=cmp_to_key(compare))


def apply_view(
    table: Table,
    filter_: Filter | None = None,
    sorting: SortingState | None = None,
) -> list[Row]:
    """Displayed rows of ``table``: filtered first, then sorted by the active sort column."""
    rows = table.rows
    if filter_ is not None:
        rows = filter_.apply(rows)
    if sorting is not None and sorting.active:
        assert sorting.sort_column_id is not None
        column = table.get_column(sorting.sort_column_id)
        if column is not None:
            rows = sort_rows(rows, column.column_id, sorting.direction, column.data_type)
    return rows
