from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from typing import Any

from .cell_value import CellType, CellTypeError
from .column import ColumnSchema
from .row import AssetResolver, CellSnapshot, Row
from .validation_result import Severity, ValidationError, ValidationResult

"""Table model: ordered columns plus ordered rows.

Lookups and removals with unknown ids return a sentinel (None / False / -1) instead of
raising. Every structural or value mutation made through the Table bumps
``last_modified``.
"""

__all__ = [
    "Table",
]

logger = logging.getLogger(__name__)


class Table:
    def __init__(self, table_name: str = "", table_id: str | None = None) -> None:
        self._table_id = table_id or str(uuid.uuid4())
        self._table_name = table_name
        self._columns: list[ColumnSchema] = []
        self._rows: list[Row] = []
        self._last_modified = datetime.now(UTC)

    # -- identity -------------------------------------------------------------------

    @property
    def table_id(self) -> str:
        return self._table_id

    @property
    def table_name(self) -> str:
        return self._table_name

    @table_name.setter
    def table_name(self, value: str) -> None:
        self._table_name = value
        self.touch()

    @property
    def last_modified(self) -> datetime:
        return self._last_modified

    def touch(self) -> None:
        self._last_modified = datetime.now(UTC)

    # -- columns --------------------------------------------------------------------

    @property
    def columns(self) -> list[ColumnSchema]:
        return list(self._columns)

    def column_types(self) -> dict[str, CellType]:
        return {c.column_id: c.data_type for c in self._columns}

    def get_column(self, column_id: str) -> ColumnSchema | None:
        for column in self._columns:
            if column.column_id == column_id:
                return column
        return None

    def add_column(self, column: ColumnSchema) -> bool:
        """Append ``column`` and back-fill every row with its default value.

        Returns False (nothing changes) when the column id is already taken.
        """
        if self.get_column(column.column_id) is not None:
            logger.warning(f"table '{self._table_name}': duplicate column id '{column.column_id}' ignored")
            return False
        self._columns.append(column)
        default = column.default_value
        for row in self._rows:
            row.set_value(column.column_id, default, column.data_type)
        self.touch()
        return True

    def remove_column(self, column_id: str) -> bool:
        """Remove a column and clear its cell in every row. Unknown ids are a no-op."""
        column = self.get_column(column_id)
        if column is None:
            return False
        self._columns.remove(column)
        for row in self._rows:
            row.clear_value(column_id)
        self.touch()
        return True

    # -- rows -----------------------------------------------------------------------

    @property
    def rows(self) -> list[Row]:
        return list(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def new_row(self) -> Row:
        """Detached row pre-populated with every column's default value."""
        row = Row()
        for column in self._columns:
            row.set_value(column.column_id, column.default_value, column.data_type)
        return row

    def add_row(self) -> Row:
        row = self.new_row()
        self._rows.append(row)
        self.touch()
        return row

    def column_ids(self) -> list[str]:
        return [c.column_id for c in self._columns]

    def insert_row(
        self, row: Row, index: int | None = None, known_columns: Iterable[str] | None = None
    ) -> None:
        """Insert ``row`` at ``index``; out-of-range or None appends.

        The row is brought in line with the current columns first: cells of columns that
        no longer exist are cleared. ``known_columns`` are the column ids the table had
        when the row was detached; current columns outside that set were added meanwhile
        and get their default value, like add_column does for attached rows.
        """
        self._reconcile(row, known_columns)
        if index is None or not 0 <= index <= len(self._rows):
            self._rows.append(row)
        else:
            self._rows.insert(index, row)
        self.touch()

    def _reconcile(self, row: Row, known_columns: Iterable[str] | None) -> None:
        current = set(self.column_ids())
        for column_id in row.column_ids():
            if column_id not in current:
                row.clear_value(column_id)
        if known_columns is None:
            return
        known = set(known_columns)
        for column in self._columns:
            if column.column_id not in known and not row.has_value(column.column_id):
                row.set_value(column.column_id, column.default_value, column.data_type)

    def remove_row(self, row_id: str) -> bool:
        index = self.index_of(row_id)
        if index < 0:
            return False
        del self._rows[index]
        self.touch()
        return True

    def replace_rows(self, rows: Iterable[Row]) -> None:
        self._rows = list(rows)
        self.touch()

    def get_row(self, index: int) -> Row | None:
        if 0 <= index < len(self._rows):
            return self._rows[index]
        return None

    def find_row(self, row_id: str) -> Row | None:
        for row in self._rows:
            if row.row_id == row_id:
                return row
        return None

    def index_of(self, row_id: str) -> int:
        for index, row in enumerate(self._rows):
            if row.row_id == row_id:
                return index
        return -1

    # -- cells ----------------------------------------------------------------------

    def get_value(self, row_id: str, column_id: str) -> Any:
        row = self.find_row(row_id)
        return row.get_value(column_id) if row is not None else None

    def set_value(self, row_id: str, column_id: str, value: Any) -> bool:
        """Write a cell, coercing ``value`` to the column's declared type.

        Returns False without touching the row when the row or column is unknown or the
        value cannot be represented under the column's type.
        """
        row = self.find_row(row_id)
        column = self.get_column(column_id)
        if row is None or column is None:
            return False
        try:
            row.set_value(column_id, value, column.data_type)
        except CellTypeError as e:
            logger.warning(f"table '{self._table_name}': rejected write to {column_id}: {e}")
            return False
        self.touch()
        return True

    def restore_cell(self, row_id: str, column_id: str, snapshot: CellSnapshot) -> bool:
        row = self.find_row(row_id)
        if row is None or self.get_column(column_id) is None:
            return False
        row.restore(column_id, snapshot)
        self.touch()
        return True

    # -- validation -----------------------------------------------------------------

    def validate_data(self) -> ValidationResult:
        """Check every cell against its column. Rows outer, columns inner, stored order."""
        result = ValidationResult()
        for row in self._rows:
            for column in self._columns:
                message = column.check(row.get_value(column.column_id))
                if message is not None:
                    result.add_error(
                        ValidationError(
                            row_id=row.row_id,
                            column_id=column.column_id,
                            message=message,
                            severity=Severity.ERROR if column.is_required else Severity.WARNING,
                        )
                    )
        return result

    def has_structure(self, display_names: Sequence[str]) -> bool:
        """True when column count and positional display names match ``display_names``."""
        if len(self._columns) != len(display_names):
            return False
        return all(c.display_name == name for c, name in zip(self._columns, display_names, strict=True))

    # -- persistence layout ---------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "tableId": self._table_id,
            "tableName": self._table_name,
            "lastModified": self._last_modified.isoformat().replace("+00:00", "Z"),
            "columns": [c.to_dict() for c in self._columns],
            "rows": [r.to_dict() for r in self._rows],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], resolve_asset: AssetResolver | None = None) -> Table:
        table = cls(table_name=data.get("tableName", ""), table_id=data["tableId"])
        table._columns = [ColumnSchema.from_dict(c) for c in data.get("columns", [])]
        types = table.column_types()
        table._rows = [Row.from_dict(r, types, resolve_asset) for r in data.get("rows", [])]
        modified = data.get("lastModified")
        if modified:
            table._last_modified = datetime.fromisoformat(modified.replace("Z", "+00:00"))
        return table

    def __repr__(self) -> str:
        return (
            f"Table(table_name={self._table_name!r}, columns={len(self._columns)}, "
            f"rows={len(self._rows)})"
        )
