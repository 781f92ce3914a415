from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from ..models.cell_value import CellType, parse_bool, parse_float, parse_int
from ..models.column import ColumnSchema
from ..models.row import Row
from ..models.table import Table

"""CSV -> Table translation.

Format contract:
- lines are split on '\\n'; whitespace-only lines are skipped
- the first remaining line is the header (column display names)
- cells are split on ',' and trimmed; there is no quoting or escaping
- column types are inferred over every data cell: Boolean > Integer > Float > String
- column ids are ``col_<index>``; empty cells stay unset; cells past the header width
  are ignored
"""

__all__ = [
    "CsvHeaderError",
    "can_import",
    "import_csv",
    "import_csv_text",
    "infer_column_types",
    "split_csv_text",
    "table_from_records",
]


class CsvHeaderError(Exception):
    """Raised when CSV content has no header line."""


def can_import(path: Path) -> bool:
    return path.suffix.lower() == ".csv"


def split_csv_text(content: str) -> list[list[str]]:
    records: list[list[str]] = []
    for line in content.split("\n"):
        if not line.strip():
            continue
        records.append([cell.strip() for cell in line.split(",")])
    return records


def _infer_type(values: Sequence[str]) -> CellType:
    if not values:
        return CellType.STRING
    if all(parse_bool(v) is not None for v in values):
        return CellType.BOOLEAN
    if all(parse_int(v) is not None for v in values):
        return CellType.INTEGER
    if all(parse_float(v) is not None for v in values):
        return CellType.FLOAT
    return CellType.STRING


def infer_column_types(records: Sequence[Sequence[str]]) -> list[ColumnSchema]:
    """Build one ColumnSchema per header cell, typed from the data rows below it."""
    if not records:
        return []
    header = records[0]
    data = records[1:]
    columns: list[ColumnSchema] = []
    for index, name in enumerate(header):
        values = [record[index] for record in data if index < len(record)]
        columns.append(ColumnSchema(f"col_{index}", name.strip(), _infer_type(values)))
    return columns


def _parse_cell(text: str, cell_type: CellType) -> Any:
    if not text.strip():
        return None
    parsed: Any = None
    if cell_type is CellType.INTEGER:
        parsed = parse_int(text)
    elif cell_type is CellType.FLOAT:
        parsed = parse_float(text)
    elif cell_type is CellType.BOOLEAN:
        parsed = parse_bool(text)
    return parsed if parsed is not None else text.strip()


def table_from_records(records: Sequence[Sequence[str]], table_name: str) -> Table:
    if not records:
        raise CsvHeaderError(f"'{table_name}' has no header line")
    table = Table(table_name=table_name)
    columns = infer_column_types(records)
    for column in columns:
        table.add_column(column)

    rows: list[Row] = []
    width = len(records[0])
    for record in records[1:]:
        row = Row()
        for index in range(min(width, len(record))):
            column = columns[index]
            row.set_value(column.column_id, _parse_cell(record[index], column.data_type), column.data_type)
        rows.append(row)
    table.replace_rows(rows)
    return table


def import_csv_text(content: str, table_name: str) -> Table:
    return table_from_records(split_csv_text(content), table_name)


def import_csv(path: Path) -> Table:
    """Read a CSV file into a new Table named after the file stem."""
    return import_csv_text(path.read_text(encoding="utf-8-sig"), path.stem)
