from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pandas as pd

from ..models.cell_value import CellType
from ..models.column import ColumnSchema
from ..models.row import Row
from ..models.table import Table

"""pandas DataFrame views of balance tables.

``table_to_frame`` is a read-only derived view (one column per display name, indexed by
row id) for analysis and inspection. ``table_from_frame`` builds a new table from a frame,
typing columns from the frame's dtypes.
"""

__all__ = [
    "table_from_frame",
    "table_to_frame",
]

_PANDAS_DTYPES: dict[CellType, str] = {
    CellType.INTEGER: "Int64",
    CellType.FLOAT: "Float64",
    CellType.BOOLEAN: "boolean",
}


def _labels(columns: Sequence[ColumnSchema]) -> list[str]:
    """Frame column labels; repeated display names are qualified with the column id."""
    seen: set[str] = set()
    labels = []
    for column in columns:
        label = column.display_name
        if label in seen:
            label = f"{label} ({column.column_id})"
        seen.add(label)
        labels.append(label)
    return labels


def table_to_frame(table: Table, rows: Sequence[Row] | None = None) -> pd.DataFrame:
    """DataFrame of ``rows`` (defaults to all table rows). Absent cells become NA."""
    columns = table.columns
    source = table.rows if rows is None else list(rows)
    labels = _labels(columns)
    data: dict[str, list[Any]] = {label: [] for label in labels}
    for row in source:
        for label, column in zip(labels, columns, strict=True):
            data[label].append(row.get_value(column.column_id))
    frame = pd.DataFrame(data, index=pd.Index([r.row_id for r in source], name="row_id"))
    for label, column in zip(labels, columns, strict=True):
        dtype = _PANDAS_DTYPES.get(column.data_type)
        if dtype is not None:
            frame[label] = frame[label].astype(dtype)
    return frame


def _cell_type_for(series: pd.Series) -> CellType:
    if pd.api.types.is_bool_dtype(series):
        return CellType.BOOLEAN
    if pd.api.types.is_integer_dtype(series):
        return CellType.INTEGER
    if pd.api.types.is_float_dtype(series):
        return CellType.FLOAT
    return CellType.STRING


def _to_python(value: Any, cell_type: CellType) -> Any:
    if value is None or (not isinstance(value, (list, tuple)) and pd.isna(value)):
        return None
    if cell_type is CellType.BOOLEAN:
        return bool(value)
    if cell_type is CellType.INTEGER:
        return int(value)
    if cell_type is CellType.FLOAT:
        return float(value)
    return str(value)


def table_from_frame(frame: pd.DataFrame, table_name: str) -> Table:
    table = Table(table_name=table_name)
    columns: list[ColumnSchema] = []
    for index, name in enumerate(frame.columns):
        column = ColumnSchema(f"col_{index}", str(name), _cell_type_for(frame[name]))
        table.add_column(column)
        columns.append(column)

    rows: list[Row] = []
    for record in frame.itertuples(index=False, name=None):
        row = Row()
        for column, value in zip(columns, record, strict=True):
            row.set_value(column.column_id, _to_python(value, column.data_type), column.data_type)
        rows.append(row)
    table.replace_rows(rows)
    return table
