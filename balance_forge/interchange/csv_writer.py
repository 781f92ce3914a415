from __future__ import annotations

from pathlib import Path

from ..models.cell_value import format_cell
from ..models.table import Table

"""Table -> CSV translation.

Header line of column display names, then one line per row, all in table order. Cells
are written in display form and joined with ',' without quoting: a cell that contains a
comma or a newline (vectors and colors do) will not read back as one cell. This matches
the import contract and is a known limitation of the format.
"""

__all__ = [
    "export_csv",
    "table_to_csv_text",
]


def table_to_csv_text(table: Table) -> str:
    columns = table.columns
    lines = [",".join(c.display_name for c in columns)]
    for row in table.rows:
        lines.append(",".join(format_cell(row.get_value(c.column_id)) for c in columns))
    return "\n".join(lines) + "\n"


def export_csv(table: Table, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(table_to_csv_text(table), encoding="utf-8")
    return path
