from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models.cell_value import format_cell
from ..models.table import Table
from .commands import EditCellCommand

"""In-process cell clipboard.

One Clipboard instance per editing session; it is passed to whoever needs it rather
than held in module state. ``text`` mirrors what a system clipboard would receive.
"""

__all__ = [
    "Clipboard",
]


class Clipboard:
    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self.text = ""

    @property
    def has_data(self) -> bool:
        return bool(self._values)

    def copy(self, column_id: str, value: Any) -> None:
        self._values = {column_id: value}
        self.text = format_cell(value)

    def copy_multiple(self, values: Mapping[str, Any]) -> None:
        self._values = dict(values)
        self.text = "\t".join(format_cell(v) for v in values.values())

    def can_paste(self, column_id: str) -> bool:
        return self.has_data and (column_id in self._values or self.text != "")

    def paste(self, column_id: str) -> Any:
        """Copied value for ``column_id``, falling back to the plain text buffer."""
        if column_id in self._values:
            return self._values[column_id]
        return self.text

    def paste_multiple(self) -> dict[str, Any]:
        return dict(self._values)

    def clear(self) -> None:
        self._values.clear()
        self.text = ""

    def paste_command(self, table: Table, row_id: str, column_id: str) -> EditCellCommand | None:
        """Undoable paste into one cell, or None when nothing can be pasted there."""
        if table.find_row(row_id) is None or not self.can_paste(column_id):
            return None
        return EditCellCommand(table, row_id, column_id, self.paste(column_id))
