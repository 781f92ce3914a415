from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol

from ..models.row import CellSnapshot, Row
from ..models.table import Table

"""Reversible table edits.

Commands keep row ids, not positions: the target row is looked up again by id each time
the command runs, so an edit stays correct after rows around it were added, removed or
reordered. A recorded index is used only as the re-insertion point when a deleted row is
restored, falling back to append when that index is out of range. A restored row is
matched to the columns the table has at that moment.
"""

__all__ = [
    "AddRowCommand",
    "Command",
    "DeleteRowCommand",
    "EditCellCommand",
    "MultiDeleteCommand",
]


class Command(Protocol):
    @property
    def description(self) -> str: ...

    def execute(self) -> None: ...

    def undo(self) -> None: ...


class AddRowCommand:
    def __init__(self, table: Table, row: Row | None = None) -> None:
        self.table = table
        self.row = row if row is not None else table.new_row()
        self.known_columns = table.column_ids()

    @property
    def description(self) -> str:
        return "Add Row"

    def execute(self) -> None:
        if self.table.find_row(self.row.row_id) is None:
            self.table.insert_row(self.row, known_columns=self.known_columns)

    def undo(self) -> None:
        if self.table.remove_row(self.row.row_id):
            self.known_columns = self.table.column_ids()


class DeleteRowCommand:
    def __init__(self, table: Table, row_id: str) -> None:
        self.table = table
        self.row_id = row_id
        self.row: Row | None = table.find_row(row_id)
        self.row_index = table.index_of(row_id)
        self.known_columns = table.column_ids()

    @property
    def description(self) -> str:
        return "Delete Row"

    def execute(self) -> None:
        index = self.table.index_of(self.row_id)
        if index < 0:
            return
        self.row_index = index
        self.known_columns = self.table.column_ids()
        self.table.remove_row(self.row_id)

    def undo(self) -> None:
        if self.row is None or self.table.find_row(self.row_id) is not None:
            return
        self.table.insert_row(self.row, self.row_index, self.known_columns)


class MultiDeleteCommand:
    """Deletes several rows at once; undo restores them in ascending original index."""

    def __init__(self, table: Table, row_ids: Iterable[str]) -> None:
        self.table = table
        self.row_ids = list(dict.fromkeys(row_ids))
        self._removed: list[tuple[int, Row]] = []
        self.known_columns = table.column_ids()

    @property
    def description(self) -> str:
        count = len(self.row_ids)
        return f"Delete {count} Row{'s' if count != 1 else ''}"

    def execute(self) -> None:
        located = []
        for row_id in self.row_ids:
            index = self.table.index_of(row_id)
            if index >= 0:
                row = self.table.get_row(index)
                assert row is not None
                located.append((index, row))
        located.sort(key=lambda item: item[0])
        for _, row in located:
            self.table.remove_row(row.row_id)
        self._removed = located
        self.known_columns = self.table.column_ids()

    def undo(self) -> None:
        # Ascending order: each insert lands where it was before any later row shifts it
        for index, row in self._removed:
            if self.table.find_row(row.row_id) is None:
                self.table.insert_row(row, index, self.known_columns)


class EditCellCommand:
    """Sets one cell; undo puts back the captured canonical form, absent included."""

    def __init__(self, table: Table, row_id: str, column_id: str, new_value: Any) -> None:
        self.table = table
        self.row_id = row_id
        self.column_id = column_id
        self.new_value = new_value
        row = table.find_row(row_id)
        self.old: CellSnapshot = row.snapshot(column_id) if row is not None else CellSnapshot(None)
        self.applied = False

    @property
    def description(self) -> str:
        return f"Edit Cell [{self.column_id}]"

    def execute(self) -> None:
        self.applied = self.table.set_value(self.row_id, self.column_id, self.new_value)

    def undo(self) -> None:
        if self.applied:
            self.table.restore_cell(self.row_id, self.column_id, self.old)
