from __future__ import annotations

from balance_forge.models import Table, Vector2
from balance_forge.services.clipboard import Clipboard
from balance_forge.services.undo_redo import UndoRedoService


def test_copy_and_paste_single_value():
    clipboard = Clipboard()
    assert not clipboard.has_data
    clipboard.copy("offset", Vector2(1, 2))
    assert clipboard.text == "(1, 2)"
    assert clipboard.paste("offset") == Vector2(1, 2)
    # other columns get the text form
    assert clipboard.paste("name") == "(1, 2)"


def test_copy_multiple_joins_with_tabs():
    clipboard = Clipboard()
    clipboard.copy_multiple({"name": "Sword", "value": 10})
    assert clipboard.text == "Sword\t10"
    assert clipboard.paste_multiple() == {"name": "Sword", "value": 10}
    clipboard.clear()
    assert not clipboard.has_data
    assert not clipboard.can_paste("name")


def test_paste_command_is_undoable(balance_table: Table):
    clipboard = Clipboard()
    clipboard.copy("value", 77)
    target = balance_table.rows[1]
    cmd = clipboard.paste_command(balance_table, target.row_id, "value")
    assert cmd is not None

    service = UndoRedoService()
    service.execute_command(cmd)
    assert target.get_value("value") == 77
    service.undo()
    assert target.get_value("value") == 20


def test_paste_command_unknown_row(balance_table: Table):
    clipboard = Clipboard()
    clipboard.copy("value", 1)
    assert clipboard.paste_command(balance_table, "missing", "value") is None
