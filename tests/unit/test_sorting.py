from __future__ import annotations

from balance_forge.models import CellType, Row, Table
from balance_forge.services.filtering import ColumnFilter, FilterCondition, FilterOperator
from balance_forge.services.sorting import SortDirection, SortingState, apply_view, sort_rows


def _rows(values: list[object], column: str = "v") -> list[Row]:
    rows = []
    for value in values:
        row = Row()
        if value is not None:
            row.set_value(column, value)
        rows.append(row)
    return rows


def test_integer_sort_ascending_and_descending():
    rows = _rows([30, 5, 12])
    asc = sort_rows(rows, "v", SortDirection.ASCENDING, CellType.INTEGER)
    desc = sort_rows(rows, "v", SortDirection.DESCENDING, CellType.INTEGER)
    assert [r.get_value("v") for r in asc] == [5, 12, 30]
    assert [r.get_value("v") for r in desc] == [30, 12, 5]


def test_sort_is_stable_for_ties():
    rows = _rows([1, 2, 1, 2])
    result = sort_rows(rows, "v", SortDirection.ASCENDING, CellType.INTEGER)
    assert result == [rows[0], rows[2], rows[1], rows[3]]


def test_absent_values_first_ascending_last_descending():
    rows = _rows([3, None, 1])
    asc = sort_rows(rows, "v", SortDirection.ASCENDING, CellType.INTEGER)
    desc = sort_rows(rows, "v", SortDirection.DESCENDING, CellType.INTEGER)
    assert asc[0] is rows[1]
    assert desc[-1] is rows[1]


def test_string_sort_is_case_insensitive():
    rows = _rows(["banana", "Apple", "cherry"])
    result = sort_rows(rows, "v", SortDirection.ASCENDING, CellType.STRING)
    assert [r.get_value("v") for r in result] == ["Apple", "banana", "cherry"]


def test_none_direction_and_short_inputs_are_noops():
    rows = _rows([2, 1])
    assert sort_rows(rows, "v", SortDirection.NONE, CellType.INTEGER) == rows
    single = _rows([1])
    assert sort_rows(single, "v", SortDirection.ASCENDING, CellType.INTEGER) == single


def test_sorting_state_cycles():
    state = SortingState()
    state.toggle("hp")
    assert state.direction is SortDirection.ASCENDING
    state.toggle("hp")
    assert state.direction is SortDirection.DESCENDING
    state.toggle("hp")
    assert state.direction is SortDirection.NONE
    assert not state.active
    state.toggle("hp")
    assert state.direction is SortDirection.ASCENDING
    state.toggle("name")
    assert (state.sort_column_id, state.direction) == ("name", SortDirection.ASCENDING)


def test_filter_then_sort_scenario(balance_table: Table):
    value_filter = ColumnFilter(FilterCondition("value", FilterOperator.GREATER_THAN, 15))
    sorting = SortingState(sort_column_id="value", direction=SortDirection.DESCENDING)
    view = apply_view(balance_table, value_filter, sorting)
    assert [(r.get_value("name"), r.get_value("value")) for r in view] == [("Item3", 30), ("Item2", 20)]
    assert [r.get_value("name") for r in balance_table.rows] == ["Item1", "Item2", "Item3"]
